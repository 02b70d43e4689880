"""
Presentation Layer Helpers
"""

from .listing_renderer import ConsoleRenderer, ListingRenderer, ListingView
from .logging_setup import configure_logging

__all__ = [
    'ConsoleRenderer',
    'ListingRenderer',
    'ListingView',
    'configure_logging',
]
