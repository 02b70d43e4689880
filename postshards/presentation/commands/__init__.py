"""
Presentation Commands Module
All CLI command implementations
"""

from .build_command import build_command
from .browse_command import browse_command, category_command, tag_command

__all__ = [
    'build_command',
    'browse_command',
    'category_command',
    'tag_command',
]
