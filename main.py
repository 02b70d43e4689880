#!/usr/bin/env python3
"""
postshards - static post catalog with sharded listings
Main entry point following Clean Architecture principles

Architecture Layers:
- Domain: posts, slugs and the listing engine
- Application: index build and selection sync use cases
- Infrastructure: persistence, transports, shard cache, config
- Presentation: listing controllers, rendering and the CLI
"""

from postshards.presentation.cli import cli

if __name__ == "__main__":
    cli()
