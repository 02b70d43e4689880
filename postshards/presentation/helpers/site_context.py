"""
Shared CLI context: resolves the site configuration for every command
"""

import click
from rich.console import Console
from rich.markup import escape

from ...domain.exceptions import ConfigError
from ...infrastructure.config.site_config import SiteConfig, SiteConfigManager


def load_site_config(ctx: click.Context, console: Console) -> SiteConfig:
    """SiteConfig for this invocation; exits with status 1 on a bad config."""
    obj = ctx.find_object(dict) or {}
    manager = SiteConfigManager(config_path=obj.get('config_path'))
    try:
        return manager.load()
    except ConfigError as e:
        console.print(f"[red]❌ Configuration error: {escape(str(e))}[/red]")
        ctx.exit(1)
