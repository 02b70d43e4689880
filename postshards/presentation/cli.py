"""
CLI Presentation Layer - Main Entry Point
Clean routing to modular commands
"""

from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..domain.exceptions import ConfigError
from ..domain.services.slug_codec import slugify
from ..infrastructure.config.site_config import CONFIG_ENV_VAR, SiteConfigManager
from .commands import browse_command, build_command, category_command, tag_command
from .helpers.logging_setup import configure_logging


@click.group()
@click.option('--config', 'config_path', type=click.Path(dir_okay=False), envvar=CONFIG_ENV_VAR,
              help='Site configuration file (default: site.yaml)')
@click.option('--verbose', '-v', is_flag=True, help='Debug logging')
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], verbose: bool):
    """🗃️  postshards CLI - static post catalog with sharded listings"""
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path

    level = 'DEBUG' if verbose else None
    if level is None:
        try:
            level = SiteConfigManager(config_path=config_path).load().log_level
        except ConfigError:
            # reported by the command itself
            level = 'INFO'
    configure_logging(level)


# Register commands
cli.add_command(build_command)
cli.add_command(browse_command)
cli.add_command(category_command)
cli.add_command(tag_command)


@cli.command('slug')
@click.argument('labels', nargs=-1, required=True)
def slug_command(labels):
    """
    🔤 Show the shard slug for each label
    """
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Label")
    table.add_column("Slug", style="cyan")
    for label in labels:
        table.add_row(escape(label), slugify(label))
    Console().print(table)


if __name__ == "__main__":
    cli()
