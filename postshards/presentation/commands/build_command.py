"""
Build Command - Index Builder

Regenerates every shard and summary index from data/posts.json.
A missing or malformed source aborts before any file is written.
"""

from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...application.use_cases.build_indexes import (
    BuildIndexesRequest,
    BuildIndexesResponse,
    BuildIndexesUseCase,
)
from ...domain.exceptions import BuildError
from ...infrastructure.config.site_config import SiteConfig
from ...infrastructure.persistence import JsonIndexWriter, JsonPostSource
from ..helpers.site_context import load_site_config


def build_request(config: SiteConfig) -> BuildIndexesRequest:
    return BuildIndexesRequest(
        lite_size=config.lite_size,
        fallback_category=config.fallback_category,
        lite_file=config.lite_file,
        categories_index_file=config.categories_index_file,
        tags_index_file=config.tags_index_file,
        category_dir=config.category_dir,
        tag_dir=config.tag_dir,
    )


@click.command('build')
@click.option(
    '--data-dir',
    '-d',
    type=click.Path(file_okay=False),
    help='Directory holding posts.json and the generated files (default: data/)'
)
@click.pass_context
def build_command(ctx: click.Context, data_dir: Optional[str]) -> None:
    """
    🏗️  Build the lite, category and tag shards from posts.json

    \b
    Generates under the data directory:
      posts-lite.json, categories-index.json, tags-index.json,
      category/<slug>.json, tag/<slug>.json

    \b
    Examples:
        python main.py build
        python main.py build --data-dir ./public/data
    """
    console = Console()
    err_console = Console(stderr=True)
    config = load_site_config(ctx, err_console).with_overrides(data_dir=data_dir)

    use_case = BuildIndexesUseCase(
        source=JsonPostSource(config.source_path),
        writer=JsonIndexWriter(config.data_path),
    )
    try:
        response = use_case.execute(build_request(config))
    except BuildError as e:
        err_console.print(f"[red]❌ {escape(str(e))}[/red]")
        err_console.print("[dim]No index files were written.[/dim]")
        ctx.exit(1)

    _print_summary(console, config, response)


def _print_summary(console: Console, config: SiteConfig, response: BuildIndexesResponse) -> None:
    result = response.result

    table = Table(title="Generated indexes", show_header=True, header_style="bold magenta")
    table.add_column("Output", style="cyan")
    table.add_column("Entries", justify="right", style="green")
    table.add_row(config.lite_file, str(len(result.lite)))
    table.add_row(config.categories_index_file, str(response.category_count))
    table.add_row(config.tags_index_file, str(response.tag_count))
    table.add_row(f"{config.category_dir}/*.json", str(response.category_count))
    table.add_row(f"{config.tag_dir}/*.json", str(response.tag_count))
    console.print(table)

    if result.dropped:
        console.print(f"[yellow]⚠ Skipped {result.dropped} post(s) without a url[/yellow]")
    if response.removed:
        console.print(f"[dim]Removed {len(response.removed)} stale shard file(s)[/dim]")

    console.print("[bold green]✅ Index build complete[/bold green]")
    console.print(f"- posts: {result.total_posts}")
    console.print(f"- categories: {response.category_count} tags: {response.tag_count}")
