"""
Browse Commands - listing client

Runs one listing session against a built data directory (or a deployed
site) and paints the resulting view:

- browse:   main listing, ?cat=<label>, with the category bar
- category: read-only category page, ?c=<label>
- tag:      read-only tag page, ?tag=<label>
"""

import asyncio
from typing import Optional
from urllib.parse import urlencode

import click
from rich.console import Console
from rich.markup import escape

from ...domain.entities.post import ShardKind
from ...infrastructure.config.site_config import SiteConfig
from ...infrastructure.http_transport import HTTPTransport, transport_for
from ...infrastructure.selection_store import PageLocation, YamlFileStorage
from ...infrastructure.shard_cache import ShardCache
from ..helpers.listing_renderer import ConsoleRenderer, ListingRenderer, ListingView
from ..helpers.site_context import load_site_config
from ..listing_controller import IndexListing, LabelListing, ListingController


def _listing_options(func):
    func = click.option('--more', type=int, default=0, show_default=True,
                        help='Press "load more" this many times')(func)
    func = click.option('--oldest', is_flag=True, help='Sort oldest first')(func)
    func = click.option('--search', '-q', help='Search text (title, excerpt, category, tags)')(func)
    func = click.option('--base-url', '-b',
                        help='Where shards live: an http(s) URL or a directory (default: data_dir)')(func)
    return func


def _make_cache(config: SiteConfig, base_url: str, transport: HTTPTransport) -> ShardCache:
    return ShardCache(
        transport,
        base_url,
        layout=config.layout(),
        timeout=config.request_timeout,
        fallback_category=config.fallback_category,
    )


async def _drive(page: ListingController, search: Optional[str], oldest: bool, more: int) -> ListingView:
    """Replay the requested user actions in the order a reader would perform them."""
    view = page.view
    if search:
        page.type_search(search)
        view = await page.settle()
    if oldest:
        view = await page.toggle_sort()
    for _ in range(max(0, more)):
        view = await page.load_more()
    return view


def _finish(ctx: click.Context, console: Console, view: ListingView, location: PageLocation) -> None:
    ConsoleRenderer(console).paint(view)
    console.print(f"[dim]URL: {escape(location.href)}[/dim]")
    if view.is_error:
        ctx.exit(1)


@click.command('browse')
@click.option('--url', default='/', show_default=True,
              help='Page URL with its query string, e.g. "/?cat=Dev"')
@click.option('--category', '-c', help='Pick a category after loading, like clicking its chip')
@click.option('--storage', type=click.Path(dir_okay=False),
              help='Local storage file (default: storage_path from site.yaml)')
@_listing_options
@click.pass_context
def browse_command(
    ctx: click.Context,
    url: str,
    category: Optional[str],
    storage: Optional[str],
    base_url: Optional[str],
    search: Optional[str],
    oldest: bool,
    more: int,
) -> None:
    """
    📚 Browse the main listing (progressive lite → full loading)

    \b
    Examples:
        python main.py browse
        python main.py browse --url "/?cat=Dev" --more 1
        python main.py browse --search kotlin
        python main.py browse --base-url https://example.com/data
    """
    console = Console()
    config = load_site_config(ctx, Console(stderr=True))
    base = base_url or config.client_base_url
    location = PageLocation(url)

    async def run() -> ListingView:
        transport = transport_for(base)
        cache = _make_cache(config, base, transport)
        page = IndexListing(
            cache,
            location,
            YamlFileStorage(storage or config.storage_path),
            ListingRenderer(config.fallback_category, config.page_size),
            restore_last=config.restore_last_category,
            page_size=config.page_size,
            debounce_seconds=config.debounce_seconds,
        )
        try:
            view = await page.load()
            if category is not None and not view.is_error:
                view = await page.select_category(category)
            if not view.is_error:
                view = await _drive(page, search, oldest, more)
            return view
        finally:
            await transport.close()

    _finish(ctx, console, asyncio.run(run()), location)


def _label_page(ctx: click.Context, kind: ShardKind, page_path: str, label: str,
                base_url: Optional[str], search: Optional[str], oldest: bool, more: int) -> None:
    console = Console()
    config = load_site_config(ctx, Console(stderr=True))
    base = base_url or config.client_base_url
    param = LabelListing.PARAMS[kind]
    location = PageLocation(f"{page_path}?{urlencode({param: label})}" if label else page_path)

    async def run() -> ListingView:
        transport = transport_for(base)
        cache = _make_cache(config, base, transport)
        page = LabelListing(
            cache,
            location,
            kind,
            ListingRenderer(config.fallback_category, config.page_size),
            page_size=config.page_size,
            debounce_seconds=config.debounce_seconds,
        )
        try:
            view = await page.load()
            if page.label and not view.is_error:
                view = await _drive(page, search, oldest, more)
            return view
        finally:
            await transport.close()

    _finish(ctx, console, asyncio.run(run()), location)


@click.command('category')
@click.argument('label', required=False, default='')
@_listing_options
@click.pass_context
def category_command(ctx, label, base_url, search, oldest, more) -> None:
    """
    🗂️  Browse one category page (?c=LABEL)

    \b
    Example:
        python main.py category "Dev Notes" --search python
    """
    _label_page(ctx, ShardKind.CATEGORY, '/category.html', label, base_url, search, oldest, more)


@click.command('tag')
@click.argument('label', required=False, default='')
@_listing_options
@click.pass_context
def tag_command(ctx, label, base_url, search, oldest, more) -> None:
    """
    🏷️  Browse one tag page (?tag=LABEL)

    \b
    Example:
        python main.py tag kotlin --oldest
    """
    _label_page(ctx, ShardKind.TAG, '/tags.html', label, base_url, search, oldest, more)
