"""
Listing Renderer
Projects a computed listing onto a view model and paints it with rich
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ...domain.entities.post import ALL_CATEGORIES, DEFAULT_FALLBACK_CATEGORY, PAGE_SIZE, IndexEntry, Post
from ...domain.services.listing_engine import ListingResult, load_more_visible
from ...domain.services.ordering import collation_key


UNTITLED = "Untitled"
NO_EXCERPT = "No summary available."
NO_DATE = "-"
NO_POSTS = "No posts to show."
NO_MATCHES = "No search results."
LOAD_FAILED = "Something went wrong while loading the list."
ALL_LABEL = "All"


@dataclass
class Card:
    title: str
    url: str
    excerpt: str
    image: Optional[str]
    date_label: str
    category: str


@dataclass
class Chip:
    key: str
    name: str
    count: int
    active: bool = False


@dataclass
class ListingView:
    """Everything a page shows; no behaviour of its own"""
    cards: List[Card] = field(default_factory=list)
    count_text: str = "0"
    hint: str = ""
    sort_label: str = ""
    sort_visible: bool = False
    load_more_visible: bool = False
    state_title: Optional[str] = None
    state_detail: Optional[str] = None
    chips: List[Chip] = field(default_factory=list)
    is_error: bool = False

    @property
    def shows_state(self) -> bool:
        return self.state_title is not None


def format_date(value: str) -> str:
    """YYYY.MM.DD for valid dates, the raw text otherwise, '-' when blank."""
    published = Post(date=value).published_on
    if published is None:
        return value.strip() or NO_DATE
    return f"{published.year}.{published.month:02d}.{published.day:02d}"


def sort_label(descending: bool) -> str:
    return "Newest first" if descending else "Oldest first"


class ListingRenderer:
    """Pure projection from listing results to ``ListingView``."""

    def __init__(self, fallback_category: str = DEFAULT_FALLBACK_CATEGORY, page_size: int = PAGE_SIZE):
        self.fallback_category = fallback_category
        self.page_size = page_size

    def card(self, post: Post) -> Card:
        return Card(
            title=post.title or UNTITLED,
            url=post.url or "#",
            excerpt=post.excerpt or NO_EXCERPT,
            image=post.image or None,
            date_label=format_date(post.date),
            category=post.category or self.fallback_category,
        )

    def category_bar(self, entries: Iterable[IndexEntry], selected: str) -> List[Chip]:
        """"All" chip followed by every category sorted by name."""
        counts = {}
        for entry in entries:
            counts[entry.name] = entry.count
        chips = [Chip(ALL_CATEGORIES, ALL_LABEL, sum(counts.values()), selected == ALL_CATEGORIES)]
        for name in sorted(counts, key=collation_key):
            chips.append(Chip(name, name, counts[name], selected == name))
        return chips

    def project(
        self,
        result: ListingResult,
        *,
        category_label: str,
        sort_descending: bool,
        search_text: str = "",
        visible_count: int = PAGE_SIZE,
        empty_detail: Optional[str] = None,
        chips: Optional[List[Chip]] = None,
    ) -> ListingView:
        total = result.total_matched
        query = search_text.strip()

        hint = f"{total} posts · {sort_label(sort_descending)} · Category: {category_label}"
        if query:
            hint += f" · Search: {query}"

        view = ListingView(
            cards=[self.card(p) for p in result.rendered],
            count_text=str(total),
            hint=hint,
            sort_label=sort_label(sort_descending),
            sort_visible=total >= 2,
            load_more_visible=load_more_visible(total, visible_count, self.page_size),
            chips=list(chips or []),
        )
        if not view.cards:
            view.state_title = NO_MATCHES if query else NO_POSTS
            view.state_detail = empty_detail
            view.load_more_visible = False
        return view

    def message(self, title: str, detail: Optional[str] = None, *, category_label: str = ALL_LABEL,
                is_error: bool = False, chips: Optional[List[Chip]] = None) -> ListingView:
        """Empty view carrying only a state message"""
        return ListingView(
            count_text="0",
            hint=f"0 posts · {sort_label(True)} · Category: {category_label}",
            sort_label=sort_label(True),
            state_title=title,
            state_detail=detail,
            chips=list(chips or []),
            is_error=is_error,
        )

    def error(self, detail: Optional[str] = None, **kwargs) -> ListingView:
        return self.message(LOAD_FAILED, detail, is_error=True, **kwargs)


class ConsoleRenderer:
    """Paints a ``ListingView`` to a rich console"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def paint(self, view: ListingView) -> None:
        console = self.console

        if view.chips:
            labels = []
            for chip in view.chips:
                text = f"{escape(chip.name)} {chip.count}"
                labels.append(f"[bold reverse] {text} [/bold reverse]" if chip.active else f"[dim]{text}[/dim]")
            console.print("  ".join(labels))

        console.print(f"[bold cyan]{view.count_text}[/bold cyan] [dim]{escape(view.hint)}[/dim]")

        if view.shows_state:
            style = "red" if view.is_error else "yellow"
            body = f"[bold]{escape(view.state_title)}[/bold]"
            if view.state_detail:
                body += f"\n[dim]{escape(view.state_detail)}[/dim]"
            console.print(Panel(body, border_style=style))
            return

        table = Table(show_header=True, header_style="bold magenta", show_lines=False)
        table.add_column("Date", style="cyan", no_wrap=True)
        table.add_column("Category", style="green")
        table.add_column("Title", style="bold")
        table.add_column("Summary", style="dim")
        table.add_column("Link", overflow="fold")
        for card in view.cards:
            cells = (card.date_label, card.category, card.title, card.excerpt, card.url)
            table.add_row(*(escape(cell) for cell in cells))
        console.print(table)

        if view.load_more_visible:
            console.print(f"[cyan]… {len(view.cards)} of {view.count_text} shown (load more)[/cyan]")


__all__ = [
    "Card",
    "Chip",
    "ConsoleRenderer",
    "ListingRenderer",
    "ListingView",
    "format_date",
]
