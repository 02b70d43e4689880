"""Listing engine: filter -> sort -> paginate over one base shard.

Everything here is pure; the same base shard and selection always give the
same result. ``total_matched`` counts the whole filtered list so callers can
decide whether a "load more" control is needed independently of how many
rows are rendered right now.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

from ..entities.post import PAGE_SIZE, Post, Selection
from .ordering import epoch_date


@dataclass
class ListingResult:
    rendered: List[Post] = field(default_factory=list)
    total_matched: int = 0

    @property
    def shown(self) -> int:
        return len(self.rendered)


def matches(post: Post, needle: str) -> bool:
    """True when ``needle`` (already lowercased) occurs in any searchable field."""
    tags = " ".join(t.strip().lower() for t in post.tags)
    return (
        needle in post.title.lower()
        or needle in post.excerpt.lower()
        or needle in post.category.lower()
        or needle in tags
    )


def filter_posts(posts: Sequence[Post], search_text: str) -> List[Post]:
    needle = search_text.strip().lower()
    if not needle:
        return list(posts)
    return [p for p in posts if matches(p, needle)]


def sort_posts(posts: Sequence[Post], descending: bool = True) -> List[Post]:
    # sorted() keeps equal dates in input order in both directions
    return sorted(posts, key=epoch_date, reverse=descending)


def paginate(posts: Sequence[Post], visible_count: int) -> List[Post]:
    return list(posts[:max(0, visible_count)])


def compute(base: Sequence[Post], selection: Selection) -> ListingResult:
    """Produce the render list and match count for ``selection`` over ``base``."""
    ordered = sort_posts(filter_posts(base, selection.search_text), selection.sort_descending)
    return ListingResult(
        rendered=paginate(ordered, selection.visible_count),
        total_matched=len(ordered),
    )


def load_more_visible(total_matched: int, visible_count: int, page_size: int = PAGE_SIZE) -> bool:
    """Show "load more" only past one page and while rows remain hidden."""
    return total_matched > page_size and visible_count < total_matched


__all__ = [
    "ListingResult",
    "compute",
    "filter_posts",
    "load_more_visible",
    "matches",
    "paginate",
    "sort_posts",
]
