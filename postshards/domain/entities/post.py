"""
Domain Entities - Core Catalog Objects
Posts, shard identities, index entries and the listing selection
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional


ALL_CATEGORIES = "all"
PAGE_SIZE = 12
LITE_SIZE = 12
DEFAULT_FALLBACK_CATEGORY = "Uncategorized"

_DATE_RE = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")


def safe_text(value: Any) -> str:
    """Stringify and trim a loosely typed JSON value (None becomes '')."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value).strip()


def parse_date(value: Any) -> Optional[date]:
    """Parse a strict YYYY-MM-DD string; anything else yields None."""
    match = _DATE_RE.fullmatch(safe_text(value))
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


@dataclass
class Post:
    """
    Core Post Entity
    One catalog entry as stored in posts.json and every shard
    """
    title: str = ""
    excerpt: str = ""
    date: str = ""
    url: str = ""
    cover: str = ""
    thumb: str = ""
    category: str = ""
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any], fallback_category: Optional[str] = None) -> "Post":
        """Build a normalized post from a raw JSON object.

        Every text field is stringified and trimmed. Tags must be a list to be
        kept; blank tags are dropped but duplicates are not. When
        ``fallback_category`` is given it replaces a blank category.
        """
        raw_tags = raw.get("tags")
        tags = [safe_text(t) for t in raw_tags] if isinstance(raw_tags, list) else []
        category = safe_text(raw.get("category"))
        if not category and fallback_category:
            category = fallback_category
        return cls(
            title=safe_text(raw.get("title")),
            excerpt=safe_text(raw.get("excerpt")),
            date=safe_text(raw.get("date")),
            url=safe_text(raw.get("url")),
            cover=safe_text(raw.get("cover")),
            thumb=safe_text(raw.get("thumb")),
            category=category,
            tags=[t for t in tags if t],
        )

    @property
    def published_on(self) -> Optional[date]:
        return parse_date(self.date)

    @property
    def image(self) -> str:
        """Thumbnail reference, preferring ``thumb`` over ``cover``."""
        return self.thumb or self.cover

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization (stable key order)"""
        data: Dict[str, Any] = {
            "title": self.title,
            "excerpt": self.excerpt,
            "date": self.date,
            "url": self.url,
            "cover": self.cover,
        }
        if self.thumb:
            data["thumb"] = self.thumb
        data["category"] = self.category
        data["tags"] = list(self.tags)
        return data


class ShardKind(Enum):
    """Kind of precomputed shard or summary index"""
    LITE = "lite"
    FULL = "full"
    CATEGORY = "category"
    TAG = "tag"
    CATEGORIES_INDEX = "categories-index"
    TAGS_INDEX = "tags-index"


@dataclass(frozen=True)
class ShardKey:
    """Value Object identifying one shard for fetching and caching"""
    kind: ShardKind
    label: str = ""

    def __post_init__(self):
        labelled = self.kind in (ShardKind.CATEGORY, ShardKind.TAG)
        if labelled and not self.label:
            raise ValueError(f"{self.kind.value} shard requires a label")
        if not labelled and self.label:
            raise ValueError(f"{self.kind.value} shard does not take a label")

    @classmethod
    def lite(cls) -> "ShardKey":
        return cls(ShardKind.LITE)

    @classmethod
    def full(cls) -> "ShardKey":
        return cls(ShardKind.FULL)

    @classmethod
    def category(cls, name: str) -> "ShardKey":
        return cls(ShardKind.CATEGORY, name.strip())

    @classmethod
    def tag(cls, name: str) -> "ShardKey":
        return cls(ShardKind.TAG, name.strip())

    @classmethod
    def categories_index(cls) -> "ShardKey":
        return cls(ShardKind.CATEGORIES_INDEX)

    @classmethod
    def tags_index(cls) -> "ShardKey":
        return cls(ShardKind.TAGS_INDEX)

    @property
    def is_index(self) -> bool:
        return self.kind in (ShardKind.CATEGORIES_INDEX, ShardKind.TAGS_INDEX)

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.label}" if self.label else self.kind.value


@dataclass(frozen=True)
class IndexEntry:
    """Value Object for one category or tag in a summary index"""
    name: str
    slug: str
    count: int

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> Optional["IndexEntry"]:
        """Lenient parse; entries without a name are skipped (None)."""
        name = safe_text(raw.get("name"))
        if not name:
            return None
        try:
            count = int(raw.get("count") or 0)
        except (TypeError, ValueError):
            count = 0
        return cls(name=name, slug=safe_text(raw.get("slug")), count=count)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "slug": self.slug, "count": self.count}


@dataclass
class Selection:
    """
    Listing selection state
    Only ``category`` is part of a shareable view; the rest is session-only.
    """
    category: str = ALL_CATEGORIES
    sort_descending: bool = True
    search_text: str = ""
    visible_count: int = PAGE_SIZE

    @property
    def is_all(self) -> bool:
        return self.category == ALL_CATEGORIES

    @property
    def query(self) -> str:
        """Normalized search needle (trimmed, lowercased)"""
        return self.search_text.strip().lower()
