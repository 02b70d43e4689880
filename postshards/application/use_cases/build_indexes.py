"""
Application Use Cases - Index Build
Turns the canonical posts.json into lite, per-category and per-tag shards
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from ...domain.entities.post import DEFAULT_FALLBACK_CATEGORY, LITE_SIZE, IndexEntry, Post
from ...domain.repositories.base import IndexWriter, PostSource
from ...domain.services.ordering import collation_key, newest_first
from ...domain.services.slug_codec import slugify


logger = logging.getLogger(__name__)


@dataclass
class LabelShard:
    """One generated shard together with its index entry"""
    entry: IndexEntry
    posts: List[Post]


@dataclass
class BuildResult:
    """Everything one build produces, held in memory until written"""
    lite: List[Post]
    category_shards: List[LabelShard]
    tag_shards: List[LabelShard]
    total_posts: int = 0
    dropped: int = 0

    @property
    def category_index(self) -> List[IndexEntry]:
        return [s.entry for s in self.category_shards]

    @property
    def tag_index(self) -> List[IndexEntry]:
        return [s.entry for s in self.tag_shards]


def _group_shards(groups: Dict[str, List[Post]], kind: str) -> List[LabelShard]:
    shards = [
        LabelShard(IndexEntry(name=name, slug=slugify(name), count=len(posts)), posts)
        for name, posts in groups.items()
    ]
    shards.sort(key=lambda s: (-s.entry.count, collation_key(s.entry.name)))

    seen: Dict[str, str] = {}
    for shard in shards:
        other = seen.setdefault(shard.entry.slug, shard.entry.name)
        if other != shard.entry.name:
            logger.warning("%s labels %r and %r share slug %r; the later shard file wins",
                           kind, other, shard.entry.name, shard.entry.slug)
    return shards


def build_indexes(
    raw_posts: Sequence[Any],
    lite_size: int = LITE_SIZE,
    fallback_category: str = DEFAULT_FALLBACK_CATEGORY,
) -> BuildResult:
    """Normalize, filter, sort and group the raw post collection.

    Posts without a url are dropped. The result is sorted newest first and
    every shard keeps that order. A post appears once per tag occurrence, so a
    repeated tag counts twice.
    """
    normalized = [
        Post.from_dict(raw if isinstance(raw, dict) else {}, fallback_category=fallback_category)
        for raw in raw_posts
    ]
    kept = newest_first(p for p in normalized if p.url)
    dropped = len(normalized) - len(kept)
    if dropped:
        logger.info("Dropped %d post(s) without a url", dropped)

    by_category: Dict[str, List[Post]] = {}
    by_tag: Dict[str, List[Post]] = {}
    for post in kept:
        by_category.setdefault(post.category or fallback_category, []).append(post)
        for tag in post.tags:
            by_tag.setdefault(tag, []).append(post)

    return BuildResult(
        lite=kept[:lite_size],
        category_shards=_group_shards(by_category, "category"),
        tag_shards=_group_shards(by_tag, "tag"),
        total_posts=len(kept),
        dropped=dropped,
    )


@dataclass
class BuildIndexesRequest:
    """Request DTO for the index build"""
    lite_size: int = LITE_SIZE
    fallback_category: str = DEFAULT_FALLBACK_CATEGORY
    lite_file: str = "posts-lite.json"
    categories_index_file: str = "categories-index.json"
    tags_index_file: str = "tags-index.json"
    category_dir: str = "category"
    tag_dir: str = "tag"


@dataclass
class BuildIndexesResponse:
    """Response DTO for the index build"""
    result: BuildResult
    written: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)

    @property
    def category_count(self) -> int:
        return len(self.result.category_shards)

    @property
    def tag_count(self) -> int:
        return len(self.result.tag_shards)


def _serialize(posts: List[Post]) -> List[Dict[str, Any]]:
    return [p.to_dict() for p in posts]


class BuildIndexesUseCase:
    """
    Offline index builder
    Reads the source, builds everything in memory, then publishes it.
    A fatal source error propagates before anything is written.
    """

    def __init__(self, source: PostSource, writer: IndexWriter):
        self._source = source
        self._writer = writer

    def execute(self, request: BuildIndexesRequest) -> BuildIndexesResponse:
        raw_posts = self._source.load_raw()
        logger.info("Loaded %d raw post(s)", len(raw_posts))

        result = build_indexes(
            raw_posts,
            lite_size=request.lite_size,
            fallback_category=request.fallback_category,
        )
        response = BuildIndexesResponse(result=result)
        write = self._writer.write_json

        response.written.append(write(request.lite_file, _serialize(result.lite)))
        response.written.append(write(
            request.categories_index_file, [e.to_dict() for e in result.category_index]))
        response.written.append(write(
            request.tags_index_file, [e.to_dict() for e in result.tag_index]))

        for directory, shards in ((request.category_dir, result.category_shards),
                                  (request.tag_dir, result.tag_shards)):
            names = []
            for shard in shards:
                name = f"{shard.entry.slug}.json"
                names.append(name)
                response.written.append(write(f"{directory}/{name}", _serialize(shard.posts)))
            response.removed.extend(self._writer.prune(directory, names))

        if response.removed:
            logger.info("Removed %d stale shard file(s)", len(response.removed))
        return response


__all__ = [
    "BuildIndexesRequest",
    "BuildIndexesResponse",
    "BuildIndexesUseCase",
    "BuildResult",
    "LabelShard",
    "build_indexes",
]
