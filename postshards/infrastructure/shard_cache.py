"""Session-scoped shard cache with an explicit per-key loading state machine.

States per shard key::

    IDLE --get--> LOADING --ok--> READY
                          \\-fail-> ERROR --get--> LOADING ...

A READY key is served from memory for the rest of the session; there is no
eviction. Identical concurrent requests are not merged: each one performs its
own fetch and the last to resolve owns the cached value. Failures are never
retried automatically; a later ``get`` for an ERROR key starts a new fetch.
"""
from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote

from ..domain.entities.post import DEFAULT_FALLBACK_CATEGORY, IndexEntry, Post, ShardKey, ShardKind
from ..domain.exceptions import ShardFetchError
from ..domain.services.slug_codec import slugify
from .http_transport import NO_CACHE_HEADERS, HTTPTransport


logger = logging.getLogger(__name__)

Shard = List[Post]
Index = List[IndexEntry]


class ShardState(Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class ShardLayout:
    """Relative file names of every shard under the static base"""
    lite_file: str = "posts-lite.json"
    full_file: str = "posts.json"
    categories_index_file: str = "categories-index.json"
    tags_index_file: str = "tags-index.json"
    category_dir: str = "category"
    tag_dir: str = "tag"

    def path_for(self, key: ShardKey) -> str:
        if key.kind is ShardKind.CATEGORY:
            return f"{self.category_dir}/{quote(slugify(key.label))}.json"
        if key.kind is ShardKind.TAG:
            return f"{self.tag_dir}/{quote(slugify(key.label))}.json"
        return {
            ShardKind.LITE: self.lite_file,
            ShardKind.FULL: self.full_file,
            ShardKind.CATEGORIES_INDEX: self.categories_index_file,
            ShardKind.TAGS_INDEX: self.tags_index_file,
        }[key.kind]


def _is_success(status_code) -> bool:
    try:
        return 200 <= int(status_code) < 300
    except (TypeError, ValueError):
        return False


class ShardCache:
    """Memoizes fetched shards for one listing session."""

    def __init__(self, transport: HTTPTransport, base_url: str,
                 layout: Optional[ShardLayout] = None, timeout: float = 30.0,
                 fallback_category: str = DEFAULT_FALLBACK_CATEGORY):
        self._transport = transport
        self._fallback_category = fallback_category
        self._base_url = base_url.rstrip('/')
        self._layout = layout or ShardLayout()
        self._timeout = timeout
        self._values: Dict[ShardKey, Union[Shard, Index]] = {}
        self._states: Dict[ShardKey, ShardState] = {}
        self._inflight: Counter = Counter()
        self._fetches: Counter = Counter()

    def url_for(self, key: ShardKey) -> str:
        return f"{self._base_url}/{self._layout.path_for(key)}"

    def state(self, key: ShardKey) -> ShardState:
        return self._states.get(key, ShardState.IDLE)

    def peek(self, key: ShardKey) -> Optional[Union[Shard, Index]]:
        """Cached value without fetching, or None"""
        return self._values.get(key)

    def is_cached(self, key: ShardKey) -> bool:
        return key in self._values

    def fetch_count(self, key: ShardKey) -> int:
        """Network fetches issued for ``key`` so far this session"""
        return self._fetches[key]

    async def get(self, key: ShardKey) -> Union[Shard, Index]:
        if key in self._values:
            return self._values[key]

        self._states[key] = ShardState.LOADING
        self._inflight[key] += 1
        self._fetches[key] += 1
        try:
            payload = await self._fetch(self.url_for(key))
        except ShardFetchError as e:
            self._inflight[key] -= 1
            if key in self._values:
                self._states[key] = ShardState.READY
            elif self._inflight[key] == 0:
                self._states[key] = ShardState.ERROR
            logger.warning("Shard %s failed: %s", key, e.reason)
            raise

        self._inflight[key] -= 1
        value = self._parse(key, payload)
        self._values[key] = value
        self._states[key] = ShardState.READY
        logger.debug("Cached shard %s (%d entries)", key, len(value))
        return value

    async def get_posts(self, key: ShardKey) -> Shard:
        if key.is_index:
            raise ValueError(f"{key} is an index, not a post shard")
        return await self.get(key)

    async def get_index(self, key: ShardKey) -> Index:
        if not key.is_index:
            raise ValueError(f"{key} is a post shard, not an index")
        return await self.get(key)

    async def _fetch(self, url: str) -> Any:
        logger.debug("Fetching %s", url)
        try:
            response = await self._transport.get(url, headers=dict(NO_CACHE_HEADERS), timeout=self._timeout)
        except Exception as e:
            raise ShardFetchError(url, f"request failed ({e})") from e

        status = getattr(response, 'status_code', None)
        if not _is_success(status):
            raise ShardFetchError(url, f"HTTP {status}", status_code=status)
        try:
            return json.loads(response.content)
        except (TypeError, ValueError) as e:
            raise ShardFetchError(url, f"malformed JSON ({e})", status_code=status) from e

    def _parse(self, key: ShardKey, payload: Any) -> Union[Shard, Index]:
        if not isinstance(payload, list):
            return []
        items = [item for item in payload if isinstance(item, dict)]
        if key.is_index:
            entries = (IndexEntry.from_dict(item) for item in items)
            return [e for e in entries if e is not None]
        # the full shard is the raw source; normalize it the way the builder does
        posts = (Post.from_dict(item, fallback_category=self._fallback_category) for item in items)
        return [p for p in posts if p.url]


__all__ = ["ShardCache", "ShardLayout", "ShardState"]
