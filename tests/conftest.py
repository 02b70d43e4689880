"""
Shared fixtures: an in-memory transport serving built shards and raw post factories
"""

import asyncio
import json
from typing import Dict, List, Optional

import pytest

from postshards.application.use_cases.build_indexes import build_indexes
from postshards.domain.entities.post import ShardKey
from postshards.infrastructure.http_transport import FileResponse, HTTPTransport
from postshards.infrastructure.shard_cache import ShardCache, ShardLayout


BASE_URL = "https://blog.test/data"


class FakeTransport(HTTPTransport):
    """Serves canned JSON bodies by URL and records every request."""

    def __init__(self, files: Optional[Dict[str, bytes]] = None):
        self.files = dict(files or {})
        self.calls: List[str] = []
        self.headers: List[Dict[str, str]] = []
        self.gates: Dict[str, asyncio.Event] = {}
        self.failures: Dict[str, Exception] = {}
        self.closed = False

    def hold(self, url: str) -> asyncio.Event:
        """Block requests for ``url`` until the returned event is set"""
        gate = asyncio.Event()
        self.gates[url] = gate
        return gate

    async def get(self, url, headers=None, timeout=30.0):
        self.calls.append(url)
        self.headers.append(dict(headers or {}))
        gate = self.gates.get(url)
        if gate is not None:
            await gate.wait()
        if url in self.failures:
            raise self.failures[url]
        if url not in self.files:
            return FileResponse(url=url, status_code=404)
        return FileResponse(url=url, status_code=200, content=self.files[url])

    async def close(self):
        self.closed = True

    def count(self, url: str) -> int:
        return self.calls.count(url)


def make_raw_post(index: int, category: str = "Dev", tags=None, date: Optional[str] = None, **extra):
    raw = {
        "title": f"Post {index}",
        "excerpt": f"Excerpt {index}",
        "date": date or f"2024-01-{index:02d}",
        "url": f"/posts/{index}.html",
        "cover": f"/img/{index}.png",
        "category": category,
        "tags": list(tags) if tags is not None else [f"tag{index % 3}"],
    }
    raw.update(extra)
    return raw


def make_raw_posts(count: int, category: str = "Dev") -> List[dict]:
    return [make_raw_post(i, category=category) for i in range(1, count + 1)]


def encode(data) -> bytes:
    return json.dumps(data, ensure_ascii=False).encode("utf-8")


def shard_files(raw_posts, lite_size: int = 12, base_url: str = BASE_URL,
                layout: Optional[ShardLayout] = None) -> Dict[str, bytes]:
    """URL -> body for every file a build of ``raw_posts`` would publish."""
    layout = layout or ShardLayout()
    result = build_indexes(raw_posts, lite_size=lite_size)

    def url(key: ShardKey) -> str:
        return f"{base_url}/{layout.path_for(key)}"

    files = {
        url(ShardKey.full()): encode(raw_posts),
        url(ShardKey.lite()): encode([p.to_dict() for p in result.lite]),
        url(ShardKey.categories_index()): encode([e.to_dict() for e in result.category_index]),
        url(ShardKey.tags_index()): encode([e.to_dict() for e in result.tag_index]),
    }
    for shard in result.category_shards:
        files[url(ShardKey.category(shard.entry.name))] = encode([p.to_dict() for p in shard.posts])
    for shard in result.tag_shards:
        files[url(ShardKey.tag(shard.entry.name))] = encode([p.to_dict() for p in shard.posts])
    return files


def shard_url(key: ShardKey, base_url: str = BASE_URL) -> str:
    return f"{base_url}/{ShardLayout().path_for(key)}"


@pytest.fixture
def sample_raw_posts():
    """Twenty posts dated 2024-01-01..20.

    Even days are Dev (10), odd multiples of 3 are 생활 (3), the rest Travel (7).
    Days divisible by 4 are tagged python (5), every other post notes (15).
    """
    posts = []
    for i in range(1, 21):
        category = "Dev" if i % 2 == 0 else ("생활" if i % 3 == 0 else "Travel")
        posts.append(make_raw_post(i, category=category, tags=["python"] if i % 4 == 0 else ["notes"]))
    return posts


@pytest.fixture
def fake_transport(sample_raw_posts):
    return FakeTransport(shard_files(sample_raw_posts))


@pytest.fixture
def shard_cache(fake_transport):
    return ShardCache(fake_transport, BASE_URL)
