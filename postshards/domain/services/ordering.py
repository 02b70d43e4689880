"""
Ordering helpers shared by the builder, the listing engine and the renderer
"""

import unicodedata
from datetime import date
from typing import Iterable, List, Tuple

from ..entities.post import Post


EPOCH = date(1970, 1, 1)


def collation_key(name: str) -> Tuple[str, str]:
    """Locale-aware-ish name key: case-folded NFKC first, raw text to break ties."""
    return unicodedata.normalize("NFKC", name).casefold(), name


def newest_first(posts: Iterable[Post]) -> List[Post]:
    """Stable date-descending sort used at build time.

    Unparsable dates go after every parsable one and keep their relative order.
    """
    def key(post: Post):
        published = post.published_on
        if published is None:
            return (1, 0)
        return (0, -published.toordinal())

    return sorted(posts, key=key)


def epoch_date(post: Post) -> date:
    """Client-side sort date; unparsable dates count as the epoch."""
    return post.published_on or EPOCH
