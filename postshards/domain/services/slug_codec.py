"""Label -> slug codec shared by the index builder and the listing client.

Slugs name shard files (``category/<slug>.json``) so both sides must derive
the same slug from the same label without a lookup table. The mapping is a
pure function of the label text:

- lowercase, then keep ASCII letters, ASCII digits and Hangul syllables
  (U+AC00..U+D7A3); every other character becomes a hyphen
- collapse hyphen runs and trim them from both ends
- a label with no representable character falls back to ``k-`` plus the first
  16 hex digits of its UTF-8 encoding
- a blank label is ``unknown``

Two distinct labels may collide on one slug; that is accepted.
"""
from __future__ import annotations

import re

from ..entities.post import safe_text


UNKNOWN_SLUG = "unknown"
HEX_PREFIX = "k-"
HEX_DIGEST_WIDTH = 16

_HYPHEN_RUN_RE = re.compile(r"-+")


def _is_kept(ch: str) -> bool:
    code = ord(ch)
    return (
        0x61 <= code <= 0x7A
        or 0x30 <= code <= 0x39
        or 0xAC00 <= code <= 0xD7A3
    )


def slugify(label) -> str:
    """Map a free-text label onto a filesystem and URL safe token."""
    raw = safe_text(label)
    if not raw:
        return UNKNOWN_SLUG

    out = "".join(ch if _is_kept(ch) else "-" for ch in raw.lower())
    out = _HYPHEN_RUN_RE.sub("-", out).strip("-")
    if out:
        return out
    return HEX_PREFIX + raw.encode("utf-8").hex()[:HEX_DIGEST_WIDTH]


__all__ = ["slugify", "UNKNOWN_SLUG"]
