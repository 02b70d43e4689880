"""Filesystem persistence for the index builder: read posts.json, write shards."""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable, List

from ..domain.exceptions import MalformedSourceError, SourceNotFoundError
from ..domain.repositories.base import IndexWriter, PostSource


logger = logging.getLogger(__name__)


def dump_json(data: Any) -> str:
    """Pretty-printed UTF-8 JSON, deterministic for identical input."""
    return json.dumps(data, ensure_ascii=False, indent=2)


class JsonPostSource(PostSource):
    """Reads the canonical post array from a JSON file."""

    def __init__(self, path):
        self.path = Path(path)

    def load_raw(self) -> List[Any]:
        if not self.path.is_file():
            raise SourceNotFoundError(self.path)
        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedSourceError(self.path, f"invalid JSON ({e})") from e
        if not isinstance(data, list):
            raise MalformedSourceError(self.path, "posts.json must be an array")
        return data


class JsonIndexWriter(IndexWriter):
    """Writes generated JSON under ``output_dir``.

    Each file is written to a temporary sibling and renamed into place, so a
    reader never observes a half-written shard.
    """

    def __init__(self, output_dir):
        self.output_dir = Path(output_dir)

    def write_json(self, relative_path: str, data: Any) -> str:
        target = self.output_dir / relative_path
        target.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8', newline='\n') as f:
                f.write(dump_json(data))
            os.replace(tmp_name, target)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        logger.debug("Wrote %s", target)
        return str(target)

    def prune(self, relative_dir: str, keep: Iterable[str]) -> List[str]:
        directory = self.output_dir / relative_dir
        if not directory.is_dir():
            return []
        keep = set(keep)
        removed = []
        for path in sorted(directory.glob('*.json')):
            if path.name not in keep:
                path.unlink()
                removed.append(str(path))
        return removed


__all__ = ["JsonIndexWriter", "JsonPostSource", "dump_json"]
