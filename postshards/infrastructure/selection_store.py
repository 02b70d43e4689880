"""
Client-side state holders: the page location and persisted selection storage
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit

import yaml

from ..domain.repositories.base import Location, SelectionStorage


logger = logging.getLogger(__name__)


class PageLocation(Location):
    """Current page URL (path + query) with history-replace semantics.

    ``replace`` swaps the URL in place without navigating, like
    ``history.replaceState``; each replacement is recorded in ``history``.
    """

    def __init__(self, url: str = "/"):
        self.path, self.query = self._split(url)
        self.history: List[str] = []

    @staticmethod
    def _split(url: str):
        parts = urlsplit(url)
        return parts.path or "/", parts.query

    @property
    def href(self) -> str:
        return f"{self.path}?{self.query}" if self.query else self.path

    def params(self) -> Dict[str, str]:
        return dict(parse_qsl(self.query, keep_blank_values=True))

    def get_param(self, name: str) -> Optional[str]:
        return self.params().get(name)

    def url_with(self, name: str, value: Optional[str]) -> str:
        """URL with ``name`` set to ``value`` (or removed when None)"""
        pairs = [(k, v) for k, v in parse_qsl(self.query, keep_blank_values=True) if k != name]
        if value is not None:
            pairs.append((name, value))
        query = urlencode(pairs)
        return f"{self.path}?{query}" if query else self.path

    def replace(self, url: str) -> None:
        self.path, self.query = self._split(url)
        self.history.append(url)


class MemoryStorage(SelectionStorage):
    """In-process storage; state lives as long as the object"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


class YamlFileStorage(SelectionStorage):
    """Storage persisted to a small YAML mapping on disk."""

    def __init__(self, path):
        self.path = Path(path)
        self._data = None

    def _read(self) -> Any:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring unreadable storage %s: %s", self.path, e)
            return None

    def _load(self) -> Dict[str, str]:
        if self._data is None:
            self._data = {}
            if self.path.exists():
                loaded = self._read()
                if isinstance(loaded, dict):
                    self._data = {str(k): str(v) for k, v in loaded.items() if v is not None}
                elif loaded is not None:
                    logger.warning("Ignoring unexpected storage content in %s", self.path)
        return self._data

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self._data, f, sort_keys=True, allow_unicode=True)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        self._load()[key] = value
        self._save()


__all__ = ["MemoryStorage", "PageLocation", "YamlFileStorage"]
