"""
Domain Repository Interfaces
Following Repository Pattern and Dependency Inversion Principle
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional


class PostSource(ABC):
    """
    Repository interface for the canonical post collection
    Abstracts where posts.json lives
    """

    @abstractmethod
    def load_raw(self) -> List[Any]:
        """Return the raw post objects.

        Raises SourceNotFoundError when the source is missing and
        MalformedSourceError when it is not a JSON array.
        """
        pass


class IndexWriter(ABC):
    """
    Repository interface for publishing generated shards and indexes
    Paths are relative to the writer's output root
    """

    @abstractmethod
    def write_json(self, relative_path: str, data: Any) -> str:
        """Write one JSON document and return where it went"""
        pass

    @abstractmethod
    def prune(self, relative_dir: str, keep: Iterable[str]) -> List[str]:
        """Remove JSON files in ``relative_dir`` whose names are not in ``keep``"""
        pass


class SelectionStorage(ABC):
    """
    Repository interface for client-side persisted state
    A small string key/value store, like a browser's local storage
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        pass


class Location(ABC):
    """
    Repository interface for the current page address
    Query parameters are read and rewritten without navigating
    """

    @property
    @abstractmethod
    def href(self) -> str:
        pass

    @abstractmethod
    def get_param(self, name: str) -> Optional[str]:
        pass

    @abstractmethod
    def url_with(self, name: str, value: Optional[str]) -> str:
        """Current URL with ``name`` set to ``value`` (removed when None)"""
        pass

    @abstractmethod
    def replace(self, url: str) -> None:
        pass
