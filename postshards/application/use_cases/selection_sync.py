"""
Selection State synchronization
Keeps the chosen category consistent with the URL query and local storage
"""

import logging
from typing import Iterable, Optional

from ...domain.entities.post import ALL_CATEGORIES, Selection
from ...domain.repositories.base import Location, SelectionStorage


logger = logging.getLogger(__name__)

CATEGORY_PARAM = "cat"
STORAGE_KEY = "selectedCategory"


class SelectionSync:
    """
    Owns the shareable part of a Selection (the category).

    Sort direction, search text and visible count are deliberately left out:
    they reset on every page load.
    """

    def __init__(
        self,
        location: Location,
        storage: SelectionStorage,
        known_categories: Iterable[str],
        restore_last: bool = False,
    ):
        self._location = location
        self._storage = storage
        self._known = frozenset(known_categories)
        self._restore_last = restore_last

    def is_known(self, category: Optional[str]) -> bool:
        return category == ALL_CATEGORIES or category in self._known

    def initialize(self) -> Selection:
        """Selection for a fresh page load.

        A URL category is honored only when it is known. An unknown one is
        replaced by "all" and the correction is written back to both the URL
        and storage.
        """
        url_category = (self._location.get_param(CATEGORY_PARAM) or "").strip()

        if url_category and self.is_known(url_category):
            selected = url_category
        elif url_category:
            logger.info("Unknown category %r in URL; falling back to %r", url_category, ALL_CATEGORIES)
            selected = ALL_CATEGORIES
        else:
            selected = self._restored() or ALL_CATEGORIES

        selection = Selection(category=selected)
        self.persist(selection)
        return selection

    def _restored(self) -> Optional[str]:
        if not self._restore_last:
            return None
        stored = (self._storage.get_item(STORAGE_KEY) or "").strip()
        if stored and stored != ALL_CATEGORIES and self.is_known(stored):
            return stored
        return None

    def select(self, selection: Selection, category: Optional[str]) -> Selection:
        """Switch ``selection`` to ``category`` and persist it.

        Unknown or empty categories select "all".
        """
        category = (category or "").strip() or ALL_CATEGORIES
        if not self.is_known(category):
            logger.info("Ignoring unknown category %r", category)
            category = ALL_CATEGORIES
        selection.category = category
        self.persist(selection)
        return selection

    def persist(self, selection: Selection) -> None:
        """Write the category to storage and to the URL ("all" clears the parameter)."""
        self._storage.set_item(STORAGE_KEY, selection.category)

        value = None if selection.is_all else selection.category
        next_url = self._location.url_with(CATEGORY_PARAM, value)
        if next_url != self._location.href:
            self._location.replace(next_url)


__all__ = ["CATEGORY_PARAM", "STORAGE_KEY", "SelectionSync"]
