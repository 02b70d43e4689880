"""
Listing Controllers - page-level orchestration
Selection -> shard cache -> listing engine -> renderer

IndexListing drives the main listing (``?cat=``) with progressive loading:
the "all" view starts from the small lite shard and upgrades to the full
shard once, the first time a search is active or more rows are requested
than lite holds. LabelListing drives the read-only category (``?c=``) and
tag (``?tag=``) pages, which always load their dedicated shard.

Every action recomputes from the *current* selection. A fetch that resolves
after the user moved on only fills its own cache slot; it never replaces the
base shard of a newer selection.
"""

import logging
from typing import Callable, List, Optional

from ..application.use_cases.selection_sync import SelectionSync
from ..domain.entities.post import PAGE_SIZE, IndexEntry, Post, Selection, ShardKey, ShardKind
from ..domain.exceptions import ShardFetchError
from ..domain.repositories.base import SelectionStorage
from ..domain.services.listing_engine import ListingResult, compute
from ..infrastructure.scheduling import Debouncer
from ..infrastructure.selection_store import PageLocation
from ..infrastructure.shard_cache import ShardCache
from .helpers.listing_renderer import ALL_LABEL, ListingRenderer, ListingView


logger = logging.getLogger(__name__)

Painter = Callable[[ListingView], None]


class ListingController:
    """Shared search / sort / load-more behaviour over one base shard."""

    empty_detail: Optional[str] = None
    error_detail: Optional[str] = None

    def __init__(
        self,
        cache: ShardCache,
        renderer: Optional[ListingRenderer] = None,
        *,
        page_size: int = PAGE_SIZE,
        debounce_seconds: float = 0.12,
        painter: Optional[Painter] = None,
    ):
        self.cache = cache
        self.renderer = renderer or ListingRenderer(page_size=page_size)
        self.page_size = page_size
        self.selection = Selection(visible_count=page_size)
        self.view = ListingView()
        self.debouncer = Debouncer(debounce_seconds)
        self._painter = painter
        self._base: List[Post] = []
        self._base_key: Optional[ShardKey] = None

    @property
    def base_key(self) -> Optional[ShardKey]:
        return self._base_key

    # -- user actions -----------------------------------------------------

    async def set_search(self, text: str) -> ListingView:
        self.selection.search_text = text
        return await self.refresh(reset_visible=True)

    def type_search(self, text: str) -> None:
        """Debounced search: only the last keystroke in a burst recomputes."""
        self.selection.search_text = text
        self.debouncer.schedule(lambda: self.refresh(reset_visible=True))

    async def toggle_sort(self) -> ListingView:
        self.selection.sort_descending = not self.selection.sort_descending
        return await self.refresh(reset_visible=True)

    async def load_more(self) -> ListingView:
        self.selection.visible_count += self.page_size
        return await self.refresh()

    async def settle(self) -> ListingView:
        """Wait for any debounced search to run; returns the latest view"""
        await self.debouncer.drain()
        return self.view

    # -- pipeline ---------------------------------------------------------

    async def refresh(self, reset_visible: bool = False) -> ListingView:
        if reset_visible:
            self.selection.visible_count = self.page_size
        try:
            ready = await self._ensure_base()
        except ShardFetchError as e:
            logger.error("Listing load failed: %s", e)
            return self.show(self._error_view())
        if not ready:
            return self.view
        return self.show(self._project(compute(self._base, self.selection)))

    async def _ensure_base(self) -> bool:
        """Make sure the base shard matches the selection; False when superseded"""
        raise NotImplementedError()

    def _project(self, result: ListingResult) -> ListingView:
        return self.renderer.project(
            result,
            category_label=self._category_label(),
            sort_descending=self.selection.sort_descending,
            search_text=self.selection.search_text,
            visible_count=self.selection.visible_count,
            empty_detail=self.empty_detail,
        )

    def _category_label(self) -> str:
        return ALL_LABEL

    def _error_view(self) -> ListingView:
        return self.renderer.error(self.error_detail, category_label=self._category_label())

    def show(self, view: ListingView) -> ListingView:
        self.view = view
        if self._painter is not None:
            self._painter(view)
        return view


class IndexListing(ListingController):
    """Main listing page with the category bar and URL/storage sync."""

    empty_detail = "Check the path of data/posts.json and the url and category of each entry."
    error_detail = "The post list could not be loaded. Check that the index build has been run."

    def __init__(
        self,
        cache: ShardCache,
        location: PageLocation,
        storage: SelectionStorage,
        renderer: Optional[ListingRenderer] = None,
        *,
        restore_last: bool = False,
        **kwargs,
    ):
        super().__init__(cache, renderer, **kwargs)
        self.location = location
        self.storage = storage
        self.restore_last = restore_last
        self.categories: List[IndexEntry] = []
        self.sync: Optional[SelectionSync] = None

    async def load(self) -> ListingView:
        try:
            self.categories = await self.cache.get_index(ShardKey.categories_index())
        except ShardFetchError as e:
            logger.error("Category index failed: %s", e)
            return self.show(self._error_view())

        self.sync = SelectionSync(
            self.location,
            self.storage,
            [entry.name for entry in self.categories],
            restore_last=self.restore_last,
        )
        selected = self.sync.initialize()
        self.selection.category = selected.category
        return await self.refresh(reset_visible=True)

    async def select_category(self, category: Optional[str]) -> ListingView:
        if self.sync is None:
            raise RuntimeError("load() must run before select_category()")
        self.sync.select(self.selection, category)
        return await self.refresh(reset_visible=True)

    def _wanted_key(self) -> ShardKey:
        if self.selection.is_all:
            return ShardKey.lite()
        return ShardKey.category(self.selection.category)

    def _base_matches(self) -> bool:
        if self._base_key is None:
            return False
        if self.selection.is_all:
            return self._base_key.kind in (ShardKind.LITE, ShardKind.FULL)
        return self._base_key == self._wanted_key()

    def _needs_full(self) -> bool:
        if self.selection.query:
            return True
        # a catalog that fits in lite never needs the full shard for paging
        return self.selection.visible_count > len(self._base) and len(self._base) < self.catalog_size()

    async def _adopt(self, key: ShardKey) -> None:
        posts = await self.cache.get_posts(key)
        if self.selection.is_all:
            accepted = key.kind is ShardKind.FULL or (
                key.kind is ShardKind.LITE and not (self._base_key and self._base_key.kind is ShardKind.FULL)
            )
        else:
            accepted = key == self._wanted_key()
        if accepted:
            self._base, self._base_key = posts, key

    async def _ensure_base(self) -> bool:
        if not self._base_matches():
            await self._adopt(self._wanted_key())
            if not self._base_matches():
                return False

        if self.selection.is_all and self._base_key.kind is ShardKind.LITE and self._needs_full():
            logger.info("Upgrading the all-categories view to the full shard")
            await self._adopt(ShardKey.full())
        return self._base_matches()

    def _category_label(self) -> str:
        return ALL_LABEL if self.selection.is_all else self.selection.category

    def _chips(self):
        return self.renderer.category_bar(self.categories, self.selection.category)

    def catalog_size(self) -> int:
        """Posts across every category, as counted by the category index"""
        return sum(entry.count for entry in self.categories)

    def _project(self, result: ListingResult) -> ListingView:
        # lite only holds the newest page; report the catalog size so that
        # "load more" can appear and trigger the upgrade to the full shard
        if self._base_key is not None and self._base_key.kind is ShardKind.LITE:
            result = ListingResult(result.rendered, max(result.total_matched, self.catalog_size()))
        view = super()._project(result)
        view.chips = self._chips()
        return view

    def _error_view(self) -> ListingView:
        return self.renderer.error(self.error_detail, category_label=self._category_label(),
                                   chips=self._chips())


class LabelListing(ListingController):
    """Read-only category or tag page; nothing is persisted."""

    PARAMS = {ShardKind.CATEGORY: "c", ShardKind.TAG: "tag"}

    def __init__(self, cache: ShardCache, location: PageLocation, kind: ShardKind,
                 renderer: Optional[ListingRenderer] = None, **kwargs):
        if kind not in self.PARAMS:
            raise ValueError(f"label pages exist for categories and tags, not {kind.value}")
        super().__init__(cache, renderer, **kwargs)
        self.location = location
        self.kind = kind
        self.label = ""

    @property
    def noun(self) -> str:
        return "category" if self.kind is ShardKind.CATEGORY else "tag"

    @property
    def empty_detail(self) -> str:
        return f"Check the {self.noun} value and the entries of data/posts.json."

    @property
    def error_detail(self) -> str:
        return f"Could not load the {self.noun} list. Check the generated data/{self.noun}/*.json files."

    async def load(self) -> ListingView:
        self.label = (self.location.get_param(self.PARAMS[self.kind]) or "").strip()
        if not self.label:
            return self.show(self.renderer.message(
                f"No {self.noun} specified.",
                f"Open a {self.noun} from a post to browse it.",
                category_label="-",
            ))
        return await self.refresh(reset_visible=True)

    async def _ensure_base(self) -> bool:
        if not self.label:
            return False
        key = ShardKey(self.kind, self.label)
        if self._base_key != key:
            self._base = await self.cache.get_posts(key)
            self._base_key = key
        return True

    def _category_label(self) -> str:
        if self.kind is ShardKind.TAG:
            return f"#{self.label}"
        return self.label


__all__ = ["IndexListing", "LabelListing", "ListingController"]
