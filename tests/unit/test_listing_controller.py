"""
Unit tests for the listing page controllers (progressive loading, selection, errors)
"""

import asyncio

import pytest

from postshards.application.use_cases.selection_sync import STORAGE_KEY
from postshards.domain.entities.post import ShardKey, ShardKind
from postshards.infrastructure.selection_store import MemoryStorage, PageLocation
from postshards.infrastructure.shard_cache import ShardCache
from postshards.presentation.listing_controller import IndexListing, LabelListing

from conftest import BASE_URL, FakeTransport, make_raw_post, make_raw_posts, shard_files, shard_url


def _index_page(cache, url="/", storage=None, **kwargs):
    kwargs.setdefault("debounce_seconds", 0.01)
    return IndexListing(cache, PageLocation(url), storage or MemoryStorage(), **kwargs)


class TestIndexListingProgressiveLoading:

    @pytest.mark.asyncio
    async def test_first_paint_uses_lite(self, shard_cache, fake_transport):
        page = _index_page(shard_cache)
        view = await page.load()

        assert page.base_key == ShardKey.lite()
        assert len(view.cards) == 12
        assert view.cards[0].date_label == "2024.01.20"
        # lite holds 12 of 20; the catalog size keeps "load more" reachable
        assert view.count_text == "20"
        assert view.load_more_visible
        assert fake_transport.count(shard_url(ShardKey.full())) == 0

    @pytest.mark.asyncio
    async def test_category_bar(self, shard_cache):
        view = await _index_page(shard_cache).load()
        assert [(c.name, c.count, c.active) for c in view.chips] == [
            ("All", 20, True),
            ("Dev", 10, False),
            ("Travel", 7, False),
            ("생활", 3, False),
        ]

    @pytest.mark.asyncio
    async def test_load_more_upgrades_to_full_once(self, shard_cache, fake_transport):
        page = _index_page(shard_cache)
        await page.load()

        view = await page.load_more()
        assert page.base_key == ShardKey.full()
        assert len(view.cards) == 20
        assert not view.load_more_visible

        await page.toggle_sort()
        await page.set_search("python")
        await page.set_search("")
        assert shard_cache.fetch_count(ShardKey.full()) == 1
        assert fake_transport.count(shard_url(ShardKey.full())) == 1

    @pytest.mark.asyncio
    async def test_search_upgrades_and_matches_tags(self, shard_cache):
        page = _index_page(shard_cache)
        await page.load()

        view = await page.set_search("PYTHON")

        assert page.base_key == ShardKey.full()
        assert view.count_text == "5"
        assert "Search: PYTHON" in view.hint
        assert not view.load_more_visible

    @pytest.mark.asyncio
    async def test_no_matches(self, shard_cache):
        page = _index_page(shard_cache)
        await page.load()
        view = await page.set_search("zzz")
        assert view.count_text == "0"
        assert view.state_title == "No search results."

    @pytest.mark.asyncio
    async def test_debounced_typing_runs_last_search_only(self, shard_cache, fake_transport):
        page = _index_page(shard_cache)
        await page.load()

        for text in ["p", "py", "python"]:
            page.type_search(text)
        view = await page.settle()

        assert view.count_text == "5"
        assert fake_transport.count(shard_url(ShardKey.full())) == 1

    @pytest.mark.asyncio
    async def test_search_resets_visible_count(self, shard_cache):
        page = _index_page(shard_cache)
        await page.load()
        await page.load_more()
        assert page.selection.visible_count == 24

        await page.set_search("notes")
        assert page.selection.visible_count == 12

    @pytest.mark.asyncio
    async def test_small_catalog_never_fetches_full(self):
        transport = FakeTransport(shard_files(make_raw_posts(3)))
        cache = ShardCache(transport, BASE_URL)
        page = _index_page(cache)

        view = await page.load()

        assert view.count_text == "3"
        assert not view.load_more_visible
        assert view.sort_visible
        assert transport.count(shard_url(ShardKey.full())) == 0

    @pytest.mark.asyncio
    async def test_painter_receives_every_view(self, shard_cache):
        painted = []
        page = _index_page(shard_cache, painter=painted.append)
        await page.load()
        await page.toggle_sort()
        assert len(painted) == 2
        assert painted[-1].sort_label == "Oldest first"


class TestIndexListingSelection:

    @pytest.mark.asyncio
    async def test_url_category_uses_its_shard(self, shard_cache, fake_transport):
        page = _index_page(shard_cache, url="/?cat=Travel")
        view = await page.load()

        assert page.base_key == ShardKey.category("Travel")
        assert view.count_text == "7"
        assert "Category: Travel" in view.hint
        assert not view.load_more_visible
        assert fake_transport.count(shard_url(ShardKey.lite())) == 0

    @pytest.mark.asyncio
    async def test_unknown_url_category_recovers_to_all(self, shard_cache):
        storage = MemoryStorage()
        page = _index_page(shard_cache, url="/?cat=Nope", storage=storage)
        view = await page.load()

        assert page.selection.is_all
        assert page.location.href == "/"
        assert storage.get_item(STORAGE_KEY) == "all"
        assert view.count_text == "20"

    @pytest.mark.asyncio
    async def test_select_category_updates_url_and_storage(self, shard_cache):
        storage = MemoryStorage()
        page = _index_page(shard_cache, storage=storage)
        await page.load()

        view = await page.select_category("생활")

        assert view.count_text == "3"
        assert page.location.get_param("cat") == "생활"
        assert storage.get_item(STORAGE_KEY) == "생활"
        assert [c.name for c in view.chips if c.active] == ["생활"]

        view = await page.select_category("all")
        assert page.location.href == "/"
        assert page.base_key.kind in (ShardKind.LITE, ShardKind.FULL)
        assert view.count_text == "20"

    @pytest.mark.asyncio
    async def test_select_category_keeps_search_but_resets_paging(self, shard_cache):
        page = _index_page(shard_cache)
        await page.load()
        await page.set_search("python")
        await page.load_more()

        view = await page.select_category("Dev")

        assert page.selection.search_text == "python"
        assert page.selection.visible_count == 12
        assert view.count_text == "5"

    @pytest.mark.asyncio
    async def test_restore_last_category(self, shard_cache):
        storage = MemoryStorage({STORAGE_KEY: "생활"})
        page = _index_page(shard_cache, storage=storage, restore_last=True)
        view = await page.load()
        assert view.count_text == "3"
        assert page.location.get_param("cat") == "생활"

    @pytest.mark.asyncio
    async def test_stale_fetch_does_not_replace_newer_selection(self, shard_cache, fake_transport):
        page = _index_page(shard_cache)
        await page.load()
        gate = fake_transport.hold(shard_url(ShardKey.category("Travel")))

        slow = asyncio.ensure_future(page.select_category("Travel"))
        await asyncio.sleep(0)
        await page.select_category("Dev")
        gate.set()
        await slow

        assert page.selection.category == "Dev"
        assert page.base_key == ShardKey.category("Dev")
        assert page.view.count_text == "10"
        assert shard_cache.is_cached(ShardKey.category("Travel"))

    @pytest.mark.asyncio
    async def test_select_before_load_is_an_error(self, shard_cache):
        with pytest.raises(RuntimeError):
            await _index_page(shard_cache).select_category("Dev")


class TestIndexListingErrors:

    @pytest.mark.asyncio
    async def test_missing_categories_index(self, sample_raw_posts):
        files = shard_files(sample_raw_posts)
        del files[shard_url(ShardKey.categories_index())]
        page = _index_page(ShardCache(FakeTransport(files), BASE_URL))

        view = await page.load()

        assert view.is_error
        assert view.state_title == "Something went wrong while loading the list."
        assert view.count_text == "0"

    @pytest.mark.asyncio
    async def test_missing_lite_shows_error_with_category_bar(self, sample_raw_posts):
        files = shard_files(sample_raw_posts)
        del files[shard_url(ShardKey.lite())]
        page = _index_page(ShardCache(FakeTransport(files), BASE_URL))

        view = await page.load()

        assert view.is_error
        assert len(view.chips) == 4

    @pytest.mark.asyncio
    async def test_error_then_recovery(self, sample_raw_posts):
        files = shard_files(sample_raw_posts)
        category_url = shard_url(ShardKey.category("Dev"))
        body = files.pop(category_url)
        transport = FakeTransport(files)
        page = _index_page(ShardCache(transport, BASE_URL))
        await page.load()

        assert (await page.select_category("Dev")).is_error

        transport.files[category_url] = body
        view = await page.select_category("Dev")
        assert not view.is_error
        assert view.count_text == "10"


class TestLabelListing:

    def _page(self, cache, kind, url):
        return LabelListing(cache, PageLocation(url), kind, debounce_seconds=0.01)

    @pytest.mark.asyncio
    async def test_tag_page(self, shard_cache):
        page = self._page(shard_cache, ShardKind.TAG, "/tags.html?tag=python")
        view = await page.load()

        assert page.base_key == ShardKey.tag("python")
        assert view.count_text == "5"
        assert "Category: #python" in view.hint
        assert view.chips == []

    @pytest.mark.asyncio
    async def test_category_page_search_and_paging(self, shard_cache):
        page = self._page(shard_cache, ShardKind.CATEGORY, "/category.html?c=Dev")
        view = await page.load()
        assert view.count_text == "10"
        assert not view.load_more_visible

        view = await page.set_search("post 1")
        # Post 1x titles in Dev: 10, 12, 14, 16, 18
        assert view.count_text == "5"

    @pytest.mark.asyncio
    async def test_missing_label(self, shard_cache, fake_transport):
        page = self._page(shard_cache, ShardKind.TAG, "/tags.html")
        view = await page.load()

        assert view.state_title == "No tag specified."
        assert not view.is_error
        assert fake_transport.calls == []

    @pytest.mark.asyncio
    async def test_unknown_label_is_an_error(self, shard_cache):
        page = self._page(shard_cache, ShardKind.CATEGORY, "/category.html?c=Nowhere")
        view = await page.load()
        assert view.is_error
        assert "category" in view.state_detail

    def test_only_labelled_kinds(self, shard_cache):
        with pytest.raises(ValueError):
            LabelListing(shard_cache, PageLocation("/"), ShardKind.LITE)


@pytest.mark.asyncio
async def test_blank_categories_use_the_fallback_label_in_the_all_view():
    raw = make_raw_posts(14) + [make_raw_post(i, category="") for i in range(15, 18)]
    cache = ShardCache(FakeTransport(shard_files(raw)), BASE_URL, fallback_category="Uncategorized")
    page = _index_page(cache)
    await page.load()

    view = await page.set_search("uncategorized")
    assert page.base_key == ShardKey.full()
    assert view.count_text == "3"
    assert {card.category for card in view.cards} == {"Uncategorized"}

    view = await page.select_category("Uncategorized")
    assert view.count_text == "3"
