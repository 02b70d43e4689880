"""
Unit tests for filter -> sort -> paginate
"""

import pytest

from postshards.domain.entities.post import Post, Selection
from postshards.domain.services.listing_engine import (
    compute,
    filter_posts,
    load_more_visible,
    matches,
    paginate,
    sort_posts,
)


def _posts():
    return [
        Post(title="Kotlin coroutines", excerpt="Structured concurrency", date="2024-04-18",
             url="/k", category="Dev", tags=["kotlin", "android"]),
        Post(title="Lisbon", excerpt="Trams and tiles", date="2024-03-21",
             url="/l", category="Travel", tags=["Portugal"]),
        Post(title="Undated", excerpt="", date="someday", url="/u", category="Life", tags=[]),
        Post(title="Garden", excerpt="상추와 대파", date="2024-04-02", url="/g", category="생활", tags=["대파"]),
    ]


class TestFilter:

    @pytest.mark.parametrize("needle,titles", [
        ("KOTLIN", ["Kotlin coroutines"]),
        ("tiles", ["Lisbon"]),
        ("travel", ["Lisbon"]),
        ("portugal", ["Lisbon"]),
        ("대파", ["Garden"]),
        ("nothing-matches", []),
    ])
    def test_matches_title_excerpt_category_and_tags(self, needle, titles):
        assert [p.title for p in filter_posts(_posts(), needle)] == titles

    def test_blank_search_keeps_everything(self):
        assert len(filter_posts(_posts(), "   ")) == 4

    def test_url_is_not_searched(self):
        assert not matches(Post(title="x", url="/kotlin"), "kotlin")


class TestSort:

    def test_descending_puts_undated_last(self):
        assert [p.title for p in sort_posts(_posts(), True)] == ["Kotlin coroutines", "Garden", "Lisbon", "Undated"]

    def test_ascending_puts_undated_first(self):
        assert [p.title for p in sort_posts(_posts(), False)] == ["Undated", "Lisbon", "Garden", "Kotlin coroutines"]

    def test_equal_dates_keep_input_order_both_ways(self):
        posts = [Post(title="a", date="2024-01-01"), Post(title="b", date="2024-01-01")]
        assert [p.title for p in sort_posts(posts, True)] == ["a", "b"]
        assert [p.title for p in sort_posts(posts, False)] == ["a", "b"]


def test_paginate():
    posts = _posts()
    assert len(paginate(posts, 2)) == 2
    assert len(paginate(posts, 50)) == 4
    assert paginate(posts, -1) == []


class TestCompute:

    def test_total_counts_all_matches(self):
        posts = [Post(title=f"p{i}", date=f"2024-01-{i:02d}") for i in range(1, 21)]
        result = compute(posts, Selection(visible_count=12))
        assert result.shown == 12
        assert result.total_matched == 20
        assert result.rendered[0].title == "p20"

    def test_is_pure(self):
        posts = _posts()
        selection = Selection(search_text="a", sort_descending=False)
        assert compute(posts, selection) == compute(posts, selection)
        assert [p.title for p in posts][0] == "Kotlin coroutines"

    def test_empty_base(self):
        result = compute([], Selection())
        assert result.rendered == []
        assert result.total_matched == 0


@pytest.mark.parametrize("total,visible,expected", [
    (12, 12, False),
    (13, 12, True),
    (20, 24, False),
    (20, 20, False),
    (5, 1, False),
])
def test_load_more_visible(total, visible, expected):
    assert load_more_visible(total, visible, page_size=12) is expected
