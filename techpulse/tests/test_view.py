"""Tests for the view projection."""

from datetime import datetime, timezone

import pytest

from conftest import make_item
from src.collectors.base import SourceParams, SourceType
from src.feed.state import InstanceSnapshot
from src.feed.view import filter_items, project, sort_items


def _snapshot(instance_id: str, items) -> InstanceSnapshot:
    return InstanceSnapshot(
        instance_id=instance_id,
        source_type=SourceType.NEWS,
        params=SourceParams(),
        cursor=None,
        items=tuple(items),
        has_more=False,
        is_loading=False,
        last_error=None,
    )


@pytest.fixture
def instances() -> dict[str, InstanceSnapshot]:
    return {
        "col_news_a": _snapshot("col_news_a", [
            make_item("news_1", title="NASA picks new rocket"),
            make_item("news_2", title="Python 3.14 released", tags=("nasa-adjacent",)),
            make_item("news_3", title="Unrelated", author="NasaFan"),
        ]),
        "col_feature_b": _snapshot("col_feature_b", [
            make_item("feature_1", SourceType.FEATURE, title="Galaxy", summary="Seen by NASA Hubble"),
            make_item("feature_2", SourceType.FEATURE, title="Moon"),
        ]),
    }


class TestProject:
    """Filtering per column."""

    def test_empty_filter_passes_everything_through(self, instances):
        view = project(instances, "")

        assert view["col_news_a"] == instances["col_news_a"].items
        assert view["col_feature_b"] == instances["col_feature_b"].items

    def test_blank_filter_treated_as_empty(self, instances):
        assert project(instances, "   ") == project(instances, "")

    def test_filter_matches_title_summary_author_tags(self, instances):
        view = project(instances, "nasa")

        assert [i.id for i in view["col_news_a"]] == ["news_1", "news_2", "news_3"]
        assert [i.id for i in view["col_feature_b"]] == ["feature_1"]

    def test_filter_is_case_insensitive(self, instances):
        assert project(instances, "NASA") == project(instances, "nasa")

    def test_filter_does_not_search_url(self, instances):
        view = project(instances, "example.com")

        assert view == {"col_news_a": (), "col_feature_b": ()}

    def test_deterministic(self, instances):
        first = project(instances, "nasa")
        second = project(instances, "nasa")

        assert first == second
        assert list(first) == ["col_news_a", "col_feature_b"]

    def test_no_columns(self):
        assert project({}, "anything") == {}


class TestSortItems:
    """Sort keys."""

    def _items(self):
        return [
            make_item("a", timestamp=datetime(2025, 1, 2, tzinfo=timezone.utc), score=10),
            make_item("b", timestamp=None, score=10),
            make_item("c", timestamp=datetime(2025, 1, 3, tzinfo=timezone.utc), score=3),
            make_item("d", timestamp=datetime(2025, 1, 1, tzinfo=timezone.utc), score=10),
        ]

    def test_newest(self):
        assert [i.id for i in sort_items(self._items(), "newest")] == ["c", "a", "d", "b"]

    def test_oldest(self):
        assert [i.id for i in sort_items(self._items(), "oldest")] == ["b", "d", "a", "c"]

    def test_score_ties_broken_newest_first(self):
        assert [i.id for i in sort_items(self._items(), "score")] == ["a", "d", "b", "c"]

    def test_none_keeps_insertion_order(self):
        assert [i.id for i in sort_items(self._items(), None)] == ["a", "b", "c", "d"]

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError):
            sort_items(self._items(), "popular")

    def test_filter_then_sort_through_project(self, instances):
        view = project(instances, "nasa", "oldest")

        assert [i.id for i in view["col_news_a"]] == ["news_1", "news_2", "news_3"]


def test_filter_items_returns_tuple():
    items = [make_item("x", title="Hello")]
    assert filter_items(items, "") == tuple(items)
    assert filter_items(items, "bye") == ()
