"""Unit tests for the aggregation and lookup caches."""

from datetime import date
from unittest.mock import MagicMock

from dealboard.cache import AggregationCache, LookupCache, aggregation_key, snapshot_hash
from dealboard.models.dashboard import CustomRange, DashboardOptions

from conftest import make_raw


class TestAggregationKey:
    """Keys must separate every input that changes the result."""

    def test_same_inputs_same_key(self) -> None:
        options = DashboardOptions(participant_id="S1")
        assert aggregation_key([make_raw()], "sales", options, "2026-10-19") == aggregation_key(
            [make_raw()], "sales", options, "2026-10-19"
        )

    def test_differs_by_option(self) -> None:
        records = [make_raw()]
        base = aggregation_key(records, "sales", DashboardOptions(), "2026-10-19")
        variants = [
            aggregation_key(records, "finance", DashboardOptions(), "2026-10-19"),
            aggregation_key(records, "sales", DashboardOptions(participant_id="S1"), "2026-10-19"),
            aggregation_key(records, "sales", DashboardOptions(time_period="ytd"), "2026-10-19"),
            aggregation_key(records, "sales", DashboardOptions(include_inactive=True), "2026-10-19"),
            aggregation_key(records, "sales", DashboardOptions(), "2026-10-20"),
            aggregation_key([make_raw(frontEndGross=1)], "sales", DashboardOptions(), "2026-10-19"),
        ]
        assert all(v != base for v in variants)

    def test_custom_ranges_distinct(self) -> None:
        records = [make_raw()]
        jan = DashboardOptions(time_period=CustomRange(start=date(2026, 1, 1), end=date(2026, 1, 31)))
        feb = DashboardOptions(time_period=CustomRange(start=date(2026, 2, 1), end=date(2026, 2, 28)))
        assert aggregation_key(records, "sales", jan, "d") != aggregation_key(records, "sales", feb, "d")

    def test_unencodable_snapshot_has_no_key(self) -> None:
        circular: list = []
        circular.append(circular)
        assert snapshot_hash(circular) is None
        assert aggregation_key(circular, "sales", DashboardOptions(), "d") is None


class TestAggregationCache:
    """Tests for AggregationCache."""

    def test_lru_eviction(self) -> None:
        cache: AggregationCache[str] = AggregationCache(max_entries=2)
        cache.put("a", "A")
        cache.put("b", "B")
        assert cache.get("a") == "A"
        cache.put("c", "C")
        assert cache.get("b") is None
        assert cache.get("a") == "A"
        assert len(cache) == 2

    def test_disabled(self) -> None:
        cache: AggregationCache[str] = AggregationCache(max_entries=0)
        cache.put("a", "A")
        assert cache.get("a") is None

    def test_none_key_never_cached(self) -> None:
        cache: AggregationCache[str] = AggregationCache()
        cache.put(None, "A")
        assert cache.get(None) is None
        assert len(cache) == 0

    def test_clear(self) -> None:
        cache: AggregationCache[str] = AggregationCache()
        cache.put("a", "A")
        cache.clear()
        assert cache.get("a") is None


class TestLookupCache:
    """Tests for LookupCache."""

    def test_loader_called_once(self) -> None:
        loader = MagicMock(return_value="sales_manager")
        cache: LookupCache[str] = LookupCache()
        assert cache.get_or_load("S1", loader) == "sales_manager"
        assert cache.get_or_load("S1", loader) == "sales_manager"
        loader.assert_called_once_with("S1")
        assert "S1" in cache

    def test_none_result_cached(self) -> None:
        loader = MagicMock(return_value=None)
        cache: LookupCache[str] = LookupCache()
        cache.get_or_load("ghost", loader)
        cache.get_or_load("ghost", loader)
        assert loader.call_count == 1

    def test_invalidate_and_clear(self) -> None:
        loader = MagicMock(side_effect=["a", "b", "c"])
        cache: LookupCache[str] = LookupCache()
        cache.get_or_load("S1", loader)
        cache.invalidate("S1")
        assert cache.get_or_load("S1", loader) == "b"
        cache.clear()
        assert len(cache) == 0
        assert cache.get_or_load("S1", loader) == "c"
