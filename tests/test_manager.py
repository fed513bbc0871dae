"""Tests for map_manager_dashboard_data."""

from unittest.mock import patch

import pytest

from dealboard import map_manager_dashboard_data
from dealboard.config import DealboardConfig

from conftest import NOW, make_raw


def _records() -> list:
    return [
        make_raw(id="1", salespersonId="S1", totalGross=2500, dealershipId="DL1"),
        make_raw(id="2", salespersonId="S2", totalGross=1000, dealershipId="DL1"),
        make_raw(id="3", salespersonId="S3", totalGross=5000, dealershipId="DL2"),
        make_raw(id="4", salespersonId="S2", totalGross=2500, dealershipId=None),
        make_raw(id="5", salespersonId="S1", dealStatus="Unwound", dealershipId="DL1"),
        make_raw(id="6", salespersonId="S1", dealStatus="Sold?", dealershipId="DL1"),
        None,
    ]


class TestManagerDashboard:
    """Tests for the sales-manager view."""

    def test_dealership_scope(self) -> None:
        """Other dealerships, inactive and errored deals are left out."""
        data = map_manager_dashboard_data(_records(), "DL1", "this-month", now=NOW)
        assert sorted(d.id for d in data.deals) == ["1", "2", "4"]
        assert data.metrics.total_deals == 3
        assert data.metrics.total_gross == 6000
        assert data.error is None

    def test_manager_metrics(self) -> None:
        data = map_manager_dashboard_data(_records(), "DL1", "this-month", now=NOW)
        assert data.metrics.avg_per_deal == 2000
        assert data.metrics.sales_goal == 100
        assert data.metrics.sales_performance == 3.0

    def test_sales_performance_capped(self) -> None:
        config = DealboardConfig(manager_sales_goal=2)
        data = map_manager_dashboard_data(_records(), "DL1", "this-month", now=NOW, config=config)
        assert data.metrics.sales_goal == 2
        assert data.metrics.sales_performance == 100.0

    def test_leaderboard_always_present(self) -> None:
        data = map_manager_dashboard_data(_records(), "DL1", now=NOW)
        assert [r.participant_id for r in data.salesperson_metrics] == ["S2", "S1"]
        assert data.salesperson_metrics[0].total_gross == 3500
        assert data.salesperson_metrics[0].pace is not None

    def test_no_dealership_includes_all(self) -> None:
        data = map_manager_dashboard_data(_records(), None, "this-month", now=NOW)
        assert data.metrics.total_deals == 4

    def test_window(self) -> None:
        records = _records() + [make_raw(id="9", dealDate="2026-09-12", dealershipId="DL1")]
        data = map_manager_dashboard_data(records, "DL1", "last-month", now=NOW)
        assert [d.id for d in data.deals] == ["9"]
        assert data.period_label == "September 2026"

    def test_empty(self) -> None:
        data = map_manager_dashboard_data([], "DL1", now=NOW)
        assert data.metrics.total_deals == 0
        assert data.metrics.sales_performance == 0
        assert data.salesperson_metrics == []
        assert "error" not in data.to_json_dict()

    def test_json_shape(self) -> None:
        payload = map_manager_dashboard_data(_records(), "DL1", now=NOW).to_json_dict()
        assert {"avgPerDeal", "salesGoal", "salesPerformance", "totalPVR"} <= set(payload["metrics"])
        assert payload["lastUpdated"] == NOW.isoformat()

    def test_unknown_window_error(self) -> None:
        data = map_manager_dashboard_data(_records(), "DL1", "eternity", now=NOW)
        assert data.error == "Unknown time period: 'eternity'"
        assert data.deals == []

    def test_failure_zeroed(self) -> None:
        with patch("dealboard.pipeline.aggregate", side_effect=ValueError("bad state")):
            data = map_manager_dashboard_data(_records(), "DL1", now=NOW)
        assert data.error == "Aggregation failed: bad state"
        assert data.metrics.total_deals == 0
        assert data.metrics.sales_goal == 100

    @pytest.mark.parametrize("dealership_id", [" DL1 ", "DL1"])
    def test_dealership_id_trimmed(self, dealership_id: str) -> None:
        data = map_manager_dashboard_data(_records(), dealership_id, now=NOW)
        assert data.metrics.total_deals == 3
