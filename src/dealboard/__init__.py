"""Deal aggregation and metrics engine for dealership dashboards."""

from dealboard.pipeline import aggregate_deals_for_dashboard, map_manager_dashboard_data
from dealboard.provider import DashboardDataProvider, DashboardSubscription

__all__ = [
    "DashboardDataProvider",
    "DashboardSubscription",
    "aggregate_deals_for_dashboard",
    "map_manager_dashboard_data",
]
