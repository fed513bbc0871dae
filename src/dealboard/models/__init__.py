"""Data models for deals, dashboard options and dashboard results."""

from dealboard.models.dashboard import (
    CustomRange,
    DashboardData,
    DashboardMetrics,
    DashboardOptions,
    ManagerDashboardData,
    ManagerMetrics,
    ProductPenetration,
    ProductSummary,
    SalespersonMetrics,
)
from dealboard.models.deal import (
    Deal,
    DealStatus,
    DealType,
    EnrichedDeal,
    MetricFlags,
    ProductLine,
    SplitCredit,
    VehicleType,
)
from dealboard.models.outcome import Failed, Ok, Outcome

__all__ = [
    "CustomRange",
    "DashboardData",
    "DashboardMetrics",
    "DashboardOptions",
    "Deal",
    "DealStatus",
    "DealType",
    "EnrichedDeal",
    "Failed",
    "ManagerDashboardData",
    "ManagerMetrics",
    "MetricFlags",
    "Ok",
    "Outcome",
    "ProductLine",
    "ProductPenetration",
    "ProductSummary",
    "SalespersonMetrics",
    "SplitCredit",
    "VehicleType",
]
