"""Dashboard options, metrics and the stable return shapes handed to consumers."""

from datetime import date
from typing import Any, Optional, Union

from pydantic import Field, field_validator

from dealboard.models.deal import CamelModel, EnrichedDeal


class CustomRange(CamelModel):
    """Explicit date range; both ends inclusive, either end may be open."""

    start: Optional[date] = None
    end: Optional[date] = None


TimePeriod = Union[str, CustomRange]


class DashboardOptions(CamelModel):
    """Options recognized by the dashboard entry points. Accepts camelCase keys."""

    dashboard_type: Optional[str] = None
    user_role: Optional[str] = None
    participant_id: Optional[str] = None
    time_period: TimePeriod = "this-month"
    include_inactive: bool = False
    include_salespeople: bool = False

    @field_validator("participant_id", mode="before")
    @classmethod
    def _coerce_participant_id(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None


class DashboardMetrics(CamelModel):
    """Dashboard-wide counts and credit-adjusted gross figures."""

    total_deals: int = 0
    funded_deals: int = 0
    pending_deals: int = 0
    new_vehicle_deals: int = 0
    used_vehicle_deals: int = 0
    total_front_gross: float = 0.0
    total_back_gross: float = 0.0
    total_gross: float = 0.0
    avg_front_gross: float = 0.0
    avg_back_gross: float = 0.0
    total_pvr: float = Field(0.0, alias="totalPVR")
    avg_pvr: float = Field(0.0, alias="avgPVR")


class SalespersonMetrics(DashboardMetrics):
    """One leaderboard row for the manager view."""

    participant_id: str
    rank: int = 0
    goal_percentage: float = 0.0
    pace: Optional[str] = Field(None, description="green | yellow | red")


class ProductPenetration(CamelModel):
    key: str
    name: str
    deal_count: int = 0
    penetration_percentage: float = 0.0
    total_profit: float = 0.0


class ProductSummary(CamelModel):
    """Products-per-deal average and per-product penetration."""

    products_per_deal: float = 0.0
    penetration: list[ProductPenetration] = Field(default_factory=list)


def _drop_absent(data: dict[str, Any], keys: tuple[str, ...]) -> dict[str, Any]:
    for key in keys:
        if data.get(key) is None:
            data.pop(key, None)
    return data


class DashboardData(CamelModel):
    """Return shape of every dashboard entry point, including failures."""

    deals: list[EnrichedDeal] = Field(default_factory=list)
    metrics: DashboardMetrics = Field(default_factory=DashboardMetrics)
    salesperson_metrics: Optional[list[SalespersonMetrics]] = None
    products: Optional[ProductSummary] = None
    period_label: Optional[str] = None
    last_updated: str
    error: Optional[str] = None

    def to_json_dict(self) -> dict[str, Any]:
        """camelCase JSON structure; optional top-level fields omitted when unset."""
        data = self.model_dump(mode="json", by_alias=True)
        return _drop_absent(data, ("salespersonMetrics", "products", "periodLabel", "error"))


class ManagerMetrics(DashboardMetrics):
    avg_per_deal: float = 0.0
    sales_goal: int = 100
    sales_performance: float = 0.0


class ManagerDashboardData(CamelModel):
    """Sales-manager view: dealership-wide metrics plus the salesperson leaderboard."""

    deals: list[EnrichedDeal] = Field(default_factory=list)
    metrics: ManagerMetrics = Field(default_factory=ManagerMetrics)
    salesperson_metrics: list[SalespersonMetrics] = Field(default_factory=list)
    period_label: Optional[str] = None
    last_updated: str
    error: Optional[str] = None

    def to_json_dict(self) -> dict[str, Any]:
        data = self.model_dump(mode="json", by_alias=True)
        return _drop_absent(data, ("periodLabel", "error"))
