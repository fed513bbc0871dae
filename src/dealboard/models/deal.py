"""Canonical deal model and the per-deal derived values."""

import json
from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase JSON keys for dashboard consumers."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VehicleType(str, Enum):
    NEW = "New"
    USED = "Used"
    CPO = "CertifiedPreOwned"


class DealType(str, Enum):
    CASH = "Cash"
    FINANCE = "Finance"
    LEASE = "Lease"


class DealStatus(str, Enum):
    PENDING = "Pending"
    FUNDED = "Funded"
    UNWOUND = "Unwound"
    DEAD_DEAL = "DeadDeal"


class Deal(CamelModel):
    """
    One vehicle sale or lease, normalized from whichever record shape the
    upstream writer produced. Built fresh on every aggregation call.
    """

    id: str
    deal_number: str = ""
    stock_number: str = ""
    vin_suffix: str = Field("", description="Last 8 characters of the VIN")
    customer_last_name: str = ""

    vehicle_type: VehicleType = VehicleType.USED
    deal_type: DealType = DealType.FINANCE
    status: DealStatus = DealStatus.PENDING
    deal_date: Optional[date] = None

    front_end_gross: float = 0.0
    back_end_gross: float = 0.0
    total_gross: float = 0.0
    reserve_flat: float = 0.0

    service_contract_profit: float = 0.0
    prepaid_maintenance_profit: float = 0.0
    gap_insurance_profit: float = 0.0
    tire_and_wheel_profit: float = 0.0
    appearance_protection_profit: float = 0.0
    other_profit: float = 0.0

    primary_participant_id: str = ""
    secondary_participant_id: Optional[str] = None
    is_split_deal: bool = False
    supervisor_id: Optional[str] = None
    dealership_id: Optional[str] = None

    lender: str = ""
    outside_funding: bool = False

    is_active: bool = True
    error: Optional[str] = None
    raw: Any = None

    @field_serializer("raw")
    def _serialize_raw(self, value: Any) -> Any:
        # Raw records are untrusted; anything json can't encode is stringified.
        try:
            return json.loads(json.dumps(value, default=str))
        except (TypeError, ValueError):
            return str(value)


class ProductLine(CamelModel):
    """One attached F&I product with positive profit."""

    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    profit: float


class MetricFlags(CamelModel):
    """Which dashboard counters a deal participates in."""

    model_config = ConfigDict(frozen=True)

    counts_for_sold: bool
    counts_for_tracking: bool
    counts_for_pvr: bool
    exclude_from_metrics: bool


class SplitCredit(CamelModel):
    """Share of a deal's credit belonging to one participant."""

    model_config = ConfigDict(frozen=True)

    has_credit: bool
    credit_percentage: int = Field(..., description="0, 50 or 100")
    split_with_id: Optional[str] = None


class EnrichedDeal(Deal):
    """Deal plus product mix, metric flags and credit-adjusted gross figures."""

    vehicle_type_display: str = ""
    product_mix: list[ProductLine] = Field(default_factory=list)
    products_per_deal: int = 0
    metric_flags: MetricFlags
    split_credit: SplitCredit

    adjusted_front_gross: float = 0.0
    adjusted_back_gross: float = 0.0
    adjusted_total_gross: float = 0.0
    pvr: float = 0.0

    is_new: bool = False
    is_used: bool = False
    is_funded: bool = False
    is_pending: bool = False
