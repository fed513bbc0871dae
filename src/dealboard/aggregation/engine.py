"""Reduce filtered deals into dashboard-wide and per-salesperson metrics."""

import calendar
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel

from dealboard.enrichment.credit import FULL_CREDIT, allocate, credit_shares
from dealboard.enrichment.products import PRODUCT_CATALOG
from dealboard.models.dashboard import (
    DashboardMetrics,
    ProductPenetration,
    ProductSummary,
    SalespersonMetrics,
)
from dealboard.models.deal import EnrichedDeal

UNKNOWN_PARTICIPANT = "unknown"
DEFAULT_GOAL = 15


@dataclass
class _Tally:
    """Running totals for one entity (the dashboard or one salesperson)."""

    total_deals: int = 0
    funded_deals: int = 0
    pending_deals: int = 0
    new_vehicle_deals: int = 0
    used_vehicle_deals: int = 0
    total_front_gross: float = 0.0
    total_back_gross: float = 0.0
    total_gross: float = 0.0
    total_pvr: float = 0.0

    def add(self, deal: EnrichedDeal, credit_percentage: int) -> None:
        scale = credit_percentage / 100
        self.total_deals += 1
        if deal.metric_flags.counts_for_sold:
            self.funded_deals += 1
        if deal.metric_flags.counts_for_tracking:
            self.pending_deals += 1
        if deal.is_new:
            self.new_vehicle_deals += 1
        if deal.is_used:
            self.used_vehicle_deals += 1
        self.total_front_gross += deal.front_end_gross * scale
        self.total_back_gross += deal.back_end_gross * scale
        self.total_gross += deal.total_gross * scale
        self.total_pvr += deal.pvr

    def _average(self, total: float) -> float:
        return total / self.total_deals if self.total_deals else 0.0

    def metric_fields(self) -> dict:
        return {
            "total_deals": self.total_deals,
            "funded_deals": self.funded_deals,
            "pending_deals": self.pending_deals,
            "new_vehicle_deals": self.new_vehicle_deals,
            "used_vehicle_deals": self.used_vehicle_deals,
            "total_front_gross": self.total_front_gross,
            "total_back_gross": self.total_back_gross,
            "total_gross": self.total_gross,
            "avg_front_gross": self._average(self.total_front_gross),
            "avg_back_gross": self._average(self.total_back_gross),
            "total_pvr": self.total_pvr,
            "avg_pvr": self._average(self.total_pvr),
        }


class AggregateResult(BaseModel):
    metrics: DashboardMetrics
    salesperson_metrics: Optional[list[SalespersonMetrics]] = None


def pace_indicator(deal_count: int, goal: int, now: Union[datetime, date]) -> str:
    """
    Month-to-date pace against the monthly deal goal: "red" when more than
    two deals behind the expected count, "yellow" when behind, else "green".
    """
    today = now.date() if isinstance(now, datetime) else now
    days_in_month = calendar.monthrange(today.year, today.month)[1]
    expected = round(today.day / days_in_month * goal)
    if deal_count < expected - 2:
        return "red"
    if deal_count < expected:
        return "yellow"
    return "green"


def _salesperson_rows(
    deals: list[EnrichedDeal],
    goal: int,
    now: Optional[Union[datetime, date]],
) -> list[SalespersonMetrics]:
    # dict preserves first-seen order, which the stable sort keeps for ties
    tallies: dict[str, _Tally] = {}
    for deal in deals:
        shares = credit_shares(deal) or [(UNKNOWN_PARTICIPANT, 100)]
        for participant_id, percentage in shares:
            tallies.setdefault(participant_id, _Tally()).add(deal, percentage)

    rows = [
        SalespersonMetrics(
            participant_id=participant_id,
            goal_percentage=tally.total_deals / goal * 100 if goal > 0 else 0.0,
            pace=pace_indicator(tally.total_deals, goal, now) if now is not None else None,
            **tally.metric_fields(),
        )
        for participant_id, tally in tallies.items()
    ]
    rows.sort(key=lambda r: r.total_gross, reverse=True)
    return [row.model_copy(update={"rank": i}) for i, row in enumerate(rows, start=1)]


def aggregate(
    deals: list[EnrichedDeal],
    participant_id: Optional[str] = None,
    *,
    include_salespeople: bool = False,
    goal: int = DEFAULT_GOAL,
    now: Optional[Union[datetime, date]] = None,
) -> AggregateResult:
    """
    Dashboard-wide metrics over ``deals``. With a participant id, deals the
    participant holds no credit on are dropped and gross figures are scaled
    to their share. ``include_salespeople`` adds the per-participant rollup
    sorted by total gross, highest first.
    """
    tally = _Tally()
    for deal in deals:
        credit = allocate(deal, participant_id) if participant_id is not None else FULL_CREDIT
        if not credit.has_credit:
            continue
        tally.add(deal, credit.credit_percentage)

    salesperson_metrics = None
    if include_salespeople:
        salesperson_metrics = _salesperson_rows(deals, goal, now)

    return AggregateResult(
        metrics=DashboardMetrics(**tally.metric_fields()),
        salesperson_metrics=salesperson_metrics,
    )


def summarize_products(deals: list[EnrichedDeal]) -> ProductSummary:
    """Products per deal and per-product penetration across ``deals``."""
    total = len(deals)
    counts = {key: 0 for key, _, _ in PRODUCT_CATALOG}
    profits = {key: 0.0 for key, _, _ in PRODUCT_CATALOG}
    product_total = 0
    for deal in deals:
        product_total += len(deal.product_mix)
        for line in deal.product_mix:
            counts[line.key] += 1
            profits[line.key] += line.profit

    penetration = [
        ProductPenetration(
            key=key,
            name=name,
            deal_count=counts[key],
            penetration_percentage=counts[key] / total * 100 if total else 0.0,
            total_profit=profits[key],
        )
        for key, name, _ in PRODUCT_CATALOG
    ]
    return ProductSummary(
        products_per_deal=product_total / total if total else 0.0,
        penetration=penetration,
    )
