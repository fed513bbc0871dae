"""Deal filter engine with explanation trail."""

from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, Field

from dealboard.models.deal import EnrichedDeal

from .rules import apply_active_rule, apply_credit_rule, apply_dealership_rule, apply_window_rule
from .windows import ALL_TIME, Window, resolve_window


class FilterResult(BaseModel):
    """Result of filtering one deal."""

    passed: bool = Field(..., description="All rules passed")
    explanations: list[str] = Field(default_factory=list)
    deal: EnrichedDeal = Field(..., description="The deal that was filtered")
    excluded_by_rule: Optional[str] = Field(
        default=None,
        description="First rule that excluded (active|credit|dealership|window)",
    )


class DealFilter:
    """
    Applies the dashboard's inclusion rules to enriched deals, in order:
    active, credit, dealership, window.
    """

    def __init__(
        self,
        now: Union[datetime, date],
        *,
        window: Window = ALL_TIME,
        participant_id: Optional[str] = None,
        dealership_id: Optional[str] = None,
        include_inactive: bool = False,
    ):
        # Resolve once so an unknown window fails before any deal is looked at.
        resolve_window(window, now)
        self.now = now
        self.window = window
        self.participant_id = participant_id
        self.dealership_id = dealership_id
        self.include_inactive = include_inactive

    def filter(self, deal: EnrichedDeal) -> FilterResult:
        """Apply all rules and return FilterResult with explanation trail."""
        checks = [
            apply_active_rule(deal, self.include_inactive),
            apply_credit_rule(deal, self.participant_id),
            apply_dealership_rule(deal, self.dealership_id),
            apply_window_rule(deal, self.window, self.now),
        ]
        explanations: list[str] = []
        excluded_by: Optional[str] = None
        for passed, explanation, rule_id in checks:
            explanations.append(explanation)
            if not passed and excluded_by is None:
                excluded_by = rule_id

        return FilterResult(
            passed=excluded_by is None,
            explanations=explanations,
            deal=deal,
            excluded_by_rule=excluded_by,
        )

    def filter_many(self, deals: list[EnrichedDeal]) -> list[FilterResult]:
        """Filter multiple deals; returns all with full results."""
        return [self.filter(d) for d in deals]

    def filter_passed(self, deals: list[EnrichedDeal]) -> list[EnrichedDeal]:
        """Deals that passed every rule, in input order."""
        return [r.deal for r in self.filter_many(deals) if r.passed]
