"""Deal filter rules: each returns (passed, explanation, rule_id)."""

from datetime import date, datetime
from typing import Optional, Union

from dealboard.enrichment.credit import allocate
from dealboard.models.deal import EnrichedDeal

from .windows import Window, describe_window, in_window


def apply_active_rule(deal: EnrichedDeal, include_inactive: bool) -> tuple[bool, str, str]:
    """Inactive deals (unwound, dead, unmappable) are dropped unless requested."""
    if include_inactive:
        return True, "Inactive deals included", "active"
    if deal.is_active:
        return True, "Deal is active", "active"
    reason = deal.error or f"status {deal.status.value}"
    return False, f"Excluded: inactive deal ({reason})", "active"


def apply_credit_rule(deal: EnrichedDeal, participant_id: Optional[str]) -> tuple[bool, str, str]:
    """With a participant, only deals they hold credit on pass."""
    if participant_id is None:
        return True, "Participant filter not set", "credit"
    credit = allocate(deal, participant_id)
    if credit.has_credit:
        return True, f"{participant_id} holds {credit.credit_percentage}% credit", "credit"
    return False, f"Excluded: {participant_id} holds no credit", "credit"


def apply_dealership_rule(deal: EnrichedDeal, dealership_id: Optional[str]) -> tuple[bool, str, str]:
    """Deals tagged with another dealership are dropped; untagged deals pass."""
    if dealership_id is None:
        return True, "Dealership filter not set", "dealership"
    if deal.dealership_id is None:
        return True, "Dealership not applicable (no dealership on deal)", "dealership"
    if deal.dealership_id == dealership_id:
        return True, f"Matches dealership {dealership_id}", "dealership"
    return False, f"Excluded: dealership {deal.dealership_id} is not {dealership_id}", "dealership"


def apply_window_rule(
    deal: EnrichedDeal,
    window: Window,
    now: Union[datetime, date],
) -> tuple[bool, str, str]:
    label = describe_window(window)
    if in_window(deal, window, now):
        return True, f"Dated within {label}", "window"
    if deal.deal_date is None:
        return False, f"Excluded: no deal date for window {label}", "window"
    return False, f"Excluded: {deal.deal_date.isoformat()} outside {label}", "window"
