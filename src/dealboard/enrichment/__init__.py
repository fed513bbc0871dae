"""Per-deal enrichment: product mix, metric flags and split credit."""

from typing import Any, Optional

from dealboard.models.deal import Deal, EnrichedDeal, VehicleType
from dealboard.normalizing.parsers import vehicle_type_display

from .credit import FULL_CREDIT, allocate, credit_shares
from .flags import classify
from .products import PRODUCT_CATALOG, product_mix, products_per_deal


def deal_pvr(mix_profits: list[float]) -> float:
    """F&I product profit per product sold on the deal; 0 with no products."""
    return sum(mix_profits) / max(1, len(mix_profits))


def enrich(deal: Deal, participant_id: Optional[Any] = None) -> EnrichedDeal:
    """
    Attach derived values. With a participant id the gross figures are
    scaled to that participant's credit; without one the deal gets full credit.
    """
    mix = product_mix(deal)
    flags = classify(deal.status)
    credit = allocate(deal, participant_id) if participant_id is not None else FULL_CREDIT
    scale = credit.credit_percentage / 100

    fields = dict(deal)
    fields["is_active"] = deal.is_active and not flags.exclude_from_metrics

    return EnrichedDeal(
        **fields,
        vehicle_type_display=vehicle_type_display(deal.vehicle_type),
        product_mix=mix,
        products_per_deal=len(mix),
        metric_flags=flags,
        split_credit=credit,
        adjusted_front_gross=deal.front_end_gross * scale,
        adjusted_back_gross=deal.back_end_gross * scale,
        adjusted_total_gross=deal.total_gross * scale,
        pvr=deal_pvr([p.profit for p in mix]),
        is_new=deal.vehicle_type == VehicleType.NEW,
        is_used=deal.vehicle_type in (VehicleType.USED, VehicleType.CPO),
        is_funded=flags.counts_for_sold,
        is_pending=flags.counts_for_tracking,
    )


__all__ = [
    "FULL_CREDIT",
    "PRODUCT_CATALOG",
    "allocate",
    "classify",
    "credit_shares",
    "deal_pvr",
    "enrich",
    "product_mix",
    "products_per_deal",
]
