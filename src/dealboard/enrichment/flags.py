"""Status -> metric participation flags."""

from typing import Union

from dealboard.models.deal import DealStatus, MetricFlags
from dealboard.normalizing.parsers import parse_status

EXCLUDED = MetricFlags(
    counts_for_sold=False,
    counts_for_tracking=False,
    counts_for_pvr=False,
    exclude_from_metrics=True,
)

STATUS_FLAGS: dict[DealStatus, MetricFlags] = {
    DealStatus.FUNDED: MetricFlags(
        counts_for_sold=True,
        counts_for_tracking=False,
        counts_for_pvr=True,
        exclude_from_metrics=False,
    ),
    DealStatus.PENDING: MetricFlags(
        counts_for_sold=False,
        counts_for_tracking=True,
        counts_for_pvr=True,
        exclude_from_metrics=False,
    ),
    DealStatus.UNWOUND: EXCLUDED,
    DealStatus.DEAD_DEAL: EXCLUDED,
}


def classify(status: Union[DealStatus, str]) -> MetricFlags:
    """Flags are a pure function of status; anything unrecognised is excluded."""
    parsed = parse_status(status)
    if parsed is None:
        return EXCLUDED
    return STATUS_FLAGS[parsed]
