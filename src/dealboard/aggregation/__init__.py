"""Metric aggregation over filtered deals."""

from dealboard.aggregation.engine import (
    DEFAULT_GOAL,
    UNKNOWN_PARTICIPANT,
    AggregateResult,
    aggregate,
    pace_indicator,
    summarize_products,
)

__all__ = [
    "DEFAULT_GOAL",
    "UNKNOWN_PARTICIPANT",
    "AggregateResult",
    "aggregate",
    "pace_indicator",
    "summarize_products",
]
