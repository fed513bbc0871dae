"""Deal filtering: inclusion rules and time windows."""

from dealboard.filtering.engine import DealFilter, FilterResult
from dealboard.filtering.windows import (
    WINDOW_NAMES,
    DateSpan,
    in_window,
    resolve_window,
    window_label,
)

__all__ = [
    "WINDOW_NAMES",
    "DateSpan",
    "DealFilter",
    "FilterResult",
    "in_window",
    "resolve_window",
    "window_label",
]
