"""
Dashboard pipeline: normalize -> enrich -> filter -> aggregate.

Both entry points always return their documented shape. Unexpected failures
are caught here, logged with the failure outcome, and turned into a zeroed
result carrying an ``error`` string.
"""

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Optional, Union

from dealboard.aggregation import AggregateResult, aggregate, summarize_products
from dealboard.config import DealboardConfig
from dealboard.enrichment import enrich
from dealboard.errors import AggregationFailure
from dealboard.filtering import DealFilter, window_label
from dealboard.filtering.windows import describe_window
from dealboard.models.dashboard import (
    DashboardData,
    DashboardOptions,
    ManagerDashboardData,
    ManagerMetrics,
    TimePeriod,
)
from dealboard.models.deal import EnrichedDeal
from dealboard.models.outcome import Outcome, attempt
from dealboard.normalizing import normalize_many

logger = logging.getLogger(__name__)

OptionsInput = Union[DashboardOptions, Mapping[str, Any], None]


def _records(raw_deals: Any) -> list[Any]:
    """Raw input as a list of records; None is empty, a single mapping is one record."""
    if raw_deals is None:
        return []
    if isinstance(raw_deals, Mapping):
        return [raw_deals]
    return list(raw_deals)


def coerce_options(options: OptionsInput, config: DealboardConfig) -> DashboardOptions:
    """Validate options from a mapping (camelCase or snake_case keys)."""
    if options is None:
        opts = DashboardOptions()
    elif isinstance(options, DashboardOptions):
        opts = options
    else:
        opts = DashboardOptions.model_validate(dict(options))
    if "time_period" not in opts.model_fields_set:
        opts = opts.model_copy(update={"time_period": config.default_time_period})
    return opts


def empty_dashboard_data(error: Optional[str], now: datetime) -> DashboardData:
    """Zeroed dashboard: the shape returned for empty input and for failures."""
    return DashboardData(last_updated=now.isoformat(), error=error)


def _reduce(
    deals: list[EnrichedDeal],
    participant_id: Optional[str],
    include_salespeople: bool,
    now: datetime,
    config: DealboardConfig,
) -> AggregateResult:
    try:
        return aggregate(
            deals,
            participant_id,
            include_salespeople=include_salespeople,
            goal=config.goal_deals,
            now=now,
        )
    except (ArithmeticError, TypeError, ValueError) as e:
        raise AggregationFailure(f"Aggregation failed: {e}") from e


def _log_failure(outcome: Outcome, what: str) -> None:
    if not outcome.ok:
        logger.error("%s failed: %s", what, outcome.error, exc_info=outcome.exception)


def _build_dashboard(
    raw_deals: Any,
    options: OptionsInput,
    now: datetime,
    config: DealboardConfig,
) -> DashboardData:
    opts = coerce_options(options, config)
    records = _records(raw_deals)
    deal_filter = DealFilter(
        now,
        window=opts.time_period,
        participant_id=opts.participant_id,
        include_inactive=opts.include_inactive,
    )
    enriched = [enrich(d, opts.participant_id) for d in normalize_many(records)]
    deals = deal_filter.filter_passed(enriched)
    logger.debug(
        "Dashboard %s: %d of %d deals in window %s",
        opts.dashboard_type or "-",
        len(deals),
        len(records),
        describe_window(opts.time_period),
    )

    result = _reduce(deals, opts.participant_id, opts.include_salespeople, now, config)
    return DashboardData(
        deals=deals,
        metrics=result.metrics,
        salesperson_metrics=result.salesperson_metrics,
        products=summarize_products(deals),
        period_label=window_label(opts.time_period, now),
        last_updated=now.isoformat(),
    )


def aggregate_deals_for_dashboard(
    raw_deals: Any,
    options: OptionsInput = None,
    *,
    now: Optional[datetime] = None,
    config: Optional[DealboardConfig] = None,
) -> DashboardData:
    """
    Aggregate raw deal records into a DashboardData for the given options.

    Never raises. ``now`` defaults to the current UTC time and is the only
    clock read in the pipeline.
    """
    now = now or datetime.now(timezone.utc)
    config = config or DealboardConfig()
    outcome = attempt(
        lambda: _build_dashboard(raw_deals, options, now, config),
        lambda e: empty_dashboard_data(str(e) or e.__class__.__name__, now),
    )
    _log_failure(outcome, "Dashboard aggregation")
    return outcome.value


def _build_manager(
    raw_deals: Any,
    dealership_id: Optional[str],
    time_period: TimePeriod,
    now: datetime,
    config: DealboardConfig,
) -> ManagerDashboardData:
    deal_filter = DealFilter(now, window=time_period, dealership_id=dealership_id)
    enriched = [enrich(d) for d in normalize_many(_records(raw_deals))]
    deals = [d for d in deal_filter.filter_passed(enriched) if d.error is None]

    result = _reduce(deals, None, True, now, config)
    metrics = result.metrics
    goal = config.manager_sales_goal
    manager_metrics = ManagerMetrics(
        **metrics.model_dump(),
        avg_per_deal=metrics.total_gross / metrics.total_deals if metrics.total_deals else 0.0,
        sales_goal=goal,
        sales_performance=min(100.0, metrics.total_deals / goal * 100),
    )
    return ManagerDashboardData(
        deals=deals,
        metrics=manager_metrics,
        salesperson_metrics=result.salesperson_metrics or [],
        period_label=window_label(time_period, now),
        last_updated=now.isoformat(),
    )


def map_manager_dashboard_data(
    raw_deals: Any,
    dealership_id: Optional[Any] = None,
    time_period: Optional[TimePeriod] = None,
    *,
    now: Optional[datetime] = None,
    config: Optional[DealboardConfig] = None,
) -> ManagerDashboardData:
    """
    Sales-manager view over one dealership: active, error-free deals in the
    window, with dealership totals, goal progress and the salesperson leaderboard.
    """
    now = now or datetime.now(timezone.utc)
    config = config or DealboardConfig()
    dealership = None
    if dealership_id is not None:
        dealership = str(dealership_id).strip() or None
    period = time_period if time_period is not None else config.default_time_period
    outcome = attempt(
        lambda: _build_manager(raw_deals, dealership, period, now, config),
        lambda e: ManagerDashboardData(
            metrics=ManagerMetrics(sales_goal=config.manager_sales_goal),
            last_updated=now.isoformat(),
            error=str(e) or e.__class__.__name__,
        ),
    )
    _log_failure(outcome, "Manager dashboard aggregation")
    return outcome.value
