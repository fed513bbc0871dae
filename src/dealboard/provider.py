"""
Dashboard data provider: reads record partitions from a store, runs the
pipeline, memoizes results and drives refresh subscriptions.
"""

import logging
import threading
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from dealboard.cache import AggregationCache, LookupCache, aggregation_key
from dealboard.config import DealboardConfig
from dealboard.errors import StoreError
from dealboard.models.dashboard import (
    DashboardData,
    DashboardOptions,
    ManagerDashboardData,
    TimePeriod,
)
from dealboard.models.outcome import attempt
from dealboard.pipeline import (
    OptionsInput,
    aggregate_deals_for_dashboard,
    coerce_options,
    empty_dashboard_data,
    map_manager_dashboard_data,
)
from dealboard.store.base import RecordStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
RoleLookup = Callable[[str], Optional[str]]
DashboardCallback = Callable[[DashboardData], None]

MANAGER_DASHBOARD = "sales-manager"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DashboardDataProvider:
    """
    Entry point for hosts: one provider per signed-in session.

    ``clock`` is the only source of "now". ``cache`` and ``role_cache`` are
    owned by the provider and emptied by ``sign_out()``.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        config: Optional[DealboardConfig] = None,
        clock: Optional[Clock] = None,
        cache: Optional[AggregationCache[DashboardData]] = None,
        role_cache: Optional[LookupCache[str]] = None,
        role_lookup: Optional[RoleLookup] = None,
    ):
        self.store = store
        self.config = config or DealboardConfig()
        self.clock = clock or utc_now
        self.cache = cache if cache is not None else AggregationCache(self.config.cache_max_entries)
        self.role_cache = role_cache if role_cache is not None else LookupCache()
        self.role_lookup = role_lookup

    def partitions_for(self, dashboard_type: Optional[str]) -> list[str]:
        return self.config.partitions_for(dashboard_type)

    def load_records(self, dashboard_type: Optional[str]) -> list[Any]:
        """
        Records for a dashboard type: the first non-empty partition in its
        list. Any failure reading a partition is logged and counts as zero
        records.
        """
        for partition in self.partitions_for(dashboard_type):
            try:
                records = self.store.read(partition)
            except StoreError as e:
                logger.warning("Treating %s as empty: %s", partition, e)
                continue
            except Exception:
                logger.warning("Treating %s as empty: read failed", partition, exc_info=True)
                continue
            if records:
                return records
            logger.debug("Partition %s empty for %s", partition, dashboard_type)
        return []

    def resolve_dashboard_type(
        self,
        user_role: Optional[str] = None,
        participant_id: Optional[str] = None,
    ) -> str:
        """
        Dashboard type for a role; looks the role up by participant when not
        given. A failing lookup is logged, left uncached, and resolves to the
        default dashboard type.
        """
        role = user_role
        if role is None and participant_id and self.role_lookup is not None:
            try:
                role = self.role_cache.get_or_load(participant_id, self.role_lookup)
            except Exception:
                logger.warning("Role lookup failed for %s", participant_id, exc_info=True)
                role = None
        if role is None:
            return self.config.default_dashboard_type
        return self.config.role_dashboards.get(role, self.config.default_dashboard_type)

    def get_dashboard_data(
        self,
        dashboard_type: Optional[str] = None,
        options: OptionsInput = None,
    ) -> DashboardData:
        """
        Read, aggregate and memoize. Never raises; failures come back as a
        zeroed DashboardData with ``error`` set and are not cached. Callers
        get their own copy of a cached result.
        """
        now = self.clock()
        outcome = attempt(
            lambda: self._dashboard_data(dashboard_type, options, now),
            lambda e: empty_dashboard_data(str(e) or e.__class__.__name__, now),
        )
        if not outcome.ok:
            logger.error(
                "Dashboard data for %s failed: %s",
                dashboard_type or "-",
                outcome.error,
                exc_info=outcome.exception,
            )
        return outcome.value

    def _dashboard_data(
        self,
        dashboard_type: Optional[str],
        options: OptionsInput,
        now: datetime,
    ) -> DashboardData:
        try:
            opts = coerce_options(options, self.config)
        except ValueError:
            # Let the pipeline report the invalid options in its usual shape
            return aggregate_deals_for_dashboard([], options, now=now, config=self.config)

        dashboard_type = (
            dashboard_type
            or opts.dashboard_type
            or self.resolve_dashboard_type(opts.user_role, opts.participant_id)
        )
        records = self.load_records(dashboard_type)
        key = aggregation_key(records, dashboard_type, opts, now.date().isoformat())
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Aggregation cache hit for %s", dashboard_type)
            return cached.model_copy(deep=True)

        data = aggregate_deals_for_dashboard(records, opts, now=now, config=self.config)
        if data.error is None:
            self.cache.put(key, data.model_copy(deep=True))
        return data

    def get_manager_dashboard_data(
        self,
        dealership_id: Optional[str] = None,
        time_period: Optional[TimePeriod] = None,
    ) -> ManagerDashboardData:
        records = self.load_records(MANAGER_DASHBOARD)
        return map_manager_dashboard_data(
            records,
            dealership_id,
            time_period,
            now=self.clock(),
            config=self.config,
        )

    def subscribe(
        self,
        dashboard_type: Optional[str],
        options: OptionsInput,
        callback: DashboardCallback,
        *,
        interval: Optional[float] = None,
    ) -> "DashboardSubscription":
        """Start a refreshing subscription; the first result is delivered right away."""
        subscription = DashboardSubscription(
            self,
            dashboard_type,
            options,
            callback,
            interval=interval if interval is not None else self.config.refresh_interval_seconds,
        )
        subscription.start()
        return subscription

    def sign_out(self) -> None:
        """Drop everything cached for the session."""
        self.cache.clear()
        self.role_cache.clear()
        logger.info("Provider caches cleared on sign-out")


class DashboardSubscription:
    """
    Periodic and change-driven refresh of one dashboard.

    Each refresh takes a generation number when it starts. Results are
    delivered last-write-wins by generation: a result from an older request
    is dropped if a newer one was already delivered. After ``close()`` no
    callback fires.
    """

    def __init__(
        self,
        provider: DashboardDataProvider,
        dashboard_type: Optional[str],
        options: OptionsInput,
        callback: DashboardCallback,
        *,
        interval: float,
    ):
        self.provider = provider
        self.dashboard_type = dashboard_type
        self.options = options
        self.callback = callback
        self.interval = interval
        self.latest: Optional[DashboardData] = None

        self._lock = threading.RLock()
        self._idle = threading.Condition(self._lock)
        # Serializes callbacks; never held by close()
        self._callback_lock = threading.RLock()
        self._in_callback: list[int] = []
        self._generation = 0
        self._delivered = 0
        self._closed = False
        self._stop = threading.Event()
        self._wake = threading.Event()
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def partitions(self) -> list[str]:
        dashboard_type = self.dashboard_type
        if dashboard_type is None and isinstance(self.options, DashboardOptions):
            dashboard_type = self.options.dashboard_type
        elif dashboard_type is None and isinstance(self.options, Mapping):
            dashboard_type = self.options.get("dashboardType") or self.options.get("dashboard_type")
        return self.provider.partitions_for(dashboard_type)

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        self._unsubscribe = self.provider.store.add_listener(self._on_store_change)
        self._thread = threading.Thread(
            target=self._run,
            name=f"dealboard-refresh-{self.dashboard_type or 'default'}",
            daemon=True,
        )
        self._thread.start()

    def _run(self) -> None:
        self._tick()
        while not self._stop.is_set():
            self._wake.wait(self.interval)
            self._wake.clear()
            if self._stop.is_set():
                break
            logger.debug("Scheduled refresh of %s", self.dashboard_type)
            self._tick()

    def _tick(self) -> None:
        try:
            self.refresh()
        except Exception:
            logger.exception("Scheduled refresh of %s failed", self.dashboard_type)

    def _on_store_change(self, partition: str) -> None:
        if partition in self.partitions:
            logger.debug("Partition %s changed; refreshing %s", partition, self.dashboard_type)
            self.refresh()

    def next_generation(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def deliver(self, generation: int, data: DashboardData) -> bool:
        """
        Hand a result to the callback unless it is stale or the subscription
        closed. The callback runs outside the state lock, so it may call
        ``close()``.
        """
        me = threading.get_ident()
        with self._callback_lock:
            with self._lock:
                if self._closed:
                    return False
                if generation < self._delivered:
                    logger.warning(
                        "Dropping stale refresh %d of %s (already delivered %d)",
                        generation,
                        self.dashboard_type,
                        self._delivered,
                    )
                    return False
                self._delivered = generation
                self.latest = data
                self._in_callback.append(me)
            try:
                self.callback(data)
            except Exception:
                logger.exception("Dashboard callback failed for %s", self.dashboard_type)
            finally:
                with self._idle:
                    self._in_callback.remove(me)
                    self._idle.notify_all()
            return True

    def refresh(self) -> Optional[DashboardData]:
        """Run the pipeline now, in the calling thread, and deliver the result."""
        if self._closed:
            return None
        generation = self.next_generation()
        data = self.provider.get_dashboard_data(self.dashboard_type, self.options)
        self.deliver(generation, data)
        return data

    def close(self) -> None:
        """
        Stop the timer and store listener. Safe to call more than once, and
        from inside the callback. Callbacks already running in other threads
        finish before this returns; none start afterwards.
        """
        me = threading.get_ident()
        with self._idle:
            if self._closed:
                return
            self._closed = True
            self._idle.wait_for(lambda: all(t == me for t in self._in_callback), timeout=5.0)
            in_callback = me in self._in_callback
        self._stop.set()
        self._wake.set()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        thread = self._thread
        if thread is not None and thread is not threading.current_thread() and not in_callback:
            thread.join(timeout=5.0)

    def __enter__(self) -> "DashboardSubscription":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
