"""Abstract base class for raw deal record stores."""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable

logger = logging.getLogger(__name__)

ChangeListener = Callable[[str], None]


class RecordStore(ABC):
    """
    Source of raw deal records, organised in named partitions
    (e.g. ``financeDeals``, ``singleFinanceDeals``).
    Writers call ``_notify(partition)`` so subscribers can refresh.
    """

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []
        self._listener_lock = threading.Lock()

    @abstractmethod
    def read(self, partition: str) -> list[Any]:
        """
        Return the raw records of one partition, in stored order.
        A missing partition is an empty list; read failures raise StoreError.
        """
        pass

    def add_listener(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change listener; returns a callable that removes it."""
        with self._listener_lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._listener_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, partition: str) -> None:
        with self._listener_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(partition)
            except Exception as e:
                logger.warning("Change listener failed for partition %s: %s", partition, e)
