"""Tagged result for stages that must never raise past their boundary."""

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    ok: bool = True


@dataclass(frozen=True)
class Failed(Generic[T]):
    """
    Failure with a usable fallback value. The public entry points return
    ``fallback``; ``error`` and ``exception`` stay available for logging.
    """

    error: str
    fallback: T
    exception: Optional[BaseException] = None
    ok: bool = False

    @property
    def value(self) -> T:
        return self.fallback


Outcome = Union[Ok[T], Failed[T]]


def attempt(fn: Callable[[], T], fallback: Callable[[BaseException], T]) -> "Outcome[T]":
    """Run fn; on any exception build the fallback from it instead of raising."""
    try:
        return Ok(fn())
    except Exception as e:
        return Failed(error=str(e) or e.__class__.__name__, fallback=fallback(e), exception=e)
