"""Error types and the fail-closed guard used by the public API."""

from __future__ import annotations

import functools
from typing import Any, Callable, TypeVar

from .logging_config import get_logger

F = TypeVar("F", bound=Callable[..., Any])

logger = get_logger("errors")


class HabitPulseError(Exception):
    """Base class for all habitpulse domain errors."""


class InvalidCalendarDay(HabitPulseError, ValueError):
    """Raised when a value cannot be read as a ``YYYY-MM-DD`` calendar day."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Invalid calendar day: {value!r}")


class InvalidHabitRecord(HabitPulseError, ValueError):
    """Raised when a stored habit record violates the habit schema."""

    def __init__(self, message: str, *, record: Any = None):
        self.record = record
        super().__init__(message)


def fails_closed(default: Any) -> Callable[[F], F]:
    """Return ``default`` instead of raising when the wrapped call hits bad input.

    Only ``HabitPulseError`` is recovered; programming errors still propagate.
    Callable defaults are invoked so mutable values (dicts) are never shared.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except HabitPulseError as exc:
                logger.warning(
                    "%s failed closed: %s",
                    func.__name__,
                    exc,
                    extra={"operation": func.__name__, "error_type": type(exc).__name__},
                )
                return default() if callable(default) else default

        return wrapper  # type: ignore[return-value]

    return decorator


__all__ = ["HabitPulseError", "InvalidCalendarDay", "InvalidHabitRecord", "fails_closed"]
