"""Explicit result type for best-effort lookups."""
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Outcome of a lookup that is allowed to fail open.

    Either ``ok`` with a value, or ``degraded`` when the backing store could
    not answer. Callers pick the fallback explicitly with ``value_or``.
    """

    value: Optional[T] = None
    is_degraded: bool = False

    @classmethod
    def ok(cls, value: T) -> "FetchResult[T]":
        return cls(value=value, is_degraded=False)

    @classmethod
    def degraded(cls) -> "FetchResult[T]":
        return cls(value=None, is_degraded=True)

    def value_or(self, default: T) -> T:
        if self.is_degraded or self.value is None:
            return default
        return self.value
