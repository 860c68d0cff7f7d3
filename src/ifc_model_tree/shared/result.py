"""Result pattern for per-item outcomes.

Batch operations such as name resolution keep going when single items fail;
each item yields a Success or a Failure instead of raising.
"""
from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Item that completed."""

    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def unwrap_or(self, default: T) -> T:
        """Get the value; the default is unused."""
        return self.value

    def map(self, fn: Callable[[T], U]) -> Success[U]:
        """Transform the value."""
        return Success(fn(self.value))


@dataclass(frozen=True)
class Failure(Generic[E]):
    """Item that failed, carrying its error."""

    error: E

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def unwrap_or(self, default: T) -> T:
        """Get the fallback for the failed item."""
        return default

    def map(self, fn: Callable[[object], object]) -> Failure[E]:
        """Failures pass through unchanged."""
        return self


Result = Success[T] | Failure[E]


def ok(value: T) -> Success[T]:
    """Create a Success result."""
    return Success(value)


def err(error: E) -> Failure[E]:
    """Create a Failure result."""
    return Failure(error)


def failures(results: Iterable[Success[T] | Failure[E]]) -> list[E]:
    """Collect the errors of all failed results, in order."""
    return [result.error for result in results if isinstance(result, Failure)]
