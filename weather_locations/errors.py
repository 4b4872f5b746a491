"""
Error taxonomy.

Every failure the client can surface is one of the classes below, and each
carries a short `kind` tag. Callers can either catch them like any exception
or run an operation through `attempt()` and branch on the tagged `Outcome`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Generic, Optional, TypeVar

T = TypeVar("T")


class LocationsError(RuntimeError):
    """Base class for user-facing failures."""
    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LocationsError):
    """Bad local input, raised before any network call."""
    kind = "validation"


class NetworkError(LocationsError):
    """Transport-level failure: no response was received."""
    kind = "network"


class ParseError(LocationsError):
    """The response body is not valid JSON or lacks required fields."""
    kind = "parse"


class RemoteError(LocationsError):
    """The remote endpoint answered with a non-2xx status."""
    kind = "remote"

    def __init__(self, status: int, message: str):
        super().__init__(f"{message} (status {status})")
        self.status = status
        self.message = message


class NotFoundError(LocationsError):
    """No saved location with the requested id."""
    kind = "not_found"


class DuplicateIdError(LocationsError):
    """A saved location with the same id is already stored."""
    kind = "duplicate_id"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Tagged result of one operation.

    Exactly one of `value` / `error` is meaningful, `ok` tells which.
    """
    ok: bool
    value: Optional[T] = None
    error: Optional[LocationsError] = None

    @property
    def kind(self) -> str:
        return "ok" if self.ok else self.error.kind

    @property
    def status(self) -> Optional[int]:
        return getattr(self.error, "status", None)


async def attempt(operation: Awaitable[T]) -> Outcome[T]:
    """Await an operation and fold any `LocationsError` into an `Outcome`."""
    try:
        value: Any = await operation
    except LocationsError as e:
        return Outcome(ok=False, error=e)
    return Outcome(ok=True, value=value)
