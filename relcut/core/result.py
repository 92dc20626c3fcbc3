"""Result type for explicit error handling.

Every fallible step of a release returns a Result instead of raising, so the
pipeline can stop on the first failure and render it once.

Usage:
    def parse_port(raw: str) -> Result[int, str]:
        if not raw.isdigit():
            return Err(f"not a number: {raw}")
        return Ok(int(raw))

    match parse_port("8080"):
        case Ok(value):
            print(f"port {value}")
        case Err(error):
            print(f"error: {error}")

Callers narrow with `isinstance(result, Err)` or a match statement.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A successful result carrying `value`."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """A failed result carrying `error`."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Union[Ok[T], Err[E]]
