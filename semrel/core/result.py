"""Result type for explicit error handling.

Every fallible release step returns ``Result[T, E]``: ``Ok`` carries the
value, ``Err`` carries a typed error variant. Callers branch with
``isinstance`` or structural pattern matching instead of try/except.

Usage:
    match require_version("1.2.3", what="last version"):
        case Ok(version):
            print(f"last release: {version}")
        case Err(error):
            print(f"error: {error.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result.

    Attributes:
        value: The success value.
    """

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failed result.

    Attributes:
        error: The error value.
    """

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[E]
