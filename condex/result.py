"""Result type for parsing, type-checking and loading.

Library functions that can fail on user input return ``Ok(value)`` or
``Err(error)`` instead of raising; callers narrow with ``match``.  The
extractor, which must abort on the first bad guard, turns an ``Err`` back
into an exception with `unwrap`.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E", bound=Exception)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E


type Result[T, E] = Ok[T] | Err[E]


def unwrap[V](result: Result[V, Exception]) -> V:
    """Return the value of an ``Ok`` or raise the error held by an ``Err``."""
    match result:
        case Ok(value):
            return value
        case Err(error):
            raise error
