"""Result container used to hand fetch outcomes between layers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar


T = TypeVar("T")
E = TypeVar("E", bound=BaseException)


@dataclass(frozen=True, slots=True)
class Result(Generic[T, E]):
    """Either a success value or the exception describing a failure."""

    value: Optional[T] = None
    error: Optional[E] = None

    @classmethod
    def ok(cls, value: T) -> "Result[T, E]":
        return cls(value=value)

    @classmethod
    def err(cls, error: E) -> "Result[T, E]":
        return cls(error=error)

    def is_err(self) -> bool:
        return self.error is not None

    def unwrap(self) -> T:
        """Return the value or re-raise the stored error."""

        if self.error is not None:
            raise self.error
        assert self.value is not None
        return self.value


__all__ = ["Result"]
