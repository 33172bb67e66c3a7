"""Explicit success/failure values returned by the engine facade"""
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from north_gamification.exceptions import GamificationError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or the error that prevented it"""
    value: Optional[T] = None
    error: Optional[GamificationError] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: GamificationError) -> "Result[T]":
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    def get_or_none(self) -> Optional[T]:
        return self.value if self.error is None else None

    def get_or_raise(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value
