from dataclasses import dataclass
from typing import Awaitable, Generic, Optional, TypeVar

from nebula.core.logger import logger

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of a call whose failure is recoverable."""

    value: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T = None) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: Exception) -> "Outcome[T]":
        return cls(error=error)


async def attempt(awaitable: Awaitable[T], description: str) -> Outcome[T]:
    try:
        return Outcome.success(await awaitable)
    except Exception as e:
        logger.warning(f"{description} failed: {e}")
        return Outcome.failure(e)
