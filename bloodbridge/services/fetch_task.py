from __future__ import annotations

from enum import Enum
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from loguru import logger

T = TypeVar("T")


class FetchState(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class FetchTask(Generic[T]):
    """
    One remote fetch with an explicit lifecycle.

    A task starts ``pending`` and ends either ``resolved`` with data or
    ``rejected`` with the error. ``run`` never raises; callers read the state
    or fall back with ``result_or``.
    """

    def __init__(self, loader: Callable[[], Awaitable[T]], name: str) -> None:
        self.loader = loader
        self.name = name
        self.state = FetchState.PENDING
        self.data: Optional[T] = None
        self.error: Optional[Exception] = None

    @property
    def is_pending(self) -> bool:
        return self.state is FetchState.PENDING

    async def run(self) -> Optional[T]:
        try:
            self.data = await self.loader()
        except Exception as exc:
            self.error = exc
            self.state = FetchState.REJECTED
            logger.warning("Fetch '{}' rejected: {}", self.name, exc)
            return None
        self.state = FetchState.RESOLVED
        return self.data

    def result_or(self, default: T) -> T:
        if self.state is FetchState.RESOLVED and self.data is not None:
            return self.data
        return default

    def __repr__(self) -> str:
        return f"FetchTask(name={self.name!r}, state={self.state.value})"
