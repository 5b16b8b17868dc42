"""Single-flight lazy initialization shared by concurrent callers."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Generic, TypeVar

from loguru import logger

from qodo_bridge.errors import InitializationError

log = logger.bind(service="qodo-lazy")


T = TypeVar("T")


class CellState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


class SharedCell(Generic[T]):
    """Builds its value at most once and hands the same value to every caller.

    Callers that arrive while construction is in flight await the same task.
    A failed construction is final: later calls re-raise the original
    :class:`InitializationError` and the factory is not run again.
    """

    def __init__(self, factory: Callable[[], Awaitable[T]], *, name: str = "shared") -> None:
        self._factory = factory
        self._name = name
        self._task: asyncio.Task[T] | None = None
        self._value: T | None = None
        self._ready = False
        self._build_count = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def build_count(self) -> int:
        return self._build_count

    @property
    def state(self) -> CellState:
        if self._ready:
            return CellState.READY
        if self._task is None:
            return CellState.UNINITIALIZED
        if not self._task.done():
            return CellState.INITIALIZING
        return CellState.FAILED

    def peek(self) -> T | None:
        """Return the value if ready, without starting construction."""

        return self._value if self._ready else None

    def start(self) -> None:
        """Begin construction in the background; must be called inside a running loop."""

        if self._task is not None:
            return
        self._ensure_task().add_done_callback(self._log_background_failure)

    async def get(self) -> T:
        if self._ready:
            return self._value  # type: ignore[return-value]
        # Shield so one cancelled waiter does not cancel construction for the others.
        return await asyncio.shield(self._ensure_task())

    def _ensure_task(self) -> asyncio.Task[T]:
        if self._task is None:
            log.info("lazy.initializing name={}", self._name)
            self._task = asyncio.ensure_future(self._build())
        return self._task

    async def _build(self) -> T:
        self._build_count += 1
        try:
            value = await self._factory()
        except Exception as exc:
            raise InitializationError(f"{self._name} initialization failed: {exc}") from exc
        self._value = value
        self._ready = True
        log.info("lazy.ready name={}", self._name)
        return value

    def _log_background_failure(self, task: asyncio.Task[T]) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            log.error("lazy.background_failed name={} error={}", self._name, error)
