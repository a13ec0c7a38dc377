"""Async context manager for timing and logging operations."""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from verify_proxy.infrastructure.logging.logger import StructuredLogger


class TimedContext:
    """Mutable context for a timed operation."""

    def __init__(self) -> None:
        self.state: dict[str, Any] = {}
        self._start = time.perf_counter()
        self._end: float | None = None

    @property
    def elapsed_ms(self) -> float:
        end = self._end if self._end is not None else time.perf_counter()
        return (end - self._start) * 1000

    def set_state(self, **state: Any) -> None:
        self.state.update(state)

    def stop(self) -> None:
        if self._end is None:
            self._end = time.perf_counter()


@asynccontextmanager
async def timed_operation(
    event: str,
    logger: StructuredLogger,
) -> AsyncGenerator[TimedContext, None]:
    """Time an operation and log its final state once it completes."""
    ctx = TimedContext()
    try:
        yield ctx
    finally:
        ctx.stop()
        logger.log_event(event, ctx.state, duration_ms=ctx.elapsed_ms)
