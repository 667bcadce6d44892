"""
Task primitives for PageAudit
Join-all-settle execution with per-unit timeouts and tagged outcomes
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, List, Optional, Sequence, TypeVar

T = TypeVar("T")


class UnitTimeoutError(Exception):
    """A unit of work exceeded its configured time limit."""

    def __init__(self, limit: float):
        super().__init__(f"timeout after {limit}s")
        self.limit = limit


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Tagged result of one unit: either `value` (ok) or `error` (err)."""

    name: str
    ok: bool
    value: Optional[T] = None
    error: Optional[BaseException] = None
    duration_ms: float = 0.0

    @property
    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        return str(self.error) or self.error.__class__.__name__


async def run_with_timeout(awaitable: Awaitable[T], timeout: Optional[float]) -> T:
    """Await `awaitable`, raising UnitTimeoutError once `timeout` seconds pass."""
    if timeout is None:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as e:
        raise UnitTimeoutError(timeout) from e


async def settle(name: str, factory: Callable[[], Awaitable[T]], timeout: Optional[float] = None) -> Outcome[T]:
    """Run one unit and convert its result or exception into an `Outcome`.

    Cancellation is not converted: it propagates to the caller.
    """
    start = time.perf_counter()
    try:
        value = await run_with_timeout(factory(), timeout)
    except Exception as e:
        return Outcome(name=name, ok=False, error=e, duration_ms=(time.perf_counter() - start) * 1000.0)
    return Outcome(name=name, ok=True, value=value, duration_ms=(time.perf_counter() - start) * 1000.0)


async def gather_settled(
    units: Sequence[tuple],
    timeout: Optional[float] = None,
) -> List[Outcome[Any]]:
    """Run `(name, factory)` units concurrently and wait for every one to settle.

    No unit is cancelled because another failed; outcomes keep input order.
    """
    if not units:
        return []
    return list(await asyncio.gather(*(settle(name, factory, timeout) for name, factory in units)))
