"""
Bounded-concurrency runner for async work items.

run_bounded() keeps a sliding window of at most `limit` operations in flight:
as soon as any one finishes, the next queued operation is started. Every
operation produces an Outcome, so a failing item never aborts the batch.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Iterable, TypeVar

from ordertrack.config import DEFAULT_SYNC_CONCURRENCY

T = TypeVar("T")

Operation = Callable[[], Awaitable[T]]


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of a single operation: either a value or the captured error."""

    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def capture(operation: Operation[T]) -> Outcome[T]:
    """
    Await an operation, converting any exception into a failed Outcome.

    A CancelledError raised by the operation itself is captured too. It is
    re-raised only when the awaiting task is the one being cancelled.
    """
    try:
        return Outcome(value=await operation())
    except asyncio.CancelledError as e:
        task = asyncio.current_task()
        if task is not None and task.cancelling():
            raise
        return Outcome(error=e)
    except Exception as e:
        return Outcome(error=e)


async def run_bounded(
    operations: Iterable[Operation[T]],
    limit: int = DEFAULT_SYNC_CONCURRENCY,
) -> list[Outcome[T]]:
    """
    Run zero-argument async operations with at most `limit` in flight.

    Args:
        operations: Callables returning awaitables, started in input order
        limit: Maximum number of simultaneously running operations (>= 1)

    Returns:
        One Outcome per operation, in completion order

    Raises:
        ValueError: If limit is less than 1
    """
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")

    results: list[Outcome[T]] = []
    in_flight: set[asyncio.Task] = set()

    async def _run(operation: Operation[T]):
        results.append(await capture(operation))

    try:
        for operation in operations:
            if len(in_flight) >= limit:
                _, in_flight = await asyncio.wait(
                    in_flight, return_when=asyncio.FIRST_COMPLETED
                )
            in_flight.add(asyncio.ensure_future(_run(operation)))

        if in_flight:
            await asyncio.wait(in_flight)
    except asyncio.CancelledError:
        for task in in_flight:
            task.cancel()
        await asyncio.gather(*in_flight, return_exceptions=True)
        raise

    return results
