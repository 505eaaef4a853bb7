"""
Tests for the bounded-concurrency runner.
"""

import asyncio

import pytest

from ordertrack.utils.concurrency import Outcome, capture, run_bounded

pytest_plugins = ("pytest_asyncio",)


class InFlightTracker:
    """Counts concurrently running operations."""

    def __init__(self):
        self.current = 0
        self.peak = 0
        self.started: list[int] = []

    def operation(self, index: int, delay: float = 0.01, fail: bool = False):
        async def _op():
            self.current += 1
            self.peak = max(self.peak, self.current)
            self.started.append(index)
            try:
                await asyncio.sleep(delay)
                if fail:
                    raise RuntimeError(f"item {index} failed")
                return index
            finally:
                self.current -= 1

        return _op


class TestRunBounded:
    @pytest.mark.asyncio
    async def test_never_exceeds_limit(self):
        """No more than `limit` operations run at the same time"""
        tracker = InFlightTracker()
        operations = [tracker.operation(i) for i in range(10)]

        outcomes = await run_bounded(operations, limit=3)

        assert len(outcomes) == 10
        assert tracker.peak == 3

    @pytest.mark.asyncio
    async def test_limit_larger_than_input(self):
        tracker = InFlightTracker()
        outcomes = await run_bounded([tracker.operation(i) for i in range(2)], limit=5)

        assert len(outcomes) == 2
        assert tracker.peak == 2

    @pytest.mark.asyncio
    async def test_operations_start_in_input_order(self):
        tracker = InFlightTracker()
        await run_bounded([tracker.operation(i) for i in range(6)], limit=2)

        assert tracker.started == list(range(6))

    @pytest.mark.asyncio
    async def test_results_in_completion_order(self):
        """A fast operation started later finishes (and reports) first"""
        tracker = InFlightTracker()
        operations = [
            tracker.operation(0, delay=0.05),
            tracker.operation(1, delay=0.0),
        ]

        outcomes = await run_bounded(operations, limit=2)

        assert [outcome.value for outcome in outcomes] == [1, 0]

    @pytest.mark.asyncio
    async def test_failure_does_not_abort_batch(self):
        tracker = InFlightTracker()
        operations = [tracker.operation(i, fail=(i == 2)) for i in range(5)]

        outcomes = await run_bounded(operations, limit=3)

        assert len(outcomes) == 5
        failed = [outcome for outcome in outcomes if not outcome.ok]
        assert len(failed) == 1
        assert isinstance(failed[0].error, RuntimeError)
        assert str(failed[0].error) == "item 2 failed"
        assert sorted(o.value for o in outcomes if o.ok) == [0, 1, 3, 4]

    @pytest.mark.asyncio
    async def test_empty_input(self):
        assert await run_bounded([], limit=3) == []

    @pytest.mark.asyncio
    async def test_limit_below_one_rejected(self):
        with pytest.raises(ValueError):
            await run_bounded([], limit=0)

    @pytest.mark.asyncio
    async def test_limit_one_runs_sequentially(self):
        tracker = InFlightTracker()
        outcomes = await run_bounded([tracker.operation(i) for i in range(4)], limit=1)

        assert tracker.peak == 1
        assert [outcome.value for outcome in outcomes] == [0, 1, 2, 3]

    @pytest.mark.asyncio
    async def test_cancelled_operation_yields_outcome(self):
        """An operation raising CancelledError still reports one Outcome"""
        tracker = InFlightTracker()

        async def cancelled_op():
            raise asyncio.CancelledError()

        operations = [tracker.operation(0), cancelled_op, tracker.operation(2)]

        outcomes = await run_bounded(operations, limit=2)

        assert len(outcomes) == 3
        failed = [outcome for outcome in outcomes if not outcome.ok]
        assert len(failed) == 1
        assert isinstance(failed[0].error, asyncio.CancelledError)
        assert sorted(o.value for o in outcomes if o.ok) == [0, 2]

    @pytest.mark.asyncio
    async def test_cancelling_batch_awaits_in_flight(self):
        """Cancelling the batch cancels and awaits every running operation"""
        started: list[int] = []
        cleaned_up: list[int] = []

        def operation(index: int):
            async def _op():
                started.append(index)
                try:
                    await asyncio.sleep(10)
                finally:
                    cleaned_up.append(index)

            return _op

        runner = asyncio.ensure_future(
            run_bounded([operation(i) for i in range(5)], limit=2)
        )
        while len(started) < 2:
            await asyncio.sleep(0)

        runner.cancel()
        with pytest.raises(asyncio.CancelledError):
            await runner

        assert sorted(started) == [0, 1]
        assert sorted(cleaned_up) == [0, 1]


class TestCapture:
    @pytest.mark.asyncio
    async def test_success(self):
        async def op():
            return "done"

        outcome = await capture(op)

        assert outcome == Outcome(value="done")
        assert outcome.ok

    @pytest.mark.asyncio
    async def test_exception_captured(self):
        async def op():
            raise KeyError("missing")

        outcome = await capture(op)

        assert not outcome.ok
        assert outcome.value is None
        assert isinstance(outcome.error, KeyError)

    @pytest.mark.asyncio
    async def test_cancelled_error_captured(self):
        async def op():
            raise asyncio.CancelledError()

        outcome = await capture(op)

        assert not outcome.ok
        assert isinstance(outcome.error, asyncio.CancelledError)
