"""Unit tests for async utilities."""

from __future__ import annotations

import anyio
import pytest

from patchpoint.utils.async_utils import (
    ParallelExecutionError,
    run_in_batches,
    run_parallel,
)
from tests.fixtures.providers import SleepRecorder


class TestRunParallel:
    """Tests for run_parallel function."""

    @pytest.mark.asyncio
    async def test_empty_task_list_returns_empty_results(self) -> None:
        assert await run_parallel([]) == []

    @pytest.mark.asyncio
    async def test_multiple_tasks_preserve_order(self) -> None:
        """Results should be in the same order as input tasks."""

        async def task_a() -> str:
            await anyio.sleep(0.02)
            return "a"

        async def task_b() -> str:
            await anyio.sleep(0.01)
            return "b"

        async def task_c() -> str:
            return "c"

        assert await run_parallel([task_a, task_b, task_c]) == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_exception_with_return_exceptions_false_raises(self) -> None:
        async def success() -> str:
            return "ok"

        async def failure() -> str:
            raise ValueError("test error")

        with pytest.raises(ParallelExecutionError) as exc_info:
            await run_parallel([success, failure])

        assert len(exc_info.value.exceptions) == 1
        assert exc_info.value.results[0] == "ok"

    @pytest.mark.asyncio
    async def test_exception_with_return_exceptions_true(self) -> None:
        async def failure() -> str:
            raise ValueError("test error")

        async def success() -> str:
            return "ok"

        results = await run_parallel([failure, success], return_exceptions=True)

        assert isinstance(results[0], ValueError)
        assert results[1] == "ok"


class TestRunInBatches:
    """Tests for run_in_batches function."""

    @pytest.mark.asyncio
    async def test_results_in_input_order(self, sleep_recorder: SleepRecorder) -> None:
        def make(value: int):
            async def task() -> int:
                await anyio.sleep(0.001 * (5 - value))
                return value

            return task

        results = await run_in_batches(
            [make(i) for i in range(5)], batch_size=2, sleep=sleep_recorder
        )

        assert results == [0, 1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_pauses_only_between_batches(
        self, sleep_recorder: SleepRecorder
    ) -> None:
        async def task() -> None:
            return None

        await run_in_batches(
            [task] * 7, batch_size=3, inter_batch_delay=0.3, sleep=sleep_recorder
        )

        assert sleep_recorder.delays == [0.3, 0.3]

    @pytest.mark.asyncio
    async def test_no_pause_for_single_batch(
        self, sleep_recorder: SleepRecorder
    ) -> None:
        async def task() -> None:
            return None

        await run_in_batches([task] * 3, batch_size=3, sleep=sleep_recorder)

        assert sleep_recorder.delays == []

    @pytest.mark.asyncio
    async def test_batch_finishes_before_next_starts(
        self, sleep_recorder: SleepRecorder
    ) -> None:
        in_flight = 0
        peak = 0

        async def task() -> None:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await anyio.sleep(0.001)
            in_flight -= 1

        await run_in_batches([task] * 8, batch_size=3, sleep=sleep_recorder)

        assert peak == 3

    @pytest.mark.asyncio
    async def test_failure_does_not_cancel_siblings(
        self, sleep_recorder: SleepRecorder
    ) -> None:
        async def ok() -> str:
            await anyio.sleep(0.001)
            return "ok"

        async def boom() -> str:
            raise RuntimeError("boom")

        results = await run_in_batches(
            [ok, boom, ok, ok],
            batch_size=2,
            return_exceptions=True,
            sleep=sleep_recorder,
        )

        assert results[0] == "ok"
        assert isinstance(results[1], RuntimeError)
        assert results[2:] == ["ok", "ok"]

    @pytest.mark.asyncio
    async def test_failure_raises_after_all_batches(
        self, sleep_recorder: SleepRecorder
    ) -> None:
        ran: list[int] = []

        def make(value: int):
            async def task() -> int:
                ran.append(value)
                if value == 0:
                    raise RuntimeError("first")
                return value

            return task

        with pytest.raises(ParallelExecutionError):
            await run_in_batches(
                [make(i) for i in range(4)], batch_size=2, sleep=sleep_recorder
            )

        assert sorted(ran) == [0, 1, 2, 3]

    @pytest.mark.asyncio
    async def test_invalid_batch_size(self) -> None:
        async def task() -> None:
            return None

        with pytest.raises(ValueError, match="batch_size"):
            await run_in_batches([task], batch_size=0)

    @pytest.mark.asyncio
    async def test_empty(self) -> None:
        assert await run_in_batches([]) == []
