"""Tests for the DeferredTracker lifecycle helper."""

from __future__ import annotations

import asyncio
import unittest

from evbus.results import Deferred
from evbus.task_manager import DeferredTracker


class DeferredTrackerTests(unittest.IsolatedAsyncioTestCase):
    """Validate tracking, self-cleaning and draining."""

    async def test_tracked_tasks_self_clean(self) -> None:
        tracker = DeferredTracker()

        async def _quick() -> None:
            pass

        task = asyncio.create_task(_quick())
        tracker.add(Deferred(task))
        self.assertEqual(len(tracker), 1)
        await task
        await asyncio.sleep(0)  # Let done callbacks run.
        self.assertEqual(len(tracker), 0)

    async def test_done_future_is_not_tracked(self) -> None:
        tracker = DeferredTracker()
        future: asyncio.Future[int] = asyncio.get_running_loop().create_future()
        future.set_result(1)
        tracker.add(Deferred(future))
        self.assertEqual(len(tracker), 0)

    async def test_await_all_does_not_cancel_or_raise(self) -> None:
        tracker = DeferredTracker()
        finished: list[str] = []

        async def _slow() -> None:
            await asyncio.sleep(0.01)
            finished.append("slow")

        async def _broken() -> None:
            raise RuntimeError("broken")

        tracker.add(Deferred(asyncio.create_task(_slow())))
        tracker.add(Deferred(asyncio.create_task(_broken())))
        await tracker.await_all()
        self.assertEqual(finished, ["slow"])
        self.assertEqual(len(tracker), 0)

    async def test_log_failures_reports_uncaptured_exception(self) -> None:
        tracker = DeferredTracker()

        async def _broken() -> None:
            raise ValueError("lost")

        with self.assertLogs("evbus.task_manager", level="WARNING") as logs:
            tracker.add(Deferred(asyncio.create_task(_broken())), log_failures=True)
            await tracker.await_all()
        self.assertTrue(any("bus.deferred.uncaptured" in line for line in logs.output))

    async def test_cancelled_task_is_drained(self) -> None:
        tracker = DeferredTracker()

        async def _worker() -> None:
            await asyncio.sleep(9999)

        task = asyncio.create_task(_worker())
        tracker.add(Deferred(task), log_failures=True)
        await asyncio.sleep(0)  # Let the task start.
        task.cancel()
        await tracker.await_all()
        self.assertTrue(task.cancelled())
        self.assertEqual(len(tracker), 0)


if __name__ == "__main__":
    unittest.main()
