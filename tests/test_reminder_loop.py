"""
Tests for the fixed-rate reminder loop.
"""

from __future__ import annotations

import asyncio
import time

from reminderbot.infrastructure.scheduling.reminder_loop import start_reminder_loop, stop_reminder_loop


class SlowScheduler:
    def __init__(self, tick_seconds: float, fail: bool = False) -> None:
        self.tick_seconds = tick_seconds
        self.fail = fail
        self.started_at: list[float] = []

    def tick(self, now=None):
        self.started_at.append(time.monotonic())
        time.sleep(self.tick_seconds)
        if self.fail:
            raise RuntimeError("tick failed")
        return []


def _run(scheduler: SlowScheduler, interval: float, duration: float) -> list[float]:
    async def scenario():
        task = start_reminder_loop(scheduler, interval)
        await asyncio.sleep(duration)
        await stop_reminder_loop(task)

    asyncio.run(scenario())
    starts = scheduler.started_at
    return [later - earlier for earlier, later in zip(starts, starts[1:])]


def test_slow_tick_does_not_stretch_the_period():
    gaps = _run(SlowScheduler(tick_seconds=0.1), interval=0.3, duration=1.05)

    assert len(gaps) >= 3
    assert all(abs(gap - 0.3) < 0.06 for gap in gaps)


def test_tick_longer_than_period_skips_to_next_slot():
    gaps = _run(SlowScheduler(tick_seconds=0.25), interval=0.2, duration=1.0)

    assert gaps
    assert all(abs(gap - 0.4) < 0.08 for gap in gaps)


def test_failing_tick_keeps_loop_running():
    gaps = _run(SlowScheduler(tick_seconds=0.0, fail=True), interval=0.1, duration=0.45)

    assert len(gaps) >= 3
