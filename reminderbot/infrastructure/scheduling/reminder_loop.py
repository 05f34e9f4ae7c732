from __future__ import annotations

import asyncio
import logging

from reminderbot.application.use_cases.send_reminders import ReminderScheduler

logger = logging.getLogger(__name__)


async def run_reminder_loop(scheduler: ReminderScheduler, interval_seconds: float = 60.0) -> None:
    """
    Tick forever at a fixed rate. Ticks are anchored to the loop start so a
    slow tick shortens the following sleep instead of shifting every later
    tick. The blocking tick runs in a worker thread.
    """
    loop = asyncio.get_running_loop()
    logger.info("Reminder loop started", extra={"reason": f"interval={interval_seconds}s"})
    next_tick = loop.time()
    while True:
        try:
            await asyncio.to_thread(scheduler.tick)
        except Exception as e:
            logger.exception("Error in reminder loop", extra={"reason": str(e)})

        next_tick += interval_seconds
        now = loop.time()
        if next_tick < now:
            # Overran whole periods; skip them rather than firing a burst
            missed = int((now - next_tick) // interval_seconds) + 1
            next_tick += missed * interval_seconds
            logger.warning("Reminder tick overran its period", extra={"count": missed})
        await asyncio.sleep(next_tick - now)


def start_reminder_loop(scheduler: ReminderScheduler, interval_seconds: float = 60.0) -> asyncio.Task:
    return asyncio.get_running_loop().create_task(run_reminder_loop(scheduler, interval_seconds))


async def stop_reminder_loop(task: asyncio.Task | None) -> None:
    if task is None:
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        logger.info("Reminder loop stopped")
