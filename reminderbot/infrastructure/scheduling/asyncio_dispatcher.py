from __future__ import annotations

import asyncio
import logging

from reminderbot.application.ports.reply_dispatcher import ReplyDispatcherPort
from reminderbot.application.use_cases.send_reply import SendReplyUseCase


class AsyncioReplyDispatcher(ReplyDispatcherPort):
    """
    Defers sends onto an asyncio event loop. dispatch() may be called from
    worker threads; the wait happens on the loop and the blocking send runs
    in the default executor.
    """

    def __init__(self, send_reply: SendReplyUseCase, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._send_reply = send_reply
        self._loop = loop
        self._tasks: set[asyncio.Task] = set()
        self._logger = logging.getLogger(__name__)

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    def dispatch(self, recipient_id: str, text: str, delay_seconds: float) -> None:
        if self._loop is None or self._loop.is_closed():
            self._logger.error("Dispatcher has no running loop, dropping reply", extra={"phone": recipient_id})
            return
        self._loop.call_soon_threadsafe(self._schedule, recipient_id, text, delay_seconds)

    def _schedule(self, recipient_id: str, text: str, delay_seconds: float) -> None:
        task = self._loop.create_task(self._send_later(recipient_id, text, delay_seconds))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _send_later(self, recipient_id: str, text: str, delay_seconds: float) -> None:
        if delay_seconds > 0:
            await asyncio.sleep(delay_seconds)
        await asyncio.to_thread(self._send_reply.execute, recipient_id, text)

    async def drain(self) -> None:
        """Wait for every pending send to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel sends still waiting out their delay."""
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            self._logger.info("Cancelling pending replies", extra={"count": len(self._tasks)})
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def pending(self) -> int:
        return len(self._tasks)
