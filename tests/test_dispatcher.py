"""
Tests for deferred reply delivery on the event loop.
"""

from __future__ import annotations

import asyncio

from conftest import RecordingPlatform
from reminderbot.application.use_cases.send_reply import SendReplyUseCase
from reminderbot.infrastructure.scheduling.asyncio_dispatcher import AsyncioReplyDispatcher


def test_dispatch_sends_after_delay():
    platform = RecordingPlatform()
    dispatcher = AsyncioReplyDispatcher(SendReplyUseCase(platform, auto_reply_enabled=True))

    async def scenario():
        dispatcher.bind(asyncio.get_running_loop())
        dispatcher.dispatch("111", "first", 0.05)
        dispatcher.dispatch("222", "second", 0)
        await asyncio.sleep(0)
        assert dispatcher.pending() == 2
        assert platform.sent == []
        await dispatcher.drain()

    asyncio.run(scenario())

    assert sorted(platform.sent) == [("111", "first"), ("222", "second")]


def test_dispatch_from_worker_thread():
    platform = RecordingPlatform()
    dispatcher = AsyncioReplyDispatcher(SendReplyUseCase(platform, auto_reply_enabled=True))

    async def scenario():
        dispatcher.bind(asyncio.get_running_loop())
        await asyncio.to_thread(dispatcher.dispatch, "111", "from thread", 0)
        await asyncio.sleep(0.01)
        await dispatcher.drain()

    asyncio.run(scenario())

    assert platform.sent == [("111", "from thread")]


def test_shutdown_cancels_waiting_replies():
    platform = RecordingPlatform()
    dispatcher = AsyncioReplyDispatcher(SendReplyUseCase(platform, auto_reply_enabled=True))

    async def scenario():
        dispatcher.bind(asyncio.get_running_loop())
        dispatcher.dispatch("111", "later", 60)
        await asyncio.sleep(0)
        await dispatcher.shutdown()

    asyncio.run(scenario())

    assert platform.sent == []


def test_unbound_dispatcher_drops_reply():
    platform = RecordingPlatform()
    dispatcher = AsyncioReplyDispatcher(SendReplyUseCase(platform, auto_reply_enabled=True))

    dispatcher.dispatch("111", "nowhere", 0)

    assert dispatcher.pending() == 0


def test_disabled_auto_reply_skips_send():
    platform = RecordingPlatform()
    send_reply = SendReplyUseCase(platform, auto_reply_enabled=False)

    assert send_reply.execute("111", "hello") is False
    assert platform.sent == []
