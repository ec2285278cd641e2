"""
Tests for SessionFeed: channel + ticker + reconciler wiring and teardown.
"""

import asyncio

import pytest

from coach_console.errors import TransportFailure
from coach_console.push import GET_FOCUSING
from coach_console.session import SessionFeed, SessionPhase
from coach_console.ticker import ClockTicker
from tests.fixtures import FakeChannel, settle


def focusing(left: int, on: bool = True) -> dict:
    return {
        "type": "focusing",
        "focusing": on,
        "since_last_change": 0,
        "focus_time_left": left,
        "num_focuses": 1,
    }


class TestStart:
    """Opening the feed."""

    def test_requests_snapshot_on_open(self):
        async def run():
            channel = FakeChannel()
            async with SessionFeed(channel, ClockTicker(60)) as feed:
                return channel.sent, feed.reconciler.phase

        sent, phase = asyncio.run(run())
        assert sent == [GET_FOCUSING]
        assert phase is SessionPhase.UNKNOWN

    def test_open_failure_closes_feed(self):
        async def run():
            channel = FakeChannel(fail_open=True)
            feed = SessionFeed(channel, ClockTicker(60))
            with pytest.raises(TransportFailure):
                async with feed:
                    pass
            return feed, channel

        feed, channel = asyncio.run(run())
        assert feed.closed
        assert channel.closed
        assert not feed.ticker.running

    def test_start_after_close_raises(self):
        async def run():
            feed = SessionFeed(FakeChannel(), ClockTicker(60))
            await feed.close()
            with pytest.raises(RuntimeError):
                await feed.start()

        asyncio.run(run())


class TestDispatch:
    """Frames arriving on the channel."""

    def test_focusing_push_updates_state(self):
        async def run():
            channel = FakeChannel()
            async with SessionFeed(channel, ClockTicker(60)) as feed:
                channel.push(focusing(1500))
                await settle()
                return feed.reconciler.current(), feed.reconciler.phase

        state, phase = asyncio.run(run())
        assert state.remaining_seconds == 1500
        assert phase is SessionPhase.FOCUSING

    def test_hook_result_push_is_forwarded(self):
        async def run():
            channel = FakeChannel()
            received = []
            async with SessionFeed(channel, ClockTicker(60), on_hook_result=received.append):
                channel.push({"type": "hook_result", "id": "r9", "hook_id": "ai_request", "content": "hi"})
                await settle()
            return received

        received = asyncio.run(run())
        assert [m.id for m in received] == ["r9"]

    def test_garbage_does_not_stop_reader(self):
        async def run():
            channel = FakeChannel()
            async with SessionFeed(channel, ClockTicker(60)) as feed:
                channel.push("{{{")
                channel.push({"type": "mystery"})
                channel.push(focusing(42))
                await settle()
                return feed.reconciler.current()

        assert asyncio.run(run()).remaining_seconds == 42

    def test_countdown_runs_between_pushes(self):
        async def run():
            channel = FakeChannel()
            async with SessionFeed(channel, ClockTicker(0.01)) as feed:
                channel.push(focusing(100))
                await settle()
                await asyncio.sleep(0.1)
                return feed.reconciler.current().remaining_seconds

        remaining = asyncio.run(run())
        assert remaining < 100


class TestClose:
    """Single teardown."""

    def test_close_stops_everything(self):
        async def run():
            channel = FakeChannel()
            feed = SessionFeed(channel, ClockTicker(0.01))
            await feed.start()
            channel.push(focusing(100))
            await settle()
            await feed.close()
            frozen = feed.reconciler.current()
            channel.push(focusing(9))
            await asyncio.sleep(0.05)
            return feed, channel, frozen

        feed, channel, frozen = asyncio.run(run())
        assert channel.closed
        assert not feed.ticker.running
        assert feed.reconciler.current() == frozen

    def test_close_is_idempotent(self):
        async def run():
            feed = SessionFeed(FakeChannel(), ClockTicker(60))
            await feed.start()
            await feed.close()
            await feed.close()
            return feed.closed

        assert asyncio.run(run()) is True

    def test_close_before_start(self):
        async def run():
            channel = FakeChannel()
            feed = SessionFeed(channel, ClockTicker(60))
            await feed.close()
            return channel.closed

        assert asyncio.run(run()) is True

    def test_close_after_reader_failure(self):
        class BrokenChannel(FakeChannel):
            async def messages(self):
                raise RuntimeError("reader died")
                yield

        async def run():
            channel = BrokenChannel()
            feed = SessionFeed(channel, ClockTicker(60))
            await feed.start()
            await settle()
            await feed.close()
            return feed, channel

        feed, channel = asyncio.run(run())
        assert feed.closed
        assert channel.closed
        assert not feed.ticker.running
