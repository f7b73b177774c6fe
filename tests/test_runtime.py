"""Tests for Runtime and Timer."""

import asyncio
import atexit

import pytest

from tickwise.config import RuntimeConfig
from tickwise.runtime import Runtime, Timer


class TestTimer:
    async def test_fires_once(self, runtime):
        fired = []
        timer = runtime.create_timer()
        timer.start(0.02, lambda: fired.append("x"))
        assert timer.active is True
        await asyncio.sleep(0.08)
        assert fired == ["x"]
        assert timer.active is False

    async def test_restart_replaces_pending_fire(self, runtime):
        fired = []
        timer = runtime.create_timer()
        timer.start(0.02, lambda: fired.append("first"))
        timer.start(0.04, lambda: fired.append("second"))
        await asyncio.sleep(0.1)
        assert fired == ["second"]

    async def test_repeat_until_stopped(self, runtime):
        fired = []
        timer = runtime.create_timer()
        timer.start(0.01, lambda: fired.append(1), repeat=True)
        await asyncio.sleep(0.065)
        timer.stop()
        count = len(fired)
        assert count >= 3
        await asyncio.sleep(0.03)
        assert len(fired) == count

    async def test_stop_cancels(self, runtime):
        fired = []
        timer = runtime.create_timer()
        timer.start(0.02, lambda: fired.append("x"))
        timer.stop()
        await asyncio.sleep(0.05)
        assert fired == []

    async def test_stop_and_close_are_idempotent(self, runtime):
        timer = runtime.create_timer()
        timer.stop()
        timer.stop()
        timer.close()
        timer.close()  # Should not raise
        assert timer.is_closing() is True

    async def test_start_after_close_raises(self, runtime):
        timer = runtime.create_timer()
        timer.close()
        with pytest.raises(RuntimeError, match="Timer is closed"):
            timer.start(0.01, lambda: None)

    async def test_negative_delay_raises(self, runtime):
        timer = runtime.create_timer()
        with pytest.raises(ValueError, match="delay must be non-negative"):
            timer.start(-1.0, lambda: None)

    async def test_repr(self, runtime):
        timer = runtime.create_timer()
        assert repr(timer) == "Timer(active=False, closed=False)"


class TestRuntimeBasics:
    def test_default_config(self):
        rt = Runtime()
        assert rt.config == RuntimeConfig()
        assert rt.closed is False

    async def test_loop_bound_lazily(self):
        rt = Runtime()
        assert rt.loop is asyncio.get_running_loop()

    async def test_now_is_monotonic(self, runtime):
        first = runtime.now()
        await asyncio.sleep(0.01)
        assert runtime.now() > first

    async def test_schedule_runs_on_next_tick(self, runtime):
        calls = []
        runtime.schedule(calls.append, "tick")
        assert calls == []
        await asyncio.sleep(0)
        assert calls == ["tick"]

    async def test_schedule_preserves_fifo_order(self, runtime):
        calls = []
        for i in range(3):
            runtime.schedule(calls.append, i)
        await asyncio.sleep(0)
        assert calls == [0, 1, 2]


class TestRuntimeWait:
    async def test_returns_true_when_predicate_holds(self, runtime):
        state = {"ready": False}
        runtime.loop.call_later(0.02, state.update, {"ready": True})
        start = runtime.now()
        assert await runtime.wait(lambda: state["ready"], timeout=1.0) is True
        assert runtime.now() - start < 0.5

    async def test_returns_false_on_timeout(self, runtime):
        start = runtime.now()
        assert await runtime.wait(lambda: False, timeout=0.05) is False
        assert runtime.now() - start >= 0.05 - 0.005

    async def test_immediate_predicate_does_not_sleep(self, runtime):
        assert await runtime.wait(lambda: True, timeout=0.0) is True


class TestRuntimeShutdown:
    async def test_shutdown_closes_every_timer(self, runtime):
        fired = []
        timers = [runtime.create_timer() for _ in range(3)]
        for timer in timers:
            timer.start(0.02, lambda: fired.append("x"))
        assert runtime.live_timers == 3

        runtime.shutdown()

        assert all(timer.is_closing() for timer in timers)
        assert runtime.live_timers == 0
        await asyncio.sleep(0.05)
        assert fired == []

    async def test_shutdown_is_idempotent(self, runtime):
        runtime.create_timer()
        runtime.shutdown()
        runtime.shutdown()  # Should not raise
        assert runtime.closed is True

    async def test_shutdown_skips_already_closed_timers(self, runtime):
        timer = runtime.create_timer()
        timer.close()
        runtime.shutdown()
        assert timer.is_closing() is True

    async def test_create_timer_after_shutdown_raises(self, runtime):
        runtime.shutdown()
        with pytest.raises(RuntimeError, match="Runtime is shut down"):
            runtime.create_timer()

    async def test_registry_does_not_keep_timers_alive(self, runtime):
        runtime.create_timer()
        assert runtime.live_timers == 0

    async def test_async_context_manager(self):
        async with Runtime() as rt:
            timer = rt.create_timer()
        assert rt.closed is True
        assert timer.is_closing() is True

    def test_context_manager(self):
        with Runtime() as rt:
            assert rt.closed is False
        assert rt.closed is True

    def test_install_exit_hook(self, monkeypatch):
        registered = []
        monkeypatch.setattr(atexit, "register", registered.append)
        rt = Runtime()
        rt.install_exit_hook()
        rt.install_exit_hook()
        assert registered == [rt.shutdown]

    def test_timer_type(self):
        rt = Runtime(loop=asyncio.new_event_loop())
        try:
            assert isinstance(rt.create_timer(), Timer)
        finally:
            rt.loop.close()

    def test_repr(self):
        rt = Runtime()
        assert repr(rt) == "Runtime(live_timers=0, closed=False)"
