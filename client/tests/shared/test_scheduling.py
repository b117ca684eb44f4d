"""Tests for shared/scheduling.py."""

import asyncio

import pytest

from shared.scheduling import Debouncer, call_later


class TestCallLater:
    @pytest.mark.asyncio
    async def test_runs_after_delay(self):
        """Should run the callback once the delay has passed."""
        calls = []
        task = call_later(0.01, calls.append, "done")
        assert calls == []
        await task
        assert calls == ["done"]

    @pytest.mark.asyncio
    async def test_awaits_coroutine_callbacks(self):
        """Should await async callbacks and return their result."""
        async def compute(value):
            return value * 2

        assert await call_later(0, compute, 21) == 42

    @pytest.mark.asyncio
    async def test_cancel_prevents_call(self):
        """A cancelled task should never run the callback."""
        calls = []
        task = call_later(0.02, calls.append, "x")
        task.cancel()
        await asyncio.sleep(0.05)
        assert calls == []

    @pytest.mark.asyncio
    async def test_callback_errors_are_logged(self, caplog):
        """A failing callback should be logged, not raised."""
        def boom():
            raise RuntimeError("boom")

        assert await call_later(0, boom) is None
        assert "boom" in caplog.text


class TestDebouncer:
    @pytest.mark.asyncio
    async def test_coalesces_burst(self):
        """A burst of triggers should produce one call with the last arguments."""
        calls = []
        debouncer = Debouncer(0.02, calls.append)
        for value in range(5):
            debouncer.trigger(value)
        assert debouncer.pending is True

        await asyncio.sleep(0.06)
        assert calls == [4]
        assert debouncer.pending is False

    @pytest.mark.asyncio
    async def test_separate_windows_fire_separately(self):
        """Triggers further apart than the delay should each fire."""
        calls = []
        debouncer = Debouncer(0.01, calls.append)
        debouncer.trigger("a")
        await asyncio.sleep(0.04)
        debouncer.trigger("b")
        await asyncio.sleep(0.04)
        assert calls == ["a", "b"]

    @pytest.mark.asyncio
    async def test_cancel(self):
        """cancel() should drop the pending call."""
        calls = []
        debouncer = Debouncer(0.01, calls.append)
        debouncer.trigger("a")
        debouncer.cancel()
        await asyncio.sleep(0.03)
        assert calls == []

    @pytest.mark.asyncio
    async def test_close_cancels_running_callback(self):
        """close() should cancel a callback that has already started."""
        finished = []

        async def slow():
            await asyncio.sleep(0.5)
            finished.append(True)

        debouncer = Debouncer(0, slow)
        debouncer.trigger()
        await asyncio.sleep(0.02)
        debouncer.close()
        await asyncio.sleep(0.02)
        assert finished == []
