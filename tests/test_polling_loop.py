"""Tests for the generic polling loop."""

import asyncio
import signal

import pytest

from co2mon.lib.polling import PollingService


class _CountingService(PollingService[int]):
    """Service that stops itself after a fixed number of polls."""

    def __init__(
        self,
        stop_after: int = 1,
        fail: bool = False,
        frequency_sec: int | None = 1,
    ) -> None:
        super().__init__(name="test", frequency_sec=frequency_sec)
        self.stop_after = stop_after
        self.fail = fail
        self.polls = 0
        self.persisted: list[int] = []
        self.audit_result = True
        self.initialized = False
        self.cleaned_up = False

    async def initialize(self) -> None:
        self.initialized = True

    async def cleanup(self) -> None:
        self.cleaned_up = True

    async def poll(self) -> int | None:
        self.polls += 1
        if self.polls >= self.stop_after:
            self.request_shutdown()
        if self.fail:
            raise RuntimeError("sensor exploded")
        return self.polls

    async def audit(self, reading: int) -> bool:
        return self.audit_result

    async def persist(self, reading: int) -> None:
        self.persisted.append(reading)


class TestPollingLoop:
    """Tests for PollingService._run_loop."""

    @pytest.mark.asyncio
    async def test_runs_cycle_and_cleans_up(self):
        service = _CountingService(stop_after=1)

        await service._run_loop()

        assert service.initialized is True
        assert service.persisted == [1]
        assert service.cleaned_up is True

    @pytest.mark.asyncio
    async def test_cycles_are_sequential(self):
        service = _CountingService(stop_after=3, frequency_sec=0.01)

        await service._run_loop()

        assert service.persisted == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_shutdown_interrupts_wait(self):
        service = _CountingService(stop_after=100, frequency_sec=60)
        asyncio.get_running_loop().call_later(0.05, service.request_shutdown)

        await asyncio.wait_for(service._run_loop(), timeout=5)

        assert service.polls == 1
        assert service.cleaned_up is True

    @pytest.mark.asyncio
    async def test_audit_false_skips_persist(self):
        service = _CountingService(stop_after=1)
        service.audit_result = False

        await service._run_loop()

        assert service.persisted == []

    @pytest.mark.asyncio
    async def test_poll_error_does_not_stop_loop(self, caplog):
        service = _CountingService(stop_after=2, fail=True, frequency_sec=0.01)

        await service._run_loop()

        assert service.polls == 2
        assert service.cleaned_up is True
        assert "test poll error: sensor exploded" in caplog.text

    def test_frequency_defaults_to_settings(self, test_settings):
        service = _CountingService(frequency_sec=None)
        assert service.frequency_sec == test_settings.polling.frequency_sec

    def test_signal_requests_shutdown(self, caplog):
        service = _CountingService()

        service._handle_shutdown(signal.SIGTERM, None)

        assert service._shutdown.is_set()
        assert "Received SIGTERM" in caplog.text
