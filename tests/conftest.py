"""Shared pytest fixtures for the test suite."""

import logging
from datetime import datetime
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest

from co2mon.lib.config import Settings
from co2mon.lib.config.testing import set_settings


class FakeTransport:
    """In-memory transport that replays a canned response."""

    def __init__(
        self,
        response: bytes = b"",
        written: int | None = None,
        write_error: OSError | None = None,
        read_error: OSError | None = None,
    ) -> None:
        self.response = response
        self.written = written
        self.write_error = write_error
        self.read_error = read_error
        self.writes: list[bytes] = []
        self.reads = 0
        self.resets = 0
        self.closed = False

    def write(self, data) -> int | None:
        if self.write_error is not None:
            raise self.write_error
        self.writes.append(bytes(data))
        return len(data) if self.written is None else self.written

    def readinto(self, buffer: bytearray) -> int | None:
        self.reads += 1
        if self.read_error is not None:
            raise self.read_error
        n = min(len(buffer), len(self.response))
        buffer[:n] = self.response[:n]
        return n

    def reset_input_buffer(self) -> None:
        self.resets += 1

    def close(self) -> None:
        self.closed = True


def make_response(high: int, low: int) -> bytes:
    """Build a valid read-CO2 response frame."""
    frame = bytearray([0xFF, 0x86, high, low, 0, 0, 0, 0, 0])
    frame[8] = (0xFF - sum(frame[1:8]) + 1) & 0xFF
    return bytes(frame)


@pytest.fixture(autouse=True)
def configure_caplog(caplog):
    """Ensure caplog captures logs from the co2mon namespace."""
    caplog.set_level(logging.INFO, logger="co2mon")


@pytest.fixture(autouse=True)
def test_settings():
    """Use settings independent of the host environment for each test."""
    settings = Settings(
        _env_file=None,
        influxdb_token="test-token",
        uart_dev="/dev/ttyTEST0",
    )
    set_settings(settings)
    yield settings
    set_settings(None)


@pytest.fixture(autouse=True)
def no_settle_delay():
    """Skip the sensor settle delay between write and read."""
    with patch("co2mon.mhz19.protocol.sleep") as mock_sleep:
        yield mock_sleep


@pytest.fixture
def frozen_time():
    """Return a fixed datetime for deterministic tests."""
    return datetime(2024, 6, 15, 12, 0, 0, tzinfo=ZoneInfo("Asia/Tokyo"))


@pytest.fixture
def valid_response():
    """Response frame for 1000 ppm."""
    return make_response(0x03, 0xE8)
