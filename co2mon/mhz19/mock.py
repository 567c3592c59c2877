"""Mock sensor transport for development.

Provides a mock implementation of the sensor UART that answers read
commands with well-formed frames, without requiring hardware. Used by the
polling service when MOCK_SENSORS=1 is set.
"""

import random
from collections.abc import Buffer

from co2mon.mhz19.protocol import (
    CMD_READ_CO2,
    FRAME_SIZE,
    READ_CO2_COMMAND,
    START_BYTE,
    checksum,
)


def _random_walk(
    current: float, drift: float, min_val: float, max_val: float
) -> float:
    """Generate next value using random walk with bounds."""
    change = random.gauss(0, drift)
    new_val = current + change
    return max(min_val, min(max_val, new_val))


class MockSensorTransport:
    """Mock MH-Z19C UART that generates realistic CO2 readings.

    - CO2: drift=15, bounds 400-2000 ppm
    - Initial value: random 450-800 ppm
    """

    def __init__(self) -> None:
        self._co2 = random.uniform(450.0, 800.0)
        self._pending = b""

    def _generate_co2(self) -> int:
        self._co2 = _random_walk(
            self._co2, drift=15.0, min_val=400.0, max_val=2000.0
        )
        return round(self._co2)

    def _response(self) -> bytes:
        value = self._generate_co2()
        frame = bytearray(FRAME_SIZE)
        frame[0] = START_BYTE
        frame[1] = CMD_READ_CO2
        frame[2], frame[3] = divmod(value, 256)
        frame[8] = checksum(frame)
        return bytes(frame)

    def write(self, data: Buffer) -> int:
        """Accept a command; only the read command gets a reply."""
        data = bytes(data)
        self._pending = self._response() if data == READ_CO2_COMMAND else b""
        return len(data)

    def readinto(self, buffer: bytearray) -> int:
        """Copy the pending reply into buffer."""
        n = min(len(buffer), len(self._pending))
        buffer[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        return n

    def reset_input_buffer(self) -> None:
        """Discard any reply that was not read."""
        self._pending = b""

    def close(self) -> None:
        """No-op for mock transport."""
