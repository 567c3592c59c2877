"""Poll the MH-Z19C sensor over UART and persist readings to InfluxDB.

One command frame is built at startup and reused for every exchange. Each
tick runs a single blocking exchange in a worker thread and waits for it to
finish, so the UART is never shared by two exchanges.
"""

import asyncio
import sys
from datetime import datetime
from typing import Protocol, override

from pydantic import ValidationError
from serial import SerialException

from co2mon.lib.config import get_settings
from co2mon.lib.exceptions import (
    FrameError,
    PersistenceError,
    SerialPortNotFoundError,
)
from co2mon.lib.polling import PollingService
from co2mon.logging import configure, get_logger, set_level
from co2mon.mhz19.models import Measurement, Reading
from co2mon.mhz19.protocol import Transport, build_command, exchange

logger = get_logger("mhz19.polling")


class SensorTransport(Transport, Protocol):
    """A transport the service owns and closes on shutdown."""

    def reset_input_buffer(self) -> None: ...
    def close(self) -> None: ...


class ReadingWriter(Protocol):
    """Protocol for the time-series store readings are written to."""

    def write(self, reading: Reading) -> None: ...
    def close(self) -> None: ...


class Co2PollingService(PollingService[Reading]):
    """Polling service for the MH-Z19C CO2 sensor."""

    def __init__(
        self,
        transport: SensorTransport,
        writer: ReadingWriter,
        frequency_sec: int | None = None,
    ) -> None:
        super().__init__(name="MH-Z19C", frequency_sec=frequency_sec)
        self._transport = transport
        self._writer = writer
        self._command = build_command()
        settings = get_settings()
        self._tz = settings.tz
        self._range_ppm = settings.sensor.range_ppm

    @override
    async def initialize(self) -> None:
        """Nothing to set up, the transport and writer are opened by main()."""

    @override
    async def cleanup(self) -> None:
        """Close the serial transport and the InfluxDB writer."""
        self._transport.close()
        self._writer.close()

    @override
    async def poll(self) -> Reading | None:
        """Run one exchange with the sensor."""
        try:
            measurement = await asyncio.to_thread(self._exchange)
        except FrameError as e:
            self._logger.warning("Error reading data: %s", e)
            return None

        self._logger.info("CO2 concentration: %s", measurement)
        return Reading(measurement, datetime.now(self._tz))

    def _exchange(self) -> Measurement:
        """Drop leftover bytes, then run a blocking exchange."""
        # A late or partial reply from a previous tick would shift the frame
        self._transport.reset_input_buffer()
        return exchange(self._transport, self._command)

    @override
    async def audit(self, reading: Reading) -> bool:
        """Warn about values outside the sensor's detection range.

        The value is still persisted, the frame itself was valid.
        """
        if reading.co2.value > self._range_ppm:
            self._logger.warning(
                "CO2 reading %s above sensor range of %d ppm",
                reading.co2,
                self._range_ppm,
            )
        return True

    @override
    async def persist(self, reading: Reading) -> None:
        """Write the reading to InfluxDB, logging failures."""
        try:
            await asyncio.to_thread(self._writer.write, reading)
        except PersistenceError as e:
            self._logger.error("%s", e)
            return
        self._logger.debug("Persisted reading taken at %s", reading.recording_time)


def _create_transport() -> SensorTransport:
    """Create transport based on configuration."""
    if get_settings().mock_sensors:
        from co2mon.mhz19.mock import MockSensorTransport

        logger.info("Using mock sensor transport")
        return MockSensorTransport()
    from co2mon.mhz19.transport import open_serial

    return open_serial(get_settings().serial)


def _create_writer() -> ReadingWriter:
    """Create the InfluxDB writer from configuration."""
    from co2mon.mhz19.influx import InfluxWriter

    settings = get_settings()
    return InfluxWriter(settings.influx, sensor=settings.sensor.name)


def main() -> None:
    """Start the CO2 polling service."""
    configure()
    try:
        settings = get_settings()
    except ValidationError as e:
        logger.critical("%s", e)
        sys.exit(1)
    set_level(settings.log_level)

    writer = _create_writer()
    try:
        transport = _create_transport()
    except (SerialPortNotFoundError, SerialException) as e:
        logger.critical("Failed to open UART port: %s", e)
        writer.close()
        sys.exit(1)

    service = Co2PollingService(transport, writer)
    service.run()


if __name__ == "__main__":
    main()
