"""InfluxDB persistence for sensor readings.

Readings are written one point at a time with the blocking write API; the
polling loop runs writes in a worker thread so the event loop stays free.
"""

from influxdb_client import InfluxDBClient, Point
from influxdb_client.client.write_api import SYNCHRONOUS

from co2mon.lib.config import InfluxSettings
from co2mon.lib.exceptions import PersistenceError
from co2mon.logging import get_logger
from co2mon.mhz19.models import Reading

logger = get_logger("mhz19.influx")

MEASUREMENT = "sensor_data"
FIELD_CO2 = "co2_concentration"


def to_point(reading: Reading, sensor: str) -> Point:
    """Convert a reading into an InfluxDB point tagged with the sensor name."""
    return (
        Point(MEASUREMENT)
        .tag("sensor", sensor)
        .field(FIELD_CO2, float(reading.co2.value))
        .time(reading.recording_time)
    )


class InfluxWriter:
    """Write readings to a single InfluxDB org/bucket."""

    def __init__(
        self,
        cfg: InfluxSettings,
        sensor: str,
        client: InfluxDBClient | None = None,
    ) -> None:
        self._cfg = cfg
        self._sensor = sensor
        self._client = client or InfluxDBClient(
            url=cfg.url,
            token=cfg.token.get_secret_value(),
            org=cfg.org,
            timeout=cfg.timeout_ms,
        )
        self._write_api = self._client.write_api(write_options=SYNCHRONOUS)
        logger.info(
            "Writing to InfluxDB %s (org=%s, bucket=%s)",
            cfg.url,
            cfg.org,
            cfg.bucket,
        )

    def write(self, reading: Reading) -> None:
        """Write a reading.

        Raises:
            PersistenceError: If the client failed to write the point.
        """
        point = to_point(reading, self._sensor)
        try:
            self._write_api.write(
                bucket=self._cfg.bucket, org=self._cfg.org, record=point
            )
        except Exception as e:
            raise PersistenceError(f"Error writing point: {e}") from e

    def close(self) -> None:
        """Flush and close the client."""
        self._write_api.close()
        self._client.close()
        logger.info("InfluxDB client closed")
