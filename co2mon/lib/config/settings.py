"""Settings models and configuration loading for the CO2 monitor."""

from datetime import timedelta, timezone, tzinfo
from functools import cached_property, lru_cache
from typing import Annotated, Any, Literal, Self
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    HttpUrl,
    SecretStr,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from co2mon.lib.exceptions import SerialPortNotFoundError
from co2mon.logging import get_logger

logger = get_logger("lib.config")

DEFAULT_SLEEP_DURATION_SEC = 60

# Used when the tz database has no entry for the configured zone (e.g. a
# minimal container image without tzdata)
_FALLBACK_TIMEZONE = timezone(timedelta(hours=9), "Asia/Tokyo")

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _parse_bool(v: Any) -> bool:
    """Parse boolean from string '1'/'0' or actual bool."""
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        return v == "1"
    return bool(v)


def _parse_sleep_duration(v: Any) -> int:
    """Parse the polling interval, falling back to the default when invalid."""
    try:
        duration = int(v)
    except (TypeError, ValueError):
        logger.warning(
            "Invalid SLEEP_DURATION_SECONDS value: %r, defaulting to %d seconds",
            v,
            DEFAULT_SLEEP_DURATION_SEC,
        )
        return DEFAULT_SLEEP_DURATION_SEC
    if duration <= 0:
        logger.warning(
            "SLEEP_DURATION_SECONDS must be positive, defaulting to %d seconds",
            DEFAULT_SLEEP_DURATION_SEC,
        )
        return DEFAULT_SLEEP_DURATION_SEC
    return duration


def _validate_http_url(v: str) -> str:
    """Validate HTTP URL format."""
    HttpUrl(v)
    return v


def _upper(v: Any) -> Any:
    return v.upper() if isinstance(v, str) else v


def _detect_serial_port() -> str | None:
    """Return the first serial port reported by the OS, if any."""
    from serial.tools import list_ports

    ports = sorted(p.device for p in list_ports.comports())
    return ports[0] if ports else None


_BoolFromStr = Annotated[bool, BeforeValidator(_parse_bool)]
_SleepDuration = Annotated[int, BeforeValidator(_parse_sleep_duration)]
_HttpUrlStr = Annotated[str, AfterValidator(_validate_http_url)]
_LogLevel = Annotated[LogLevel, BeforeValidator(_upper)]


class SerialSettings(BaseModel):
    """UART connection settings for the sensor."""

    model_config = ConfigDict(frozen=True)

    port: str
    baud: int = 9600
    timeout_sec: float = 1.0


class InfluxSettings(BaseModel):
    """InfluxDB destination settings."""

    model_config = ConfigDict(frozen=True)

    url: str = "http://localhost:8086"
    token: SecretStr = SecretStr("")
    org: str = "lemolatoon"
    bucket: str = "sensor-home"
    timeout_ms: int = 10_000


class PollingSettings(BaseModel):
    """Polling service settings."""

    model_config = ConfigDict(frozen=True)

    frequency_sec: int = DEFAULT_SLEEP_DURATION_SEC


class SensorSettings(BaseModel):
    """Sensor identity and physical limits."""

    model_config = ConfigDict(frozen=True)

    name: str = "MH-Z19C"
    range_ppm: int = 5000


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Serial port
    uart_dev: str = "auto"
    uart_baud: int = Field(default=9600, gt=0)
    uart_timeout_sec: float = Field(default=1.0, gt=0)

    # InfluxDB
    influxdb_url: _HttpUrlStr = "http://localhost:8086"
    influxdb_token: SecretStr = SecretStr("")
    influxdb_org: str = "lemolatoon"
    influxdb_bucket: str = "sensor-home"
    influxdb_timeout_ms: int = Field(default=10_000, gt=0)

    # Polling
    sleep_duration_seconds: _SleepDuration = DEFAULT_SLEEP_DURATION_SEC

    # Sensor
    sensor_range_ppm: int = Field(default=5000, gt=0, le=0xFFFF)
    mock_sensors: _BoolFromStr = False

    # Misc
    timezone: str = "Asia/Tokyo"
    log_level: _LogLevel = "INFO"

    def _resolve_serial_port(self) -> str:
        """Resolve the serial port, with auto-detection if needed."""
        port = self.uart_dev.strip()
        if port and port != "auto":
            return port
        if self.mock_sensors:
            return "mock"
        detected = _detect_serial_port()
        if detected is None:
            raise SerialPortNotFoundError(
                "No serial ports found. Set UART_DEV explicitly."
            )
        return detected

    @cached_property
    def serial(self) -> SerialSettings:
        """Get serial port settings as nested object."""
        return SerialSettings(
            port=self._resolve_serial_port(),
            baud=self.uart_baud,
            timeout_sec=self.uart_timeout_sec,
        )

    @cached_property
    def influx(self) -> InfluxSettings:
        """Get InfluxDB settings as nested object."""
        return InfluxSettings(
            url=self.influxdb_url,
            token=self.influxdb_token,
            org=self.influxdb_org,
            bucket=self.influxdb_bucket,
            timeout_ms=self.influxdb_timeout_ms,
        )

    @cached_property
    def polling(self) -> PollingSettings:
        """Get polling settings."""
        return PollingSettings(frequency_sec=self.sleep_duration_seconds)

    @cached_property
    def sensor(self) -> SensorSettings:
        """Get sensor settings."""
        return SensorSettings(range_ppm=self.sensor_range_ppm)

    @cached_property
    def tz(self) -> tzinfo:
        """Timezone used to timestamp readings."""
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            logger.warning(
                "Failed to load %s timezone: %s, using UTC+9", self.timezone, e
            )
            return _FALLBACK_TIMEZONE

    @model_validator(mode="after")
    def validate_settings(self) -> Self:
        """Validate cross-field configuration constraints."""
        errors: list[str] = []

        if not self.influxdb_token.get_secret_value():
            errors.append("INFLUXDB_TOKEN is not set")
        if not self.influxdb_org:
            errors.append("INFLUXDB_ORG must not be empty")
        if not self.influxdb_bucket:
            errors.append("INFLUXDB_BUCKET must not be empty")

        if errors:
            raise ValueError(
                "Configuration validation failed:\n  - "
                + "\n  - ".join(errors)
            )

        return self


# Settings override for testing - allows injecting custom Settings without
# modifying environment variables or clearing the lru_cache.
_settings_override: Settings | None = None


@lru_cache(maxsize=1)
def _load_settings() -> Settings:
    """Load settings from environment (cached)."""
    return Settings()


def get_settings() -> Settings:
    """Get the global settings instance.

    Returns the test override if set, otherwise loads from environment
    variables (cached after first load). For testing, use set_settings()
    from co2mon.lib.config.testing to override.
    """
    if _settings_override is not None:
        return _settings_override
    return _load_settings()
