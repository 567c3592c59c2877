"""Logging configuration for the CO2 monitor."""

import logging
import sys

_configured = False

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s - %(message)s"


def configure(level: int | str = logging.INFO) -> None:
    """Configure logging for the application.

    Safe to call multiple times - only configures once.
    """
    global _configured
    if _configured:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger("co2mon")
    root.setLevel(level)
    root.addHandler(handler)

    # The InfluxDB client logs every HTTP request at INFO/DEBUG
    logging.getLogger("influxdb_client").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the 'co2mon' namespace.

    Args:
        name: Logger name (will be prefixed with 'co2mon.')

    Returns:
        Configured logger instance.
    """
    return logging.getLogger(f"co2mon.{name}")


def set_level(level: int | str) -> None:
    """Change the level of the application logger after configure()."""
    logging.getLogger("co2mon").setLevel(level)
