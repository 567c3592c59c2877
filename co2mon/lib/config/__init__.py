"""Centralized configuration for the CO2 monitor.

This package provides:
- Enums for measurement units
- Pydantic settings models for configuration
- get_settings() to access the process-wide settings, loaded once
"""

from .enums import Unit
from .settings import (
    DEFAULT_SLEEP_DURATION_SEC,
    InfluxSettings,
    PollingSettings,
    SensorSettings,
    SerialSettings,
    Settings,
    get_settings,
)

__all__ = [
    # Enums
    "Unit",
    # Settings models
    "InfluxSettings",
    "PollingSettings",
    "SensorSettings",
    "SerialSettings",
    "Settings",
    # Constants
    "DEFAULT_SLEEP_DURATION_SEC",
    # Functions
    "get_settings",
]
