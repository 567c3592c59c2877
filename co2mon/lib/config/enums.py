"""Enumerations for the CO2 monitor."""

from enum import StrEnum


class Unit(StrEnum):
    """Measurement units for sensor readings."""

    PPM = "ppm"
