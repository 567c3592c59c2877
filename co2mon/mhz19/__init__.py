"""MH-Z19C CO2 sensor support."""
