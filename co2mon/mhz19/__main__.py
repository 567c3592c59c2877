"""MH-Z19C polling entrypoint.

Reads the CO2 concentration from an MH-Z19C sensor over UART at a fixed
interval and writes every valid reading to InfluxDB.

Usage: python -m co2mon.mhz19
"""

from co2mon.mhz19.polling import main

if __name__ == "__main__":
    main()
