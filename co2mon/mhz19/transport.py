"""Serial transport for the MH-Z19C sensor."""

import serial

from co2mon.lib.config import SerialSettings
from co2mon.logging import get_logger

logger = get_logger("mhz19.transport")


def open_serial(cfg: SerialSettings) -> serial.Serial:
    """Open the sensor UART in the mode the datasheet requires (8N1).

    Raises:
        serial.SerialException: If the port cannot be opened.
    """
    logger.info("UART device: %s", cfg.port)
    port = serial.Serial(
        port=cfg.port,
        baudrate=cfg.baud,
        bytesize=serial.EIGHTBITS,
        parity=serial.PARITY_NONE,
        stopbits=serial.STOPBITS_ONE,
        timeout=cfg.timeout_sec,
        write_timeout=cfg.timeout_sec,
    )
    # Drop anything a previous process left half-read on the line
    port.reset_input_buffer()
    port.reset_output_buffer()
    logger.info("Connected to sensor on %s at %d baud", cfg.port, cfg.baud)
    return port
