"""MH-Z19C UART protocol.

Every exchange is a fixed 9-byte command followed by a fixed 9-byte
response::

    index     0     1     2       3       4..7   8
    command   0xFF  0x01  0x86    0x00    0x00   checksum
    response  0xFF  0x86  CO2 hi  CO2 lo  -      checksum

The response has no address byte, so the echoed command sits at index 1
and the concentration at indices 2-3 (big-endian).

The checksum covers bytes 1-7 of either frame: ``(0xFF - sum + 1) & 0xFF``.
"""

from collections.abc import Buffer
from time import sleep
from typing import Protocol

from co2mon.lib.exceptions import (
    ChecksumMismatchError,
    FrameLengthError,
    InvalidHeaderError,
    ReadFailureError,
    ShortResponseError,
    ShortWriteError,
)
from co2mon.mhz19.models import Measurement

FRAME_SIZE = 9
START_BYTE = 0xFF
SENSOR_ADDRESS = 0x01
CMD_READ_CO2 = 0x86

# The sensor needs this long after a command before its reply is ready
SETTLE_DELAY_SEC = 0.15


class Transport(Protocol):
    """Duplex byte stream the sensor is attached to (e.g. ``serial.Serial``)."""

    def write(self, data: Buffer, /) -> int | None: ...
    def readinto(self, buffer: bytearray, /) -> int | None: ...


def checksum(frame: Buffer) -> int:
    """Compute the checksum byte for a frame.

    Only bytes 1-7 are summed; the start byte and the checksum slot itself
    are ignored, so this works on both a full frame and one whose last byte
    is not yet filled in.
    """
    total = sum(bytes(frame)[1:FRAME_SIZE - 1])
    return (0xFF - total + 1) & 0xFF


def build_command() -> bytes:
    """Build the 'read CO2 concentration' command frame.

    Returns:
        ``FF 01 86 00 00 00 00 00 79``
    """
    frame = bytearray(FRAME_SIZE)
    frame[0] = START_BYTE
    frame[1] = SENSOR_ADDRESS
    frame[2] = CMD_READ_CO2
    frame[8] = checksum(frame)
    return bytes(frame)


READ_CO2_COMMAND = build_command()


def decode_response(frame: Buffer) -> Measurement:
    """Validate a response frame and decode its CO2 concentration.

    Raises:
        ShortResponseError: If the frame is shorter than 9 bytes.
        FrameLengthError: If the frame is longer than 9 bytes.
        InvalidHeaderError: If the start byte or echoed command is wrong.
        ChecksumMismatchError: If the checksum byte does not match.
    """
    data = bytes(frame)
    if len(data) < FRAME_SIZE:
        raise ShortResponseError(len(data), FRAME_SIZE)
    if len(data) != FRAME_SIZE:
        raise FrameLengthError(len(data), FRAME_SIZE)

    if data[0] != START_BYTE or data[1] != CMD_READ_CO2:
        raise InvalidHeaderError(data[0], data[1])

    expected = checksum(data)
    if data[8] != expected:
        raise ChecksumMismatchError(data[8], expected)

    high, low = data[2], data[3]
    return Measurement(float(high * 256 + low))


def exchange(transport: Transport, command: bytes = READ_CO2_COMMAND) -> Measurement:
    """Send a command to the sensor and decode its reply.

    Blocks for the write, the settle delay and the read. Callers must not
    run two exchanges on the same transport at once, the frames would
    interleave. Nothing is retried here.

    Raises:
        ShortWriteError: If the transport did not accept the whole command.
        ReadFailureError: If the transport failed while reading.
        ShortResponseError: If fewer than 9 bytes came back.
        InvalidHeaderError: If the response header is wrong.
        ChecksumMismatchError: If the response checksum is wrong.
    """
    try:
        written = transport.write(command)
    except OSError as e:
        raise ShortWriteError(0, len(command)) from e
    if written is None or written < len(command):
        raise ShortWriteError(written or 0, len(command))

    sleep(SETTLE_DELAY_SEC)

    response = bytearray(FRAME_SIZE)
    try:
        received = transport.readinto(response)
    except OSError as e:
        raise ReadFailureError(f"Failed to read response: {e}") from e
    if received is None or received < FRAME_SIZE:
        raise ShortResponseError(received or 0, FRAME_SIZE)

    return decode_response(response)
