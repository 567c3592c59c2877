"""Custom exceptions for the CO2 monitor.

Frame errors describe a single failed exchange with the sensor. They are
never fatal: the polling loop logs them and tries again on the next tick.
"""


class Co2MonitorError(Exception):
    """Base exception for all application errors."""


class FrameError(Co2MonitorError):
    """Base exception for a failed request/response exchange."""


class ShortWriteError(FrameError):
    """Raised when the transport accepted fewer bytes than the command frame."""

    def __init__(self, written: int, expected: int) -> None:
        self.written = written
        self.expected = expected
        super().__init__(
            f"Failed to send command: {written} bytes sent, expected {expected}"
        )


class ReadFailureError(FrameError):
    """Raised when the transport reports an error while reading the response."""


class ShortResponseError(FrameError):
    """Raised when fewer bytes than a full frame were received."""

    def __init__(self, received: int, expected: int) -> None:
        self.received = received
        self.expected = expected
        super().__init__(
            f"Response too short: {received} bytes, expected {expected}"
        )


class FrameLengthError(FrameError):
    """Raised when a buffer handed to the decoder is longer than one frame."""

    def __init__(self, received: int, expected: int) -> None:
        self.received = received
        self.expected = expected
        super().__init__(
            f"Invalid frame length: {received} bytes, expected {expected}"
        )


class InvalidHeaderError(FrameError):
    """Raised when the start marker or echoed command byte is wrong."""

    def __init__(self, start: int, command: int) -> None:
        self.start = start
        self.command = command
        super().__init__(f"Invalid response header: {start:02X} {command:02X}")


class ChecksumMismatchError(FrameError):
    """Raised when the response checksum does not match its payload."""

    def __init__(self, received: int, expected: int) -> None:
        self.received = received
        self.expected = expected
        super().__init__(
            f"Invalid checksum: {received:02X}, expected {expected:02X}"
        )


class SerialPortNotFoundError(Co2MonitorError):
    """Raised when no serial port is configured and none can be detected."""

    def __init__(self, message: str = "No serial ports found") -> None:
        super().__init__(message)


class PersistenceError(Co2MonitorError):
    """Raised when a reading could not be written to the time-series store."""
