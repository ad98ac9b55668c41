"""Constants for txrx."""

from __future__ import annotations

import serial

DEFAULT_CONFIG = "8N1"
DEFAULT_TIMEOUT_MS = 1000

BYTES_PER_LINE = 16
PLACEHOLDER = "."

READ_CHUNK = 4096

BYTESIZE_MAP = {
    "5": serial.FIVEBITS,
    "6": serial.SIXBITS,
    "7": serial.SEVENBITS,
    "8": serial.EIGHTBITS,
}

PARITY_MAP = {
    "N": serial.PARITY_NONE,
    "E": serial.PARITY_EVEN,
    "O": serial.PARITY_ODD,
}

STOPBITS_MAP = {
    "1": serial.STOPBITS_ONE,
    "2": serial.STOPBITS_TWO,
}
