"""Serial channel settings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .const import BYTESIZE_MAP, PARITY_MAP, STOPBITS_MAP
from .exceptions import ArgumentError

VALID_BYTESIZES = (5, 6, 7, 8)
VALID_STOPBITS = (1, 2)


@dataclass(frozen=True)
class ChannelConfig:
    """Fully resolved port settings.

    Every field must be set and in range; a partial configuration is rejected
    at construction time, before any port is touched.
    """

    bytesize: int
    parity: str
    stopbits: int
    baudrate: int

    def __post_init__(self) -> None:
        missing = [name for name in ("bytesize", "parity", "stopbits", "baudrate") if getattr(self, name) is None]
        if missing:
            raise ArgumentError(f"Incomplete port configuration, missing: {', '.join(missing)}")
        if not isinstance(self.bytesize, int) or isinstance(self.bytesize, bool) or self.bytesize not in VALID_BYTESIZES:
            raise ArgumentError(f"Unsupported data bits {self.bytesize!r}. Valid values: 5, 6, 7, 8")
        if self.parity not in PARITY_MAP:
            raise ArgumentError(f"Unsupported parity {self.parity!r}. Valid values: N, E, O")
        if not isinstance(self.stopbits, int) or isinstance(self.stopbits, bool) or self.stopbits not in VALID_STOPBITS:
            raise ArgumentError(f"Unsupported stop bits {self.stopbits!r}. Valid values: 1, 2")
        if not isinstance(self.baudrate, int) or isinstance(self.baudrate, bool) or self.baudrate <= 0:
            raise ArgumentError(f"Baud rate must be a positive integer, got {self.baudrate!r}")

    @property
    def label(self) -> str:
        return f"{self.bytesize}{self.parity}{self.stopbits}"

    def serial_kwargs(self) -> dict[str, Any]:
        """Keyword arguments understood by ``serial.Serial``."""
        return {
            "baudrate": self.baudrate,
            "bytesize": BYTESIZE_MAP[str(self.bytesize)],
            "parity": PARITY_MAP[self.parity],
            "stopbits": STOPBITS_MAP[str(self.stopbits)],
        }


def parse_config_string(text: str, baudrate: int) -> ChannelConfig:
    """Parse a three character setting such as ``8N1`` or ``7E2``."""
    if text is None or len(text) != 3:
        raise ArgumentError(f"Port config must be exactly 3 characters (e.g. 8N1), got {text!r}")

    bits, parity, stop = text[0], text[1].upper(), text[2]
    if bits not in BYTESIZE_MAP:
        raise ArgumentError(f"Unknown data bits '{bits}' in {text!r}. Valid values: 5, 6, 7, 8")
    if parity not in PARITY_MAP:
        raise ArgumentError(f"Unknown parity '{text[1]}' in {text!r}. Valid values: N, E, O")
    if stop not in STOPBITS_MAP:
        raise ArgumentError(f"Unknown stop bits '{stop}' in {text!r}. Valid values: 1, 2")

    return ChannelConfig(bytesize=int(bits), parity=parity, stopbits=int(stop), baudrate=baudrate)
