"""Hex + ASCII rendering of byte buffers.

Each line covers 16 bytes::

    00000000: 41 42 43                                         ABC

The offset is zero based, the hex column is padded to full width so the ASCII
column always lines up, and bytes outside 0x20..0x7E show as ``.``.
"""

from __future__ import annotations

from .const import BYTES_PER_LINE, PLACEHOLDER

HEX_WIDTH = BYTES_PER_LINE * 3 - 1


def _printable(value: int) -> str:
    return chr(value) if 0x20 <= value <= 0x7E else PLACEHOLDER


def line_count(size: int) -> int:
    return -(-size // BYTES_PER_LINE)


def render_line(offset: int, chunk: bytes) -> str:
    hex_column = " ".join(f"{b:02x}" for b in chunk)
    ascii_column = "".join(_printable(b) for b in chunk)
    return f"{offset:08x}: {hex_column:<{HEX_WIDTH}}  {ascii_column}"


def render(data: bytes) -> str:
    """Return the trace for ``data``; empty input gives an empty string."""
    view = bytes(data)
    return "\n".join(
        render_line(offset, view[offset : offset + BYTES_PER_LINE])
        for offset in range(0, len(view), BYTES_PER_LINE)
    )
