"""Send a block of bytes to a serial port and collect the reply."""

from __future__ import annotations

from .config import ChannelConfig, parse_config_string
from .exceptions import (
    ArgumentError,
    ChannelUnavailable,
    InvalidConfiguration,
    TransferStateError,
    TxrxError,
    WriteFailure,
)
from .trace import render
from .transfer import DeadlineMode, ReadKind, ReadResult, Reception, TransferEngine

__version__ = "0.1.0"

__all__ = [
    "ArgumentError",
    "ChannelConfig",
    "ChannelUnavailable",
    "DeadlineMode",
    "InvalidConfiguration",
    "ReadKind",
    "ReadResult",
    "Reception",
    "TransferEngine",
    "TransferStateError",
    "TxrxError",
    "WriteFailure",
    "parse_config_string",
    "render",
]
