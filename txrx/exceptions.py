"""Errors raised by txrx."""

from __future__ import annotations


class TxrxError(Exception):
    """Base class for every error txrx raises on purpose."""


class ArgumentError(TxrxError):
    """Malformed or missing argument, including a bad configuration string."""


class ChannelUnavailable(TxrxError):
    """The serial device does not exist or cannot be opened."""


class InvalidConfiguration(TxrxError):
    """The driver rejected otherwise well-formed port settings."""


class WriteFailure(TxrxError):
    """Sending the payload failed."""


class TransferStateError(TxrxError):
    """An engine operation was called out of order."""
