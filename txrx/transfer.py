"""One write-then-read cycle over a serial port."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import time
from typing import Any, Callable

import serial

from .config import ChannelConfig
from .const import READ_CHUNK
from .exceptions import (
    ArgumentError,
    ChannelUnavailable,
    InvalidConfiguration,
    TransferStateError,
    WriteFailure,
)

_LOGGER = logging.getLogger(__name__)


class DeadlineMode(Enum):
    """How the read timeout bounds the receive phase.

    IDLE re-arms the timeout on every read attempt, so collection stops after
    the first silent gap at least as long as the timeout. WINDOW bounds the
    whole receive phase by one wall-clock window starting when it begins.
    """

    IDLE = "idle"
    WINDOW = "window"


class ReadKind(Enum):
    TIMEOUT = "timeout"
    CLOSED = "closed"
    DATA = "data"
    FAULT = "fault"


class ChannelState(Enum):
    IDLE = "idle"
    OPENED = "opened"
    SENT = "sent"
    RECEIVING = "receiving"
    DONE = "done"


@dataclass(frozen=True)
class ReadResult:
    """Outcome of a single read attempt."""

    kind: ReadKind
    data: bytes = b""
    cause: BaseException | None = None


@dataclass(frozen=True)
class Reception:
    """Everything collected during the receive phase."""

    data: bytes
    ended_by: ReadKind
    fault: BaseException | None
    elapsed: float


def _is_open_failure(exc: serial.SerialException) -> bool:
    # posix wraps the OSError from os.open (errno set); win32 uses this prefix
    return exc.errno is not None or str(exc).lower().startswith("could not open port")


class TransferEngine:
    """Owns one serial port for a single send/receive exchange.

    Usable as a context manager: entering opens the port and leaving closes it,
    whether the exchange finished or a write failed half way.
    """

    def __init__(
        self,
        path: str,
        config: ChannelConfig,
        *,
        port_factory: Callable[..., Any] = serial.serial_for_url,
    ) -> None:
        self.path = path
        self.config = config
        self._port_factory = port_factory
        self._port: Any = None
        self._state = ChannelState.IDLE
        self._timeout: float | None = None
        self._mode = DeadlineMode.IDLE
        self._deadline = 0.0

    @property
    def state(self) -> ChannelState:
        return self._state

    def __enter__(self) -> TransferEngine:
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def open(self) -> None:
        if self._state is not ChannelState.IDLE:
            raise TransferStateError(f"Cannot open channel in state {self._state.value}")

        try:
            port = self._port_factory(self.path, do_not_open=True)
        except ValueError as exc:
            raise ChannelUnavailable(f"Unable to use serial port '{self.path}': {exc}") from exc

        try:
            for name, value in self.config.serial_kwargs().items():
                setattr(port, name, value)
            port.open()
        except ValueError as exc:
            raise InvalidConfiguration(
                f"Port '{self.path}' rejected settings {self.config.baudrate} {self.config.label}: {exc}"
            ) from exc
        except serial.SerialException as exc:
            if _is_open_failure(exc):
                raise ChannelUnavailable(f"Unable to open serial port '{self.path}': {exc}") from exc
            raise InvalidConfiguration(
                f"Port '{self.path}' rejected settings {self.config.baudrate} {self.config.label}: {exc}"
            ) from exc
        except OSError as exc:
            raise ChannelUnavailable(f"Unable to open serial port '{self.path}': {exc}") from exc

        self._port = port
        self._state = ChannelState.OPENED
        _LOGGER.debug("Opened %s @ %d %s", self.path, self.config.baudrate, self.config.label)

    def set_read_deadline(self, milliseconds: int, mode: DeadlineMode = DeadlineMode.IDLE) -> None:
        """Set how long the receive phase may wait; has no effect on writes."""
        if self._state in (ChannelState.RECEIVING, ChannelState.DONE):
            raise TransferStateError("Read deadline must be set before the receive phase")
        if milliseconds < 0:
            raise ArgumentError(f"Timeout must not be negative, got {milliseconds}")
        self._timeout = milliseconds / 1000.0
        self._mode = mode

    def send(self, payload: bytes) -> int:
        """Write the whole payload, continuing after short writes."""
        if self._state is not ChannelState.OPENED:
            raise TransferStateError(f"Cannot send in state {self._state.value}")

        payload = bytes(payload)
        view = memoryview(payload)
        total = 0
        try:
            while total < len(payload):
                written = self._port.write(view[total:])
                if written is None:
                    written = len(payload) - total
                if written <= 0:
                    raise WriteFailure(
                        f"Port '{self.path}' accepted no bytes after {total} of {len(payload)}"
                    )
                total += written
            self._port.flush()
        except (serial.SerialException, OSError) as exc:
            raise WriteFailure(
                f"Write to '{self.path}' failed after {total} of {len(payload)} bytes: {exc}"
            ) from exc

        self._state = ChannelState.SENT
        _LOGGER.debug("Sent %d bytes", total)
        return total

    def _read_once(self) -> ReadResult:
        port = self._port
        if port is None or not port.is_open:
            return ReadResult(ReadKind.CLOSED)

        if self._mode is DeadlineMode.WINDOW:
            remaining = self._deadline - time.monotonic()
            if remaining <= 0:
                return ReadResult(ReadKind.TIMEOUT)

        try:
            if self._mode is DeadlineMode.WINDOW:
                port.timeout = remaining
            first = port.read(1)
            if not first:
                return ReadResult(ReadKind.TIMEOUT)
            waiting = port.in_waiting
            rest = port.read(min(waiting, READ_CHUNK)) if waiting else b""
        except (serial.SerialException, OSError) as exc:
            return ReadResult(ReadKind.FAULT, cause=exc)

        return ReadResult(ReadKind.DATA, data=bytes(first) + bytes(rest))

    def receive(self) -> Reception:
        """Collect bytes until a timeout, closure or fault ends the phase.

        A fault never raises here; it ends collection and is reported on the
        returned ``Reception`` together with whatever arrived before it.
        """
        if self._state is not ChannelState.SENT:
            raise TransferStateError(f"Cannot receive in state {self._state.value}")
        if self._timeout is None:
            raise TransferStateError("Read deadline was not set before the receive phase")

        self._state = ChannelState.RECEIVING
        start = time.monotonic()
        self._deadline = start + self._timeout

        buffer = bytearray()
        try:
            self._port.timeout = self._timeout
        except (serial.SerialException, OSError) as exc:
            result = ReadResult(ReadKind.FAULT, cause=exc)
        else:
            while True:
                result = self._read_once()
                if result.kind is not ReadKind.DATA:
                    break
                buffer.extend(result.data)

        if result.kind is ReadKind.FAULT:
            _LOGGER.warning("Receive on %s ended by fault after %d bytes: %s", self.path, len(buffer), result.cause)

        elapsed = time.monotonic() - start
        self._state = ChannelState.DONE
        _LOGGER.debug("Received %d bytes in %.3fs (%s)", len(buffer), elapsed, result.kind.value)
        return Reception(data=bytes(buffer), ended_by=result.kind, fault=result.cause, elapsed=elapsed)

    def receive_until_timeout(self) -> bytes:
        return self.receive().data

    def close(self) -> None:
        if self._port is not None and self._port.is_open:
            self._port.close()
            _LOGGER.debug("Closed %s", self.path)
