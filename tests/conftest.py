"""Fake serial ports for exercising the transfer engine without hardware."""

from __future__ import annotations

import time

import pytest
import serial

from txrx.config import ChannelConfig


class FakePort:
    """Minimal stand-in for ``serial.Serial``.

    ``replies`` are handed out one chunk per read burst; once they run out a
    read sleeps for the configured timeout and returns nothing, like a line
    that never answers.
    """

    def __init__(
        self,
        replies=(),
        *,
        write_limit=None,
        write_error=None,
        read_error=None,
        open_error=None,
        close_after_replies=False,
    ):
        self.port = None
        self.baudrate = None
        self.bytesize = None
        self.parity = None
        self.stopbits = None
        self.timeout = None
        self.is_open = False
        self.written = bytearray()
        self.write_calls = 0
        self.flushed = False
        self._replies = [bytes(r) for r in replies]
        self._pending = bytearray()
        self._write_limit = write_limit
        self._write_error = write_error
        self._read_error = read_error
        self._open_error = open_error
        self._close_after_replies = close_after_replies

    def open(self):
        if self._open_error is not None:
            raise self._open_error
        self.is_open = True

    def close(self):
        self.is_open = False

    def write(self, data):
        if self._write_error is not None:
            raise self._write_error
        self.write_calls += 1
        chunk = bytes(data)
        if self._write_limit is not None:
            chunk = chunk[: self._write_limit]
        self.written.extend(chunk)
        return len(chunk)

    def flush(self):
        self.flushed = True

    @property
    def in_waiting(self):
        return len(self._pending)

    def read(self, size=1):
        if not self._pending:
            if self._replies:
                self._pending.extend(self._replies.pop(0))
            elif self._read_error is not None:
                raise self._read_error
            else:
                if self.timeout:
                    time.sleep(self.timeout)
                return b""
        out = bytes(self._pending[:size])
        del self._pending[:size]
        if self._close_after_replies and not self._pending and not self._replies:
            self.is_open = False
        return out


class ChattyPort(FakePort):
    """Never goes quiet: returns one byte every ``interval`` seconds."""

    def __init__(self, interval=0.01):
        super().__init__()
        self.interval = interval

    def read(self, size=1):
        time.sleep(self.interval)
        return b"x"


def factory_for(port):
    def _factory(path, do_not_open=True):
        port.port = path
        return port

    return _factory


@pytest.fixture
def config_8n1():
    return ChannelConfig(bytesize=8, parity="N", stopbits=1, baudrate=9600)


class UnconfigurablePort(FakePort):
    """Rejects timeout changes once open, like a device that vanished mid-run.

    The first ``allowed_sets`` changes on the open port still succeed.
    """

    def __init__(self, *args, allowed_sets=0, **kwargs):
        self._allowed_sets = allowed_sets
        self._timeout = None
        super().__init__(*args, **kwargs)

    @property
    def timeout(self):
        return self._timeout

    @timeout.setter
    def timeout(self, value):
        if getattr(self, "is_open", False):
            if self._allowed_sets <= 0:
                raise serial.SerialException("Could not configure port: (5, 'Input/output error')")
            self._allowed_sets -= 1
        self._timeout = value
