"""txrx - send stdin to a serial port, wait for the reply and hexdump both directions.

Examples:
  printf 'AT\\r' | txrx /dev/ttyUSB0 -b 115200
  txrx /dev/ttyACM0 -b 9600 -c 7E1 -t 250 -q -s < request.bin > reply.bin
  echo hello | txrx loop:// -b 9600          # pyserial loopback, no hardware
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
import logging
import sys
from typing import BinaryIO, Callable, TextIO

from .config import ChannelConfig, parse_config_string
from .const import DEFAULT_CONFIG, DEFAULT_TIMEOUT_MS
from .exceptions import ArgumentError, TxrxError
from .trace import render
from .transfer import DeadlineMode, TransferEngine

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunOptions:
    port: str
    config: ChannelConfig
    timeout_ms: int
    deadline_mode: DeadlineMode
    quiet_outbound: bool
    quiet_inbound: bool
    to_stdout: bool


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{text}' is not an integer") from None
    if value <= 0:
        raise argparse.ArgumentTypeError(f"'{text}' must be greater than zero")
    return value


def _non_negative_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{text}' is not an integer") from None
    if value < 0:
        raise argparse.ArgumentTypeError(f"'{text}' must not be negative")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="txrx",
        description=(
            "Send the data from stdin to a serial port, listen for the reply "
            "and hexdump the communication to stderr."
        ),
    )
    parser.add_argument("port", metavar="TTYDEV", help="Serial port, e.g. /dev/ttyUSB0, /dev/ttyACM0 or COM4")
    parser.add_argument("-b", "--baud", type=_positive_int, required=True, help="Baud rate of the port")
    parser.add_argument(
        "-c",
        "--cfg",
        "--config",
        dest="cfg",
        default=DEFAULT_CONFIG,
        help=(
            "Three characters: data bits (5-8), parity (N, E, O) and stop bits (1, 2). "
            f"Default: {DEFAULT_CONFIG}"
        ),
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=_non_negative_int,
        default=DEFAULT_TIMEOUT_MS,
        help=f"Wait for the reply this many milliseconds (default: {DEFAULT_TIMEOUT_MS})",
    )
    parser.add_argument(
        "--window",
        action="store_true",
        help="Bound the whole reply by one timeout window instead of stopping at the first silent gap",
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Don't output anything to stderr")
    parser.add_argument(
        "-s",
        "--stdout",
        action="store_true",
        help="Write the received bytes to stdout so they can be piped or saved",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging threshold (default: WARNING)",
    )
    return parser


def parse_options(parser: argparse.ArgumentParser, argv: list[str] | None = None) -> tuple[argparse.Namespace, RunOptions]:
    args = parser.parse_args(argv)
    try:
        config = parse_config_string(args.cfg, args.baud)
    except ArgumentError as exc:
        parser.error(f"argument -c/--cfg: {exc}")

    options = RunOptions(
        port=args.port,
        config=config,
        timeout_ms=args.timeout,
        deadline_mode=DeadlineMode.WINDOW if args.window else DeadlineMode.IDLE,
        quiet_outbound=args.quiet,
        quiet_inbound=args.quiet,
        to_stdout=args.stdout,
    )
    return args, options


def run(
    options: RunOptions,
    payload: bytes,
    *,
    stderr: TextIO,
    stdout: BinaryIO,
    engine_factory: Callable[..., TransferEngine] = TransferEngine,
) -> bytes:
    """Perform the exchange and emit traces; returns the received bytes."""

    def say(text: str, quiet: bool) -> None:
        if text and not quiet:
            print(text, file=stderr)

    say(f"tty: {options.port}", options.quiet_outbound)
    say(f"baud: {options.config.baudrate}", options.quiet_outbound)
    say(f"cfg: {options.config.label}", options.quiet_outbound)

    with engine_factory(options.port, options.config) as engine:
        engine.set_read_deadline(options.timeout_ms, options.deadline_mode)

        say("sending data:", options.quiet_outbound)
        say(render(payload), options.quiet_outbound)
        engine.send(payload)

        say(f"waiting for {options.timeout_ms} ms to complete read...", options.quiet_inbound)
        reception = engine.receive()

    say(render(reception.data), options.quiet_inbound)
    if reception.fault is not None:
        say(f"read ended early: {reception.fault}", options.quiet_inbound)

    if options.to_stdout:
        stdout.write(reception.data)
        stdout.flush()

    return reception.data


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args, options = parse_options(parser, argv)

    level = "ERROR" if args.quiet and args.log_level == "WARNING" else args.log_level
    logging.basicConfig(level=getattr(logging, level), format="[%(levelname)s] %(message)s")

    try:
        payload = sys.stdin.buffer.read()
        _LOGGER.debug("Read %d bytes from stdin", len(payload))
        run(options, payload, stderr=sys.stderr, stdout=sys.stdout.buffer)
        return 0
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130
    except (TxrxError, OSError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
