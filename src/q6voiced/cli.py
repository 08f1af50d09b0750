"""Command-line entry point for the q6voiced daemon."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import traceback
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final, NoReturn, cast

from dotenv import find_dotenv, load_dotenv

from .alsa import AlsaAudioDevice
from .audio_path import AudioDevice
from .bus import DBusSignalSource, SignalSource
from .config import BusType, DaemonSettings
from .daemon import DaemonContext, run
from .errors import BusConnectionError, MatchRegistrationError, PcmError
from .models import DeviceEndpoint

LOG_LEVELS: Final[dict[str, int]] = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

USAGE: Final = "%(prog)s [options] hw:<card>,<device>"


class _UsageErrorParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with exit status 1."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed command-line options for the q6voiced daemon."""

    endpoint: DeviceEndpoint
    bus: BusType | None
    log_level: int
    dotenv_path: Path | None


def _parse_endpoint(value: str) -> DeviceEndpoint:
    try:
        return DeviceEndpoint.parse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def parse_cli_args(argv: Sequence[str] | None = None) -> CliOptions:
    """Parse command-line arguments into :class:`CliOptions`."""
    parser = _UsageErrorParser(
        prog="q6voiced",
        usage=USAGE,
        description=(
            "Open the modem voice call PCM devices while a call is active, "
            "following oFono or ModemManager call signals."
        ),
    )
    parser.add_argument(
        "endpoint",
        type=_parse_endpoint,
        metavar="hw:<card>,<device>",
        help="ALSA card and device carrying the voice call audio path",
    )
    parser.add_argument(
        "--bus",
        choices=("system", "session"),
        default=None,
        help="D-Bus bus to listen on (default: system, or Q6VOICED_BUS)",
    )
    parser.add_argument(
        "--log-level",
        choices=tuple(LOG_LEVELS.keys()),
        default="INFO",
        help="Log level for diagnostic output",
    )
    parser.add_argument(
        "--dotenv",
        type=Path,
        default=None,
        help="Optional path to a .env file providing Q6VOICED_* settings",
    )

    namespace = parser.parse_args(argv)
    return CliOptions(
        endpoint=cast(DeviceEndpoint, namespace.endpoint),
        bus=cast(BusType | None, namespace.bus),
        log_level=LOG_LEVELS[namespace.log_level],
        dotenv_path=namespace.dotenv,
    )


def _setup_logging(log_level: int) -> logging.Logger:
    """Configure logging and return the CLI logger.

    Keeps jeepney quiet at non-DEBUG levels.
    """
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    if log_level > logging.DEBUG:
        logging.getLogger("jeepney").setLevel(logging.WARNING)
    return logging.getLogger("q6voiced.cli")


def resolve_settings(options: CliOptions, logger: logging.Logger) -> DaemonSettings:
    """Load ``.env`` overrides and merge environment settings with CLI options."""
    dotenv_file = (
        str(options.dotenv_path) if options.dotenv_path is not None else find_dotenv(usecwd=True)
    )
    if dotenv_file:
        load_dotenv(dotenv_file, override=False)
        logger.info("Loaded environment from %s", dotenv_file)
    else:
        logger.debug("No .env file found; relying on process environment only")
    settings = DaemonSettings.from_environment()
    if options.bus is not None:
        settings = settings.model_copy(update={"bus": options.bus})
    return settings


def run_daemon(
    options: CliOptions,
    *,
    device_factory: Callable[[], AudioDevice] = AlsaAudioDevice,
    source_factory: Callable[[BusType], SignalSource] = DBusSignalSource.connect,
) -> int:
    """Run the daemon until the bus connection closes and return the exit code."""
    logger = _setup_logging(options.log_level)
    try:
        settings = resolve_settings(options, logger)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    try:
        device = device_factory()
    except PcmError as exc:
        print(f"Audio error: {exc}", file=sys.stderr)
        return 1
    context = DaemonContext.create(options.endpoint, device, settings.pcm)

    try:
        source = source_factory(settings.bus)
    except BusConnectionError as exc:
        print(f"Connection error: {exc}", file=sys.stderr)
        return 1
    except MatchRegistrationError as exc:
        print(f"Match error: {exc}", file=sys.stderr)
        return 1

    logger.info("Listening for call signals on the %s bus for %s", settings.bus, options.endpoint)
    try:
        return run(context, source)
    except KeyboardInterrupt:
        logger.info("Interrupted; releasing PCM devices")
        context.controller.deactivate()
        return 130
    finally:
        source.close()


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for the ``q6voiced`` console script."""
    options = parse_cli_args(argv)
    signal.signal(signal.SIGTERM, signal.default_int_handler)
    try:
        exit_code = run_daemon(options)
    except KeyboardInterrupt:
        exit_code = 130
    except Exception:  # noqa: BLE001
        traceback.print_exc(limit=1)
        exit_code = 1
    raise SystemExit(exit_code)
