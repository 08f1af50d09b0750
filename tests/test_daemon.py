"""End-to-end tests for signal handling through the daemon context."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

import pytest

from q6voiced import (
    DaemonContext,
    Decision,
    DeviceEndpoint,
    PcmConfig,
    PcmDirection,
    RawSignal,
    run,
)
from q6voiced.normalizer import MODEM_MANAGER_CALL_INTERFACE, OFONO_INTERFACE

ENDPOINT = DeviceEndpoint(card=1, device=0)
CALL_ADDED = RawSignal(interface=OFONO_INTERFACE, member="CallAdded")
CALL_REMOVED = RawSignal(interface=OFONO_INTERFACE, member="CallRemoved")


def _mm_state(old: int, new: int) -> RawSignal:
    return RawSignal(
        interface=MODEM_MANAGER_CALL_INTERFACE,
        member="StateChanged",
        signature="iiu",
        body=(old, new, 0),
    )


@dataclass(slots=True)
class CountingAudioDevice:
    """Audio device double counting opens and closes per direction."""

    opened: list[PcmDirection] = field(default_factory=list)
    closed: list[PcmDirection] = field(default_factory=list)

    def open(
        self, endpoint: DeviceEndpoint, direction: PcmDirection, config: PcmConfig
    ) -> PcmDirection:
        """Return the direction itself as the handle."""
        self.opened.append(direction)
        return direction

    def is_ready(self, handle: object) -> bool:
        """Every handle is ready."""
        return True

    def prepare(self, handle: object) -> None:
        """Preparing always succeeds."""

    def close(self, handle: object) -> None:
        """Record the closed direction."""
        assert isinstance(handle, PcmDirection)
        self.closed.append(handle)


class ListSignalSource:
    """Signal source replaying a fixed list of signals."""

    def __init__(self, signals: list[RawSignal]) -> None:
        """Store the *signals* to replay."""
        self._signals = signals
        self.closed = False

    def signals(self) -> Iterator[RawSignal]:
        """Yield the stored signals in order."""
        yield from self._signals

    def close(self) -> None:
        """Record that the source was closed."""
        self.closed = True


def _context() -> tuple[DaemonContext, CountingAudioDevice]:
    device = CountingAudioDevice()
    return DaemonContext.create(ENDPOINT, device), device


def test_aggregator_and_controller_stay_consistent() -> None:
    """After each oFono signal the PCM pair is open iff a call is active."""
    context, _ = _context()
    for signal in [CALL_ADDED, CALL_ADDED, CALL_REMOVED, CALL_REMOVED, CALL_ADDED]:
        context.handle_signal(signal)
        assert context.controller.is_open is context.aggregator.active


def test_duplicate_call_added_opens_once() -> None:
    """Repeated CallAdded signals open the PCM pair a single time."""
    context, device = _context()
    decisions = [context.handle_signal(CALL_ADDED), context.handle_signal(CALL_ADDED)]
    assert decisions == [Decision.ACTIVATE, Decision.NO_CHANGE]
    assert device.opened == [PcmDirection.CAPTURE, PcmDirection.PLAYBACK]


def test_modem_manager_call_lifecycle() -> None:
    """A dial, connect and hang-up sequence opens and closes the pair exactly once."""
    context, device = _context()
    decisions = [
        context.handle_signal(_mm_state(0, 1)),
        context.handle_signal(_mm_state(1, 2)),
        context.handle_signal(_mm_state(2, 4)),
        context.handle_signal(_mm_state(4, 7)),
    ]
    assert decisions == [
        Decision.ACTIVATE,
        Decision.NO_CHANGE,
        Decision.NO_CHANGE,
        Decision.DEACTIVATE,
    ]
    assert device.opened == [PcmDirection.CAPTURE, PcmDirection.PLAYBACK]
    assert device.closed == [PcmDirection.PLAYBACK, PcmDirection.CAPTURE]


def test_unchanged_state_produces_no_decision() -> None:
    """An ACTIVE -> ACTIVE signal is filtered before reaching the aggregator."""
    context, device = _context()
    assert context.handle_signal(_mm_state(4, 4)) is None
    assert context.aggregator.active is False
    assert device.opened == []


def test_malformed_signal_is_logged_and_dropped(caplog: pytest.LogCaptureFixture) -> None:
    """A StateChanged missing its new state is reported without changing state."""
    caplog.set_level(logging.WARNING, logger="q6voiced.daemon")
    context, _ = _context()
    malformed = RawSignal(
        interface=MODEM_MANAGER_CALL_INTERFACE, member="StateChanged", signature="i", body=(2,)
    )

    assert context.handle_signal(malformed) is None

    assert context.aggregator.active is False
    assert any("Failed to handle signal" in record.message for record in caplog.records)


def test_run_continues_after_malformed_signal() -> None:
    """The loop keeps processing after a decode failure and exits with 0."""
    context, device = _context()
    malformed = RawSignal(
        interface=MODEM_MANAGER_CALL_INTERFACE, member="StateChanged", signature="", body=()
    )
    source = ListSignalSource([malformed, _mm_state(2, 4)])

    assert run(context, source) == 0

    assert context.controller.is_open is True
    assert device.opened == [PcmDirection.CAPTURE, PcmDirection.PLAYBACK]


def test_foreign_signals_are_ignored() -> None:
    """Signals from unrelated interfaces never touch the audio path."""
    context, device = _context()
    foreign = RawSignal(interface="org.freedesktop.DBus", member="NameLost")
    assert context.handle_signal(foreign) is None
    assert device.opened == []
