"""Typed data models for call signals, audio endpoints and aggregator decisions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Final

_ENDPOINT_PATTERN: Final = re.compile(r"hw:(?P<card>[0-9]+),(?P<device>[0-9]+)")
_UINT32_LIMIT: Final = 2**32


@dataclass(frozen=True, slots=True)
class DeviceEndpoint:
    """ALSA card/device pair carrying the voice call PCM path."""

    card: int
    device: int

    @classmethod
    def parse(cls, text: str) -> DeviceEndpoint:
        """Parse a ``hw:<card>,<device>`` specifier.

        Both numbers must be unsigned 32-bit decimal integers; anything else
        raises :class:`ValueError`.
        """
        match = _ENDPOINT_PATTERN.fullmatch(text)
        if match is None:
            raise ValueError(f"invalid device specifier {text!r}, expected hw:<card>,<device>")
        card, device = int(match["card"]), int(match["device"])
        if card >= _UINT32_LIMIT or device >= _UINT32_LIMIT:
            raise ValueError(f"invalid device specifier {text!r}, numbers must fit in 32 bits")
        return cls(card=card, device=device)

    def __str__(self) -> str:
        return f"hw:{self.card},{self.device}"


class PcmDirection(str, Enum):
    """Direction of a PCM stream on the modem codec."""

    CAPTURE = "capture"  # tx
    PLAYBACK = "playback"  # rx


class Backend(str, Enum):
    """Telephony manager that emitted a signal."""

    OFONO = "ofono"
    MODEM_MANAGER = "modemmanager"


class MMCallState(IntEnum):
    """ModemManager call states (see ``ModemManager-enums.h``)."""

    UNKNOWN = 0
    DIALING = 1
    RINGING_OUT = 2
    RINGING_IN = 3
    ACTIVE = 4
    HELD = 5
    WAITING = 6
    TERMINATED = 7


@dataclass(frozen=True, slots=True)
class RawSignal:
    """Transport-neutral view of a single D-Bus signal message."""

    interface: str
    member: str
    signature: str = ""
    body: tuple[object, ...] = ()
    path: str | None = None
    sender: str | None = None


@dataclass(frozen=True, slots=True)
class CallAppeared:
    """A call object was added by the telephony manager."""


@dataclass(frozen=True, slots=True)
class CallDisappeared:
    """A call object was removed by the telephony manager."""


@dataclass(frozen=True, slots=True)
class CallStateChanged:
    """A call moved between two backend-specific state codes."""

    old: int
    new: int


NormalizedEvent = CallAppeared | CallDisappeared | CallStateChanged


@dataclass(frozen=True, slots=True)
class NormalizedSignal:
    """Normalized event paired with the backend it originated from."""

    backend: Backend
    event: NormalizedEvent


class Decision(str, Enum):
    """Outcome of applying a normalized event to the call activity state."""

    NO_CHANGE = "no_change"
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"
