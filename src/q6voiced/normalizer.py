"""Translate raw telephony bus signals into normalized call events."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Final, TypeGuard

from .errors import SignalDecodeError
from .models import (
    Backend,
    CallAppeared,
    CallDisappeared,
    CallStateChanged,
    NormalizedEvent,
    NormalizedSignal,
    RawSignal,
)

logger = logging.getLogger(__name__)

OFONO_INTERFACE: Final = "org.ofono.VoiceCallManager"
MODEM_MANAGER_CALL_INTERFACE: Final = "org.freedesktop.ModemManager1.Call"

SignalDecoder = Callable[[RawSignal], NormalizedEvent | None]


def decode_call_added(signal: RawSignal) -> NormalizedEvent | None:
    """Decode oFono ``CallAdded``; the call object itself is not inspected."""
    return CallAppeared()


def decode_call_removed(signal: RawSignal) -> NormalizedEvent | None:
    """Decode oFono ``CallRemoved``."""
    return CallDisappeared()


def decode_state_changed(signal: RawSignal) -> NormalizedEvent | None:
    """Decode ModemManager ``StateChanged(int32 old, int32 new, uint32 reason)``.

    ModemManager creates call objects ahead of time, so only state transitions
    say whether a call is running. The first two arguments must be ``int32``
    values; a trailing reason code is ignored. Anything shorter or mistyped
    raises :class:`SignalDecodeError`. Transitions where ``old == new`` yield
    ``None``.
    """
    if not signal.signature.startswith("ii") or len(signal.body) < 2:
        raise SignalDecodeError(
            f"{signal.interface}.{signal.member} expected (int32 old, int32 new), "
            f"got signature {signal.signature!r}"
        )
    old, new = signal.body[0], signal.body[1]
    if not (_is_int32(old) and _is_int32(new)):
        raise SignalDecodeError(
            f"{signal.interface}.{signal.member} expected int32 states, got {old!r}, {new!r}"
        )
    if old == new:
        return None
    return CallStateChanged(old=old, new=new)


def _is_int32(value: object) -> TypeGuard[int]:
    return isinstance(value, int) and not isinstance(value, bool) and -(2**31) <= value < 2**31


DECODERS: Final[Mapping[tuple[str, str], tuple[Backend, SignalDecoder]]] = MappingProxyType(
    {
        (OFONO_INTERFACE, "CallAdded"): (Backend.OFONO, decode_call_added),
        (OFONO_INTERFACE, "CallRemoved"): (Backend.OFONO, decode_call_removed),
        (MODEM_MANAGER_CALL_INTERFACE, "StateChanged"): (
            Backend.MODEM_MANAGER,
            decode_state_changed,
        ),
    }
)


def normalize(signal: RawSignal) -> NormalizedSignal | None:
    """Return the normalized event for *signal*, or ``None`` when there is nothing to apply.

    ``None`` covers both signals outside the supported interfaces and no-op state
    changes. Malformed arguments raise :class:`SignalDecodeError`.
    """
    entry = DECODERS.get((signal.interface, signal.member))
    if entry is None:
        logger.debug("Ignoring signal %s.%s", signal.interface, signal.member)
        return None
    backend, decoder = entry
    event = decoder(signal)
    if event is None:
        logger.debug("Signal %s.%s produced no event", signal.interface, signal.member)
        return None
    return NormalizedSignal(backend=backend, event=event)
