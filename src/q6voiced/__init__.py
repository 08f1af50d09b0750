"""Voice call audio routing daemon for Qualcomm q6 modem codecs."""

from __future__ import annotations

from .aggregator import CallActivityAggregator, is_active_state
from .audio_path import AudioDevice, AudioPathController, PcmPair
from .config import DaemonSettings, PcmConfig
from .daemon import DaemonContext, run
from .errors import (
    BusConnectionError,
    MatchRegistrationError,
    PcmError,
    Q6VoicedError,
    SignalDecodeError,
)
from .models import (
    Backend,
    CallAppeared,
    CallDisappeared,
    CallStateChanged,
    Decision,
    DeviceEndpoint,
    MMCallState,
    NormalizedEvent,
    NormalizedSignal,
    PcmDirection,
    RawSignal,
)
from .normalizer import normalize

__all__ = [
    "AudioDevice",
    "AudioPathController",
    "Backend",
    "BusConnectionError",
    "CallActivityAggregator",
    "CallAppeared",
    "CallDisappeared",
    "CallStateChanged",
    "DaemonContext",
    "DaemonSettings",
    "Decision",
    "DeviceEndpoint",
    "MMCallState",
    "MatchRegistrationError",
    "NormalizedEvent",
    "NormalizedSignal",
    "PcmConfig",
    "PcmDirection",
    "PcmError",
    "PcmPair",
    "Q6VoicedError",
    "RawSignal",
    "SignalDecodeError",
    "is_active_state",
    "normalize",
    "run",
]
