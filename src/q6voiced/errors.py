"""Exception hierarchy for the q6voiced daemon."""

from __future__ import annotations


class Q6VoicedError(Exception):
    """Base exception for all q6voiced errors."""


class BusConnectionError(Q6VoicedError):
    """Raised when the D-Bus connection cannot be established."""


class MatchRegistrationError(Q6VoicedError):
    """Raised when a signal match rule cannot be registered with the bus."""


class SignalDecodeError(Q6VoicedError):
    """Raised when a bus signal carries arguments of the wrong shape."""


class PcmError(Q6VoicedError):
    """Raised when a PCM handle cannot be opened, prepared or closed."""
