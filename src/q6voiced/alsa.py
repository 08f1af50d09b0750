"""ALSA-backed PCM access using the pyalsaaudio package."""

from __future__ import annotations

import importlib
import logging
from typing import Any

from .audio_path import AudioDevice
from .config import PcmConfig
from .errors import PcmError
from .models import DeviceEndpoint, PcmDirection

logger = logging.getLogger(__name__)


class AlsaAudioDevice(AudioDevice):
    """Open voice call PCM handles through ``alsaaudio.PCM``.

    ``alsaaudio`` applies the hardware parameters while constructing the PCM,
    which leaves a healthy handle in the ``PREPARED`` state without an
    explicit prepare call. :meth:`prepare` therefore verifies that state.
    """

    def __init__(self) -> None:
        """Resolve the ``alsaaudio`` module, failing with a helpful error when missing."""
        try:
            self._alsa = importlib.import_module("alsaaudio")
        except ImportError as exc:  # pragma: no cover - environment dependent
            raise PcmError(
                "pyalsaaudio is not installed; install the 'alsa' extra to enable PCM control"
            ) from exc
        self._error_type: type[Exception] = self._alsa.ALSAAudioError
        self._ready_states = frozenset(
            getattr(self._alsa, name)
            for name in ("PCM_STATE_SETUP", "PCM_STATE_PREPARED", "PCM_STATE_RUNNING")
        )
        self._prepared_states = frozenset(
            getattr(self._alsa, name) for name in ("PCM_STATE_PREPARED", "PCM_STATE_RUNNING")
        )

    def open(
        self, endpoint: DeviceEndpoint, direction: PcmDirection, config: PcmConfig
    ) -> Any:
        """Open *endpoint* in *direction* with the stream parameters from *config*."""
        pcm_type = (
            self._alsa.PCM_CAPTURE if direction is PcmDirection.CAPTURE else self._alsa.PCM_PLAYBACK
        )
        logger.debug("Opening %s PCM on %s", direction.value, endpoint)
        try:
            return self._alsa.PCM(
                type=pcm_type,
                mode=self._alsa.PCM_NORMAL,
                device=str(endpoint),
                channels=config.channels,
                rate=config.rate,
                format=getattr(self._alsa, f"PCM_FORMAT_{config.sample_format}"),
                periodsize=config.period_size,
                periods=config.period_count,
            )
        except self._error_type as exc:
            raise PcmError(str(exc)) from exc

    def is_ready(self, handle: Any) -> bool:
        """Return True when the hardware parameters were applied to *handle*."""
        try:
            return handle.state() in self._ready_states
        except self._error_type as exc:
            logger.debug("Unable to query PCM state: %s", exc)
            return False

    def prepare(self, handle: Any) -> None:
        """Ensure *handle* is prepared for streaming."""
        try:
            state = handle.state()
        except self._error_type as exc:
            raise PcmError(str(exc)) from exc
        if state not in self._prepared_states:
            raise PcmError(f"PCM is not prepared (state {state})")

    def close(self, handle: Any) -> None:
        """Close *handle*."""
        try:
            handle.close()
        except self._error_type as exc:
            raise PcmError(str(exc)) from exc
