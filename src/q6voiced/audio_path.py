"""Ownership and lifecycle of the voice call PCM pair."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from .config import PcmConfig
from .errors import PcmError
from .models import Decision, DeviceEndpoint, PcmDirection

logger = logging.getLogger(__name__)


class AudioDevice(Protocol):
    """Protocol describing the PCM operations the controller relies on."""

    def open(
        self, endpoint: DeviceEndpoint, direction: PcmDirection, config: PcmConfig
    ) -> object:  # pragma: no cover - protocol signature
        """Open a PCM handle, raising :class:`PcmError` when none can be obtained."""
        ...

    def is_ready(self, handle: object) -> bool:  # pragma: no cover - protocol signature
        """Return True when *handle* was configured successfully."""
        ...

    def prepare(self, handle: object) -> None:  # pragma: no cover - protocol signature
        """Prepare *handle* for streaming, raising :class:`PcmError` on failure."""
        ...

    def close(self, handle: object) -> None:  # pragma: no cover - protocol signature
        """Release *handle*."""
        ...


@dataclass(frozen=True, slots=True)
class PcmPair:
    """Capture (tx) and playback (rx) handles opened for one activation.

    A slot is ``None`` when opening that direction failed.
    """

    capture: object | None
    playback: object | None


class AudioPathController:
    """Opens and closes the voice call PCM pair on request.

    Both operations are idempotent. Device failures are logged and never
    raised: an activation attempt always leaves the pair recorded as open.
    """

    def __init__(
        self,
        device: AudioDevice,
        endpoint: DeviceEndpoint,
        config: PcmConfig | None = None,
    ) -> None:
        """Create a controller for *endpoint* using *device* for PCM access."""
        self._device = device
        self._endpoint = endpoint
        self._config = config or PcmConfig()
        self._pair: PcmPair | None = None

    @property
    def endpoint(self) -> DeviceEndpoint:
        """Return the endpoint this controller drives."""
        return self._endpoint

    @property
    def is_open(self) -> bool:
        """Return True while a PCM pair is held."""
        return self._pair is not None

    @property
    def pair(self) -> PcmPair | None:
        """Return the currently held pair, if any."""
        return self._pair

    def apply(self, decision: Decision) -> None:
        """Route an aggregator *decision* to :meth:`activate` or :meth:`deactivate`."""
        if decision is Decision.ACTIVATE:
            self.activate()
        elif decision is Decision.DEACTIVATE:
            self.deactivate()

    def activate(self) -> None:
        """Open the PCM pair unless it is already open."""
        if self._pair is not None:
            return
        # Opening the PCM devices starts the stream; capture goes first.
        capture = self._open(PcmDirection.CAPTURE)
        try:
            playback = self._open(PcmDirection.PLAYBACK)
        except BaseException:
            # Interrupted mid-activation; do not leak the capture stream.
            self._close(PcmDirection.CAPTURE, capture)
            raise
        self._pair = PcmPair(capture=capture, playback=playback)
        logger.info("PCM devices were opened.")

    def deactivate(self) -> None:
        """Close the PCM pair unless it is already closed."""
        pair = self._pair
        if pair is None:
            return
        self._close(PcmDirection.PLAYBACK, pair.playback)
        self._close(PcmDirection.CAPTURE, pair.capture)
        self._pair = None
        logger.info("PCM devices were closed.")

    def _open(self, direction: PcmDirection) -> object | None:
        try:
            handle = self._device.open(self._endpoint, direction, self._config)
        except PcmError as exc:
            logger.error("Failed to open %s on %s: %s", direction.value, self._endpoint, exc)
            return None
        try:
            if not self._device.is_ready(handle):
                raise PcmError("device is not ready")
            self._device.prepare(handle)
        except PcmError as exc:
            logger.error("Failed to open %s on %s: %s", direction.value, self._endpoint, exc)
        except BaseException:
            self._close(direction, handle)
            raise
        return handle

    def _close(self, direction: PcmDirection, handle: object | None) -> None:
        if handle is None:
            return
        try:
            self._device.close(handle)
        except PcmError as exc:
            logger.error("Failed to close %s on %s: %s", direction.value, self._endpoint, exc)
