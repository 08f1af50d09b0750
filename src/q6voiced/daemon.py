"""Daemon context tying the normalizer, aggregator and audio path together."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .aggregator import CallActivityAggregator
from .audio_path import AudioDevice, AudioPathController
from .bus import SignalSource
from .config import PcmConfig
from .errors import SignalDecodeError
from .models import Decision, DeviceEndpoint, RawSignal
from .normalizer import normalize

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DaemonContext:
    """State owned by one daemon process: the endpoint, call activity and PCM pair."""

    endpoint: DeviceEndpoint
    aggregator: CallActivityAggregator
    controller: AudioPathController

    @classmethod
    def create(
        cls,
        endpoint: DeviceEndpoint,
        device: AudioDevice,
        config: PcmConfig | None = None,
    ) -> DaemonContext:
        """Build a context with a fresh aggregator and a controller bound to *endpoint*."""
        return cls(
            endpoint=endpoint,
            aggregator=CallActivityAggregator(),
            controller=AudioPathController(device, endpoint, config),
        )

    def handle_signal(self, signal: RawSignal) -> Decision | None:
        """Apply one raw *signal*, returning the decision or ``None`` if it was dropped."""
        try:
            normalized = normalize(signal)
        except SignalDecodeError as exc:
            logger.warning("Failed to handle signal: %s", exc)
            return None
        if normalized is None:
            return None
        decision = self.aggregator.apply(normalized.event)
        if decision is not Decision.NO_CHANGE:
            logger.debug(
                "%s event %s -> %s",
                normalized.backend.value,
                type(normalized.event).__name__,
                decision.value,
            )
        self.controller.apply(decision)
        return decision


def run(context: DaemonContext, source: SignalSource) -> int:
    """Feed every signal from *source* into *context* until the source is exhausted."""
    for signal in source.signals():
        context.handle_signal(signal)
    logger.info("Signal source exhausted; exiting")
    return 0
