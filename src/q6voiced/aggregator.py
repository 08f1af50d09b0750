"""Call activity state machine driving the voice call PCM path."""

from __future__ import annotations

import logging
from typing import Final

from .models import (
    CallAppeared,
    CallDisappeared,
    CallStateChanged,
    Decision,
    MMCallState,
    NormalizedEvent,
)

logger = logging.getLogger(__name__)

# Some modems never report DIALING -> ACTIVE, so the pre-connect states count as active.
ACTIVE_CALL_STATES: Final[frozenset[int]] = frozenset(
    {MMCallState.DIALING, MMCallState.RINGING_OUT, MMCallState.ACTIVE}
)


def is_active_state(code: int) -> bool:
    """Return True when the ModemManager call state *code* needs the audio path open."""
    return code in ACTIVE_CALL_STATES


class CallActivityAggregator:
    """Folds normalized call events into a single active/inactive state.

    Every event yields a :class:`Decision`. The aggregator only reports a
    transition when its own state actually changes, so duplicate or
    out-of-order signals collapse into ``NO_CHANGE``.
    """

    def __init__(self) -> None:
        """Start in the inactive state."""
        self._active = False

    @property
    def active(self) -> bool:
        """Return True while any call is considered active."""
        return self._active

    def apply(self, event: NormalizedEvent) -> Decision:
        """Apply *event* and return the resulting decision."""
        match event:
            case CallAppeared():
                decision = self._activate() if not self._active else Decision.NO_CHANGE
            case CallDisappeared():
                decision = self._deactivate() if self._active else Decision.NO_CHANGE
            case CallStateChanged(old=old, new=new):
                decision = self._apply_state_change(old, new)
        logger.debug("Applied %s -> %s (active=%s)", event, decision.value, self._active)
        return decision

    def _apply_state_change(self, old: int, new: int) -> Decision:
        if is_active_state(new):
            return self._activate() if not self._active else Decision.NO_CHANGE
        if is_active_state(old) and self._active:
            return self._deactivate()
        return Decision.NO_CHANGE

    def _activate(self) -> Decision:
        self._active = True
        return Decision.ACTIVATE

    def _deactivate(self) -> Decision:
        self._active = False
        return Decision.DEACTIVATE
