"""Configuration schemas for the q6voiced daemon."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, PositiveInt

BusType = Literal["system", "session"]

_BUS_TYPES: tuple[str, ...] = get_args(BusType)


class PcmConfig(BaseModel):
    """Stream parameters used when opening the voice call PCM devices.

    No audio is transferred, so these only need to be accepted by the codec
    driver; opening the devices is what starts the voice call stream.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    channels: PositiveInt = Field(default=1, description="Number of interleaved channels")
    rate: PositiveInt = Field(default=8000, description="Sample rate in Hz")
    period_size: PositiveInt = Field(default=160, description="Frames per period")
    period_count: PositiveInt = Field(default=2, description="Number of periods in the buffer")
    sample_format: Literal["S16_LE"] = Field(
        default="S16_LE", description="ALSA sample format name"
    )


class DaemonSettings(BaseModel):
    """Runtime settings resolved from the environment and command line."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    bus: BusType = Field(default="system", description="D-Bus bus to subscribe on")
    pcm: PcmConfig = Field(default_factory=PcmConfig, description="PCM stream parameters")

    @classmethod
    def from_environment(cls, *, env: Mapping[str, str] | None = None) -> DaemonSettings:
        """Build settings from environment variables with safe defaults.

        Recognised variables:
            - ``Q6VOICED_BUS`` → ``bus`` (``system`` or ``session``)
        """
        source = dict(os.environ if env is None else env)
        raw_bus = source.get("Q6VOICED_BUS", "").strip().lower()
        if not raw_bus:
            return cls()
        if raw_bus not in _BUS_TYPES:
            raise ValueError(
                f"Q6VOICED_BUS must be one of {', '.join(_BUS_TYPES)} (got {raw_bus!r})"
            )
        return cls(bus=raw_bus)  # type: ignore[arg-type]
