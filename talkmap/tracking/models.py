"""
Value types for direction-based participant tracking.

- ChannelSample: one ODAS channel's estimate for one tick. Direction (0, 0) means
  "no source on this channel"; activity and frequency are informational only.
- Participant: accumulated statistics for one slot. Slot 0 is never a participant;
  it doubles as the "unassigned" marker in the angle table.
- TrackerLimits: constants fixed when the tracker is built.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from talkmap.exceptions import ConfigurationError

# Pitch estimate of an unused/cleared slot.
IDLE_FREQUENCY_HZ = 150.0
# Upper bound for a pitch estimate; ODAS never reports above Nyquist at 48 kHz.
MAX_FREQUENCY_HZ = 24000.0


@dataclass(frozen=True)
class ChannelSample:
    """
    One channel's localization estimate for one tick.

    x, y: direction components from the beamformer; (0, 0) = inactive channel.
    activity: normalized energy, nominally 0–1 (not enforced upstream).
    frequency: pitch estimate in Hz; <= 0 means no estimate.

    Non-finite values are sanitized on construction: a non-finite direction
    component makes the channel inactive, non-finite activity or frequency
    becomes 0, and frequency is capped at MAX_FREQUENCY_HZ.
    """

    x: float = 0.0
    y: float = 0.0
    activity: float = 0.0
    frequency: float = 0.0

    def __post_init__(self) -> None:
        if not (math.isfinite(self.x) and math.isfinite(self.y)):
            object.__setattr__(self, "x", 0.0)
            object.__setattr__(self, "y", 0.0)
        if not math.isfinite(self.activity):
            object.__setattr__(self, "activity", 0.0)
        if not math.isfinite(self.frequency):
            object.__setattr__(self, "frequency", 0.0)
        elif self.frequency > MAX_FREQUENCY_HZ:
            object.__setattr__(self, "frequency", MAX_FREQUENCY_HZ)

    @classmethod
    def silent(cls) -> "ChannelSample":
        return cls()

    @property
    def direction(self) -> tuple[float, float]:
        return (self.x, self.y)

    @property
    def is_active(self) -> bool:
        """Judged on direction only, never on activity: decaying energy at the end of speech is still talk."""
        return not (self.x == 0.0 and self.y == 0.0)


@dataclass
class Participant:
    """
    Statistics for one participant slot, valid for one meeting.

    is_active: heard on some channel during the current tick.
    talk_intensity: round(10 * activity) of the latest sample this tick, clamped to 0..10;
        0 when not heard. Turn hysteresis counts a tick as silent whenever it is 0.
    """

    angle: int = 0
    is_active: bool = False
    talk_intensity: int = 0
    silent_ticks: int = 0
    total_talk_ticks: int = 0
    turn_count: int = 0
    frequency_estimate: float = IDLE_FREQUENCY_HZ

    def clear(self) -> None:
        """Back to the values of an unused slot."""
        self.angle = 0
        self.is_active = False
        self.talk_intensity = 0
        self.silent_ticks = 0
        self.total_talk_ticks = 0
        self.turn_count = 0
        self.frequency_estimate = IDLE_FREQUENCY_HZ


@dataclass(frozen=True)
class TrackerLimits:
    """Construction-time tracker constants. Invalid combinations raise ConfigurationError."""

    max_participants: int = 7
    num_channels: int = 2
    angle_spread: int = 10
    max_silence: int = 500
    min_turn_silence: int = 30
    initial_frequency_hz: float = 200.0

    def __post_init__(self) -> None:
        if self.max_participants < 2:
            raise ConfigurationError(
                "max_participants must be at least 2 (slot 0 is reserved)",
                {"max_participants": self.max_participants},
            )
        # Slot indices live in an int16 angle table.
        if self.max_participants > 32767:
            raise ConfigurationError(
                "max_participants is too large", {"max_participants": self.max_participants}
            )
        if self.num_channels < 1:
            raise ConfigurationError(
                "num_channels must be at least 1", {"num_channels": self.num_channels}
            )
        if not 0 <= self.angle_spread < 180:
            raise ConfigurationError(
                "angle_spread must be in [0, 180)", {"angle_spread": self.angle_spread}
            )
        if self.max_silence < 0 or self.min_turn_silence < 0:
            raise ConfigurationError(
                "silence thresholds must not be negative",
                {"max_silence": self.max_silence, "min_turn_silence": self.min_turn_silence},
            )
        if self.initial_frequency_hz <= 0:
            raise ConfigurationError(
                "initial_frequency_hz must be positive",
                {"initial_frequency_hz": self.initial_frequency_hz},
            )

    @property
    def participant_capacity(self) -> int:
        """Usable participant slots (1 .. max_participants - 1)."""
        return self.max_participants - 1

    @classmethod
    def from_settings(cls, settings) -> "TrackerLimits":
        return cls(
            max_participants=settings.MAX_PARTICIPANTS,
            num_channels=settings.NUM_CHANNELS,
            angle_spread=settings.ANGLE_SPREAD,
            max_silence=settings.MAX_SILENCE,
            min_turn_silence=settings.MIN_TURN_SILENCE,
            initial_frequency_hz=settings.INITIAL_FREQUENCY_HZ,
        )
