"""
Per-tick participant tracking.

process_samples() resolves one tick of channel samples against the angle table:
- inactive channel (direction 0,0): session silence counter +1 (per channel, not per tick)
- active channel: silence counter reset, azimuth looked up
  - unassigned + spare capacity: new participant claims angle +/- angle_spread
  - unassigned + full: sample dropped
  - assigned: participant talk stats and smoothed pitch updated

Every sample is resolved to (angle, intensity) before anything is mutated, so a
tick is either applied whole or not at all.

update_turns() then runs the turn hysteresis over every slot: a tick with
talk_intensity 0 is silent (including a direction still reported at zero energy),
and a participant who talks again after more than min_turn_silence silent ticks
takes a new turn.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Sequence

from talkmap.tracking.angle_table import UNASSIGNED, azimuth_from_direction
from talkmap.tracking.models import ChannelSample, Participant, TrackerLimits

if TYPE_CHECKING:
    from talkmap.tracking.session import MeetingState

logger = logging.getLogger(__name__)

# Exponential smoothing weight of a new pitch sample.
FREQUENCY_SMOOTHING = 0.1
INTENSITY_SCALE = 10


def _intensity(sample: ChannelSample) -> int:
    """round(10 * activity), clamped to 0..INTENSITY_SCALE."""
    activity = min(max(sample.activity, 0.0), 1.0)
    return int(round(INTENSITY_SCALE * activity))


def _resolve(samples: Sequence[ChannelSample]) -> list[tuple[int, ChannelSample, Optional[int], int]]:
    """(channel, sample, azimuth or None when inactive, intensity) per channel."""
    resolved = []
    for channel, sample in enumerate(samples):
        if not sample.is_active:
            resolved.append((channel, sample, None, 0))
            continue
        resolved.append((channel, sample, azimuth_from_direction(sample.x, sample.y), _intensity(sample)))
    return resolved


def _register_participant(state: "MeetingState", angle: int, intensity: int, limits: TrackerLimits) -> int:
    """Allocate the next slot for a new direction and claim its angular region."""
    slot = state.participant_count + 1
    state.angle_table.claim(angle, slot, limits.angle_spread)
    state.participant_count = slot

    participant = state.participants[slot]
    participant.clear()
    participant.angle = angle
    participant.frequency_estimate = limits.initial_frequency_hz
    participant.is_active = True
    participant.talk_intensity = intensity
    participant.total_talk_ticks = 1
    return slot


def _update_participant(participant: Participant, sample: ChannelSample, intensity: int) -> None:
    participant.is_active = True
    participant.talk_intensity = intensity
    participant.total_talk_ticks += 1
    if sample.frequency > 0:
        participant.frequency_estimate = (
            (1.0 - FREQUENCY_SMOOTHING) * participant.frequency_estimate
            + FREQUENCY_SMOOTHING * sample.frequency
        )


def process_samples(state: "MeetingState", samples: Sequence[ChannelSample], limits: TrackerLimits) -> None:
    """Apply one tick of channel samples (one per channel, channel order) to state."""
    if len(samples) != limits.num_channels:
        raise ValueError(f"expected {limits.num_channels} channel samples, got {len(samples)}")
    resolved = _resolve(samples)

    # "Heard this tick" is recomputed every tick.
    for participant in state.participants[1:]:
        participant.is_active = False
        participant.talk_intensity = 0

    for channel, sample, angle, intensity in resolved:
        if angle is None:
            state.total_silence_ticks += 1
            continue

        state.total_silence_ticks = 0
        slot = state.angle_table.lookup(angle)

        if slot == UNASSIGNED:
            if state.participant_count < limits.participant_capacity:
                slot = _register_participant(state, angle, intensity, limits)
                logger.info("New participant %d at %d° (channel %d)", slot, angle, channel)
            else:
                logger.debug("Participant table full; dropping source at %d° (channel %d)", angle, channel)
            continue

        _update_participant(state.participants[slot], sample, intensity)

    state.total_ticks += 1


def update_turns(participants: Sequence[Participant], limits: TrackerLimits) -> None:
    """Silence/talk hysteresis for every valid slot (index 0 skipped)."""
    for participant in participants[1:]:
        if participant.talk_intensity == 0:
            participant.silent_ticks += 1
            continue
        if participant.silent_ticks > limits.min_turn_silence:
            participant.turn_count += 1
        participant.silent_ticks = 0
