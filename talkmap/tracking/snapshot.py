"""
Immutable meeting snapshots: the only state the tracker exposes to the broadcast and persistence side.

One entry per valid participant slot (1 .. max_participants - 1), occupied or not;
unused slots carry their zeroed initial values. Built under the session lock and
never mutated afterwards, so readers on other threads see a consistent tick.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from talkmap.tracking.session import MeetingState


@dataclass(frozen=True)
class ParticipantSnapshot:
    slot: int
    angle: int
    talk_intensity: int
    turn_count: int
    total_talk_ticks: int
    frequency_estimate: float

    def as_tuple(self) -> tuple[int, int, int, int]:
        """Export tuple: (angle, talk_intensity, turn_count, total_talk_ticks)."""
        return (self.angle, self.talk_intensity, self.turn_count, self.total_talk_ticks)

    def to_dict(self) -> dict[str, Any]:
        return {
            "slot": self.slot,
            "angle": self.angle,
            "talk_intensity": self.talk_intensity,
            "turn_count": self.turn_count,
            "total_talk_ticks": self.total_talk_ticks,
            "frequency_estimate": round(self.frequency_estimate, 2),
        }


@dataclass(frozen=True)
class MeetingSnapshot:
    total_ticks: int
    participant_count: int
    total_silence_ticks: int
    participants: tuple[ParticipantSnapshot, ...]

    def as_tuples(self) -> list[tuple[int, int, int, int]]:
        return [p.as_tuple() for p in self.participants]

    def to_wire(self) -> dict[str, Any]:
        """Compact payload for live clients: {"tMT": total_ticks, "m": [[angle, intensity, turns, talk], ...]}."""
        return {"tMT": self.total_ticks, "m": [list(t) for t in self.as_tuples()]}

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_ticks": self.total_ticks,
            "participant_count": self.participant_count,
            "total_silence_ticks": self.total_silence_ticks,
            "participants": [p.to_dict() for p in self.participants],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_wire())


def build_snapshot(state: "MeetingState") -> MeetingSnapshot:
    """Pure read of state; caller holds the session lock."""
    participants = tuple(
        ParticipantSnapshot(
            slot=slot,
            angle=p.angle,
            talk_intensity=p.talk_intensity,
            turn_count=p.turn_count,
            total_talk_ticks=p.total_talk_ticks,
            frequency_estimate=p.frequency_estimate,
        )
        for slot, p in enumerate(state.participants)
        if slot > 0
    )
    return MeetingSnapshot(
        total_ticks=state.total_ticks,
        participant_count=state.participant_count,
        total_silence_ticks=state.total_silence_ticks,
        participants=participants,
    )
