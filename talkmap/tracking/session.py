"""
MeetingSession: one meeting's tracking state behind a single lock.

Lifecycle: ACTIVE (collecting) -> boundary reached -> final summary emitted -> reset -> ACTIVE.
The boundary is total_silence_ticks > max_silence with at least one participant; an
empty meeting is never closed and just keeps counting silence.

process_tick() does update, turn detection, snapshot and (on boundary) summary + reset
as one locked unit, so a concurrent snapshot() never sees a half-updated or
half-reset meeting.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from talkmap.tracking.angle_table import AngleTable
from talkmap.tracking.models import ChannelSample, Participant, TrackerLimits
from talkmap.tracking.snapshot import MeetingSnapshot, build_snapshot
from talkmap.tracking.tracker import process_samples, update_turns

logger = logging.getLogger(__name__)

SUMMARY_ID_PREFIX = "MP_"


class MeetingState:
    """Angle table, participant slots and session counters for one meeting."""

    def __init__(self, limits: TrackerLimits) -> None:
        self.angle_table = AngleTable()
        # Index 0 is reserved as the "unassigned" marker and never holds a participant.
        self.participants: list[Participant] = [Participant() for _ in range(limits.max_participants)]
        self.participant_count = 0
        self.total_silence_ticks = 0
        self.total_ticks = 0

    def reset(self) -> None:
        self.angle_table.reset()
        for participant in self.participants:
            participant.clear()
        self.participant_count = 0
        self.total_silence_ticks = 0
        self.total_ticks = 0


@dataclass(frozen=True)
class MeetingSummary:
    """Final state of a closed meeting, handed to the persistence side."""

    meeting_id: str
    started_at: float  # unix seconds
    ended_at: float  # unix seconds
    snapshot: MeetingSnapshot
    # Smoothed pitch per occupied slot, slot order.
    frequencies: tuple[float, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "meeting_id": self.meeting_id,
            "started_at": self.started_at,
            "ended_at": self.ended_at,
            "duration_sec": round(self.ended_at - self.started_at, 2),
            "snapshot": self.snapshot.to_dict(),
            "wire": self.snapshot.to_wire(),
            "frequencies": [round(f, 2) for f in self.frequencies],
        }


@dataclass(frozen=True)
class TickResult:
    """Outcome of one tick: the snapshot after it and, when the meeting just closed, its summary."""

    snapshot: MeetingSnapshot
    closed: Optional[MeetingSummary] = field(default=None)

    @property
    def meeting_closed(self) -> bool:
        return self.closed is not None


def _meeting_id(ended_at: float) -> str:
    return f"{SUMMARY_ID_PREFIX}{int(ended_at)}"


class MeetingSession:
    """
    Owns the meeting state and the lock guarding it.

    on_meeting_closed: optional callback, invoked outside the lock with the summary
    every time a meeting boundary is reached (automatic or via close_meeting()).
    """

    def __init__(
        self,
        limits: Optional[TrackerLimits] = None,
        on_meeting_closed: Optional[Callable[[MeetingSummary], None]] = None,
    ) -> None:
        self._limits = limits or TrackerLimits()
        self._on_meeting_closed = on_meeting_closed
        self._lock = threading.RLock()
        self._state = MeetingState(self._limits)
        self._started_at = time.time()

    @property
    def limits(self) -> TrackerLimits:
        return self._limits

    @property
    def participant_count(self) -> int:
        with self._lock:
            return self._state.participant_count

    @property
    def total_ticks(self) -> int:
        with self._lock:
            return self._state.total_ticks

    @property
    def total_silence_ticks(self) -> int:
        with self._lock:
            return self._state.total_silence_ticks

    @property
    def boundary_reached(self) -> bool:
        with self._lock:
            return self._boundary_reached()

    def _boundary_reached(self) -> bool:
        return (
            self._state.total_silence_ticks > self._limits.max_silence
            and self._state.participant_count > 0
        )

    def process_tick(self, samples: Sequence[ChannelSample]) -> TickResult:
        """Apply one tick of samples; close and reset the meeting if the silence boundary is reached."""
        with self._lock:
            process_samples(self._state, samples, self._limits)
            update_turns(self._state.participants, self._limits)
            snapshot = build_snapshot(self._state)
            closed = None
            if self._boundary_reached():
                closed = self._close_locked(snapshot)
        if closed is not None:
            self._notify(closed)
        return TickResult(snapshot=snapshot, closed=closed)

    def snapshot(self) -> MeetingSnapshot:
        with self._lock:
            return build_snapshot(self._state)

    def close_meeting(self) -> Optional[MeetingSummary]:
        """Force a meeting boundary. Returns None (and only resets) when nobody has spoken."""
        with self._lock:
            snapshot = build_snapshot(self._state)
            if self._state.participant_count == 0:
                self._reset_locked()
                return None
            closed = self._close_locked(snapshot)
        self._notify(closed)
        return closed

    def reset(self) -> None:
        """Discard the current meeting without emitting a summary."""
        with self._lock:
            self._reset_locked()

    def _close_locked(self, snapshot: MeetingSnapshot) -> MeetingSummary:
        ended_at = time.time()
        summary = MeetingSummary(
            meeting_id=_meeting_id(ended_at),
            started_at=self._started_at,
            ended_at=ended_at,
            snapshot=snapshot,
            frequencies=tuple(
                p.frequency_estimate for p in snapshot.participants[: snapshot.participant_count]
            ),
        )
        logger.info(
            "Meeting %s closed: %d participant(s), %d ticks",
            summary.meeting_id,
            snapshot.participant_count,
            snapshot.total_ticks,
        )
        self._reset_locked()
        return summary

    def _reset_locked(self) -> None:
        self._state.reset()
        self._started_at = time.time()

    def _notify(self, summary: MeetingSummary) -> None:
        if self._on_meeting_closed is None:
            return
        try:
            self._on_meeting_closed(summary)
        except Exception:
            logger.exception("Meeting-closed callback failed for %s", summary.meeting_id)
