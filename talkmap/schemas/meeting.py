"""Response schemas for the meeting API."""
from __future__ import annotations

from pydantic import BaseModel, Field

from talkmap.tracking.session import MeetingSummary
from talkmap.tracking.snapshot import MeetingSnapshot


class ParticipantStats(BaseModel):
    """One participant slot; unused slots report zeros."""

    slot: int
    angle: int = Field(..., ge=0, le=359, description="Azimuth where the participant was first heard")
    talk_intensity: int = Field(..., description="round(10 * activity) this tick; 0 = not heard")
    turn_count: int
    total_talk_ticks: int
    frequency_estimate: float = Field(..., description="Smoothed pitch estimate in Hz")


class MeetingSnapshotResponse(BaseModel):
    """Current meeting state (GET /api/meeting)."""

    total_ticks: int
    participant_count: int
    total_silence_ticks: int
    participants: list[ParticipantStats]

    @classmethod
    def from_snapshot(cls, snapshot: MeetingSnapshot) -> "MeetingSnapshotResponse":
        return cls.model_validate(snapshot.to_dict())


class FrameResponse(BaseModel):
    """Result of posting one frame (POST /api/meeting/frames)."""

    snapshot: MeetingSnapshotResponse
    meeting_closed: bool = Field(False, description="True when this frame reached the meeting boundary")
    meeting_id: str | None = Field(None, description="Id of the meeting that just closed")


class CloseMeetingResponse(BaseModel):
    """Result of POST /api/meeting/close."""

    closed: bool = Field(..., description="False when no participant was heard (nothing to save)")
    meeting_id: str | None = None
    saved_path: str | None = Field(None, description="Summary file, when saving is enabled")

    @classmethod
    def from_summary(cls, summary: MeetingSummary | None, saved_path: str | None) -> "CloseMeetingResponse":
        if summary is None:
            return cls(closed=False)
        return cls(closed=True, meeting_id=summary.meeting_id, saved_path=saved_path)
