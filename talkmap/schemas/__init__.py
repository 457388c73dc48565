"""Pydantic schemas for ODAS input and API responses."""
from talkmap.schemas.meeting import (
    CloseMeetingResponse,
    FrameResponse,
    MeetingSnapshotResponse,
    ParticipantStats,
)
from talkmap.schemas.odas import OdasFrame, OdasSource

__all__ = [
    "CloseMeetingResponse",
    "FrameResponse",
    "MeetingSnapshotResponse",
    "OdasFrame",
    "OdasSource",
    "ParticipantStats",
]
