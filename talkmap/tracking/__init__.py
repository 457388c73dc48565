"""
Direction-based participant tracking (diarization by angle of arrival only).

- Participants are anonymous slots bound to an angular region for one meeting.
- Talk time, turns and a smoothed pitch estimate are kept per participant.
- A meeting closes after sustained silence; state is then reset for the next one.

Limitations:
- Two people sitting within angle_spread degrees of each other share a slot.
- No voice identity: a participant who moves is a new participant.
- Accuracy depends on the upstream beamformer's direction estimates.
"""
from __future__ import annotations

from talkmap.tracking.angle_table import AngleTable, azimuth_from_direction, normalize_degrees
from talkmap.tracking.models import ChannelSample, Participant, TrackerLimits
from talkmap.tracking.session import MeetingSession, MeetingState, MeetingSummary, TickResult
from talkmap.tracking.snapshot import MeetingSnapshot, ParticipantSnapshot, build_snapshot

__all__ = [
    "AngleTable",
    "ChannelSample",
    "MeetingSession",
    "MeetingSnapshot",
    "MeetingState",
    "MeetingSummary",
    "Participant",
    "ParticipantSnapshot",
    "TickResult",
    "TrackerLimits",
    "azimuth_from_direction",
    "build_snapshot",
    "normalize_degrees",
]
