"""
Schemas for ODAS sound-source-tracking (SST) frames.

One frame per tick:
{ "timeStamp": 1234, "src": [ { "id": 1, "tag": "dynamic", "x": 0.1, "y": -0.9, "z": 0.2,
  "activity": 0.8, "frequency": 180 }, ... ] }
One "src" entry per tracked channel, in channel order; x = y = 0 means the channel
is idle. Extra keys are ignored.
"""
from __future__ import annotations

from pydantic import BaseModel, Field


class OdasSource(BaseModel):
    """One tracked source (channel) in an SST frame."""

    id: int = Field(0, description="ODAS track id (0 = no track)")
    tag: str = Field("", description="ODAS track tag, e.g. 'dynamic'")
    x: float = Field(0.0, description="Direction x component")
    y: float = Field(0.0, description="Direction y component")
    z: float = Field(0.0, description="Direction z component (unused for azimuth)")
    activity: float = Field(0.0, description="Track activity / energy, nominally 0–1")
    frequency: float = Field(0.0, description="Pitch estimate in Hz; <= 0 = none")

    class Config:
        extra = "ignore"


class OdasFrame(BaseModel):
    """One SST frame as sent by ODAS over UDP or posted to /api/meeting/frames."""

    timestamp: int | None = Field(None, alias="timeStamp", description="ODAS frame counter")
    src: list[OdasSource] = Field(default_factory=list, description="Tracked sources, channel order")

    class Config:
        extra = "ignore"
        populate_by_name = True
