"""Sample builders shared by the tests."""
from __future__ import annotations

import json
import math

from talkmap.tracking.models import ChannelSample


def direction_for(angle: float) -> tuple[float, float]:
    """Direction vector whose azimuth (180 - atan2(x, y)) is angle degrees."""
    theta = math.radians(180.0 - angle)
    return (math.sin(theta), math.cos(theta))


def talk(angle: float, activity: float = 0.8, frequency: float = 0.0) -> ChannelSample:
    x, y = direction_for(angle)
    return ChannelSample(x=x, y=y, activity=activity, frequency=frequency)


def silence() -> ChannelSample:
    return ChannelSample.silent()


def odas_payload(*sources, timestamp: int = 1) -> str:
    """SST JSON frame; each source is (angle, activity, frequency) or None for an idle channel."""
    src = []
    for source in sources:
        if source is None:
            src.append({"id": 0, "tag": "", "x": 0.0, "y": 0.0, "z": 0.0, "activity": 0.0})
            continue
        angle, activity, frequency = source
        x, y = direction_for(angle)
        src.append(
            {"id": 1, "tag": "dynamic", "x": x, "y": y, "z": 0.3, "activity": activity, "frequency": frequency}
        )
    return json.dumps({"timeStamp": timestamp, "src": src})
