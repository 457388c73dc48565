"""
Decode ODAS SST JSON frames into one ChannelSample per configured channel.

The tracker expects exactly num_channels samples per tick: missing channels are
padded with the (0, 0) "no source" sentinel and extra sources are ignored.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from pydantic import ValidationError

from talkmap.exceptions import PayloadError
from talkmap.schemas.odas import OdasFrame
from talkmap.tracking.models import ChannelSample


@dataclass(frozen=True)
class DecodedFrame:
    timestamp: Optional[int]
    samples: list[ChannelSample]


def frame_to_samples(frame: OdasFrame, num_channels: int) -> list[ChannelSample]:
    samples = [
        ChannelSample(x=src.x, y=src.y, activity=src.activity, frequency=src.frequency)
        for src in frame.src[:num_channels]
    ]
    samples.extend(ChannelSample.silent() for _ in range(num_channels - len(samples)))
    return samples


def decode_frame(payload: Union[str, bytes, OdasFrame], num_channels: int) -> DecodedFrame:
    """Parse one frame. Raises PayloadError when the payload is not a valid SST frame."""
    if isinstance(payload, OdasFrame):
        frame = payload
    else:
        if isinstance(payload, bytes):
            # ODAS pads datagrams with trailing NULs.
            payload = payload.rstrip(b"\x00")
        try:
            frame = OdasFrame.model_validate_json(payload)
        except ValidationError as e:
            raise PayloadError("Invalid ODAS frame", {"errors": e.errors(include_url=False)}) from e
    return DecodedFrame(timestamp=frame.timestamp, samples=frame_to_samples(frame, num_channels))
