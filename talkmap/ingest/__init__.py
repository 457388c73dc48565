"""ODAS ingestion: UDP receive and frame decoding."""
from .decoder import DecodedFrame, decode_frame, frame_to_samples
from .receiver import OdasDatagramProtocol, start_odas_listener

__all__ = [
    "DecodedFrame",
    "OdasDatagramProtocol",
    "decode_frame",
    "frame_to_samples",
    "start_odas_listener",
]
