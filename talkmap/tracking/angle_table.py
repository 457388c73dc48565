"""
AngleTable: 360 one-degree slots around the array, each unassigned (0) or owned by a participant slot.

A new participant claims its angle plus angle_spread degrees either side. Claims wrap
modulo 360 and overwrite whatever was there (last writer wins, no collision check).
"""
from __future__ import annotations

import math

import numpy as np

ANGLE_SLOTS = 360
UNASSIGNED = 0


def normalize_degrees(value: float) -> int:
    """Nearest whole degree, mapped into [0, 360)."""
    return int(round(value)) % ANGLE_SLOTS


def azimuth_from_direction(x: float, y: float) -> int:
    """Azimuth in degrees of an ODAS direction vector (180 - atan2(x, y))."""
    return normalize_degrees(180.0 - math.degrees(math.atan2(x, y)))


def _check_angle(angle: int) -> None:
    if not 0 <= angle < ANGLE_SLOTS:
        raise IndexError(f"angle {angle} outside [0, {ANGLE_SLOTS - 1}]")


class AngleTable:
    """Fixed ring of angle slots backed by an int16 array."""

    def __init__(self) -> None:
        self._slots = np.zeros(ANGLE_SLOTS, dtype=np.int16)

    def lookup(self, angle: int) -> int:
        """Participant slot owning angle, or UNASSIGNED."""
        _check_angle(angle)
        return int(self._slots[angle])

    def claim(self, angle: int, participant_id: int, spread: int) -> None:
        """Write participant_id into angle and the spread degrees on both sides, wrapping at 0/360."""
        _check_angle(angle)
        offsets = np.arange(-spread, spread + 1)
        indices = (angle + offsets + ANGLE_SLOTS) % ANGLE_SLOTS
        self._slots[indices] = participant_id

    def reset(self) -> None:
        self._slots.fill(UNASSIGNED)

    def claimed_by(self, participant_id: int) -> list[int]:
        """Sorted angles currently owned by participant_id."""
        return [int(a) for a in np.flatnonzero(self._slots == participant_id)]

    def as_array(self) -> np.ndarray:
        """Copy of the slot array (read-only view for diagnostics/tests)."""
        return self._slots.copy()

    def __len__(self) -> int:
        return ANGLE_SLOTS
