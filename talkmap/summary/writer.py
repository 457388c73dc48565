"""
SummaryWriter: persists a closed meeting's final snapshot, one JSON file per meeting.

- File name is the meeting id: {SUMMARY_DIR}/MP_<unix seconds>.json.
- Written once, when the meeting boundary is reached; never appended or rewritten.
- Runs in an executor (see MeetingPipeline); write failures are logged and never
  stop ingestion of the next meeting.
"""
from __future__ import annotations

import json
import logging
import os
import re
from abc import ABC, abstractmethod
from typing import Any, Optional

from talkmap.config import get_settings
from talkmap.tracking.session import MeetingSummary

logger = logging.getLogger(__name__)

_MEETING_ID_RE = re.compile(r"^MP_\d+(_\d+)?$")


def is_valid_meeting_id(meeting_id: str) -> bool:
    """Guards file lookups: only MP_<digits>[_<n>] ids map to files."""
    return bool(_MEETING_ID_RE.match(meeting_id or ""))


class SummaryWriterBase(ABC):
    """Base for meeting summary persistence. save() returns the written path or None."""

    @abstractmethod
    def save(self, summary: MeetingSummary) -> Optional[str]:
        ...

    @abstractmethod
    def list_summaries(self) -> list[str]:
        """Meeting ids of saved summaries, oldest first."""
        ...

    @abstractmethod
    def load_summary(self, meeting_id: str) -> Optional[dict[str, Any]]:
        ...


class NoOpSummaryWriter(SummaryWriterBase):
    """When summary saving is disabled. No file I/O."""

    def save(self, summary: MeetingSummary) -> Optional[str]:
        return None

    def list_summaries(self) -> list[str]:
        return []

    def load_summary(self, meeting_id: str) -> Optional[dict[str, Any]]:
        return None


class SummaryWriter(SummaryWriterBase):
    """One JSON file per closed meeting in summary_dir."""

    def __init__(self, summary_dir: Optional[str] = None) -> None:
        settings = get_settings()
        self._summary_dir = summary_dir or settings.SUMMARY_DIR

    @property
    def summary_dir(self) -> str:
        return self._summary_dir

    def _path_for(self, meeting_id: str) -> str:
        return os.path.join(self._summary_dir, f"{meeting_id}.json")

    def _unique_path(self, meeting_id: str) -> tuple[str, str]:
        # Two meetings closing within the same second get _1, _2, ... suffixes.
        candidate = meeting_id
        n = 0
        while os.path.exists(self._path_for(candidate)):
            n += 1
            candidate = f"{meeting_id}_{n}"
        return candidate, self._path_for(candidate)

    def save(self, summary: MeetingSummary) -> Optional[str]:
        try:
            os.makedirs(self._summary_dir, exist_ok=True)
            meeting_id, path = self._unique_path(summary.meeting_id)
            payload = summary.to_dict()
            payload["meeting_id"] = meeting_id
            with open(path, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.warning("Failed to save meeting summary %s: %s", summary.meeting_id, e)
            return None
        logger.info("Meeting summary saved: %s", path)
        return path

    def list_summaries(self) -> list[str]:
        try:
            names = os.listdir(self._summary_dir)
        except FileNotFoundError:
            return []
        ids = [n[: -len(".json")] for n in names if n.endswith(".json")]
        return sorted((i for i in ids if is_valid_meeting_id(i)), key=_sort_key)

    def load_summary(self, meeting_id: str) -> Optional[dict[str, Any]]:
        if not is_valid_meeting_id(meeting_id):
            return None
        path = self._path_for(meeting_id)
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning("Failed to read meeting summary %s: %s", path, e)
            return None


def _sort_key(meeting_id: str) -> tuple[int, int]:
    parts = meeting_id[len("MP_"):].split("_")
    return (int(parts[0]), int(parts[1]) if len(parts) > 1 else 0)


def create_summary_writer(summary_dir: Optional[str] = None) -> SummaryWriterBase:
    """Create writer when SUMMARY_SAVE_ENABLED is true; else no-op."""
    settings = get_settings()
    if not getattr(settings, "SUMMARY_SAVE_ENABLED", True):
        return NoOpSummaryWriter()
    return SummaryWriter(summary_dir=summary_dir)
