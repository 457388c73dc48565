"""Pytest configuration for tests directory."""
import pytest

from talkmap.tracking.models import TrackerLimits
from talkmap.tracking.session import MeetingSession

# Keep tests independent of a developer's .env / shell settings.
_SETTINGS_ENV = (
    "MAX_PARTICIPANTS",
    "NUM_CHANNELS",
    "ANGLE_SPREAD",
    "MAX_SILENCE",
    "MIN_TURN_SILENCE",
    "INITIAL_FREQUENCY_HZ",
    "ODAS_LISTEN_ENABLED",
    "SUMMARY_SAVE_ENABLED",
    "SUMMARY_DIR",
    "LOG_FILE",
)


@pytest.fixture(autouse=True)
def _clean_settings_env(monkeypatch, tmp_path):
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def limits() -> TrackerLimits:
    """Single channel, small thresholds: easy to drive by hand."""
    return TrackerLimits(
        max_participants=4,
        num_channels=1,
        angle_spread=10,
        max_silence=20,
        min_turn_silence=3,
    )


@pytest.fixture
def session(limits) -> MeetingSession:
    return MeetingSession(limits)
