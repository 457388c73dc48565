import json
import os

from talkmap.summary.writer import (
    NoOpSummaryWriter,
    SummaryWriter,
    create_summary_writer,
    is_valid_meeting_id,
)
from talkmap.tracking.session import MeetingSession, MeetingSummary
from tests.helpers import talk


def _summary(session: MeetingSession, angle: int = 25) -> MeetingSummary:
    session.process_tick([talk(angle)])
    return session.close_meeting()


def test_save_writes_json_named_after_meeting(tmp_path, session) -> None:
    writer = SummaryWriter(str(tmp_path / "meetings"))
    summary = _summary(session)
    path = writer.save(summary)
    assert path == os.path.join(str(tmp_path / "meetings"), f"{summary.meeting_id}.json")
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    assert data["meeting_id"] == summary.meeting_id
    assert data["wire"]["m"][0] == [25, 8, 0, 1]


def test_same_second_meetings_get_suffix(tmp_path, session) -> None:
    writer = SummaryWriter(str(tmp_path))
    summary = _summary(session)
    first = writer.save(summary)
    second = writer.save(summary)
    assert first != second
    assert second.endswith(f"{summary.meeting_id}_1.json")
    assert writer.list_summaries() == [summary.meeting_id, f"{summary.meeting_id}_1"]
    assert writer.load_summary(f"{summary.meeting_id}_1")["meeting_id"] == f"{summary.meeting_id}_1"


def test_list_and_load(tmp_path, session) -> None:
    writer = SummaryWriter(str(tmp_path))
    assert writer.list_summaries() == []
    summary = _summary(session, angle=200)
    writer.save(summary)
    (tmp_path / "notes.json").write_text("{}", encoding="utf-8")
    assert writer.list_summaries() == [summary.meeting_id]
    loaded = writer.load_summary(summary.meeting_id)
    assert loaded["snapshot"]["participants"][0]["angle"] == 200


def test_list_sorted_numerically(tmp_path) -> None:
    for name in ("MP_900", "MP_1000", "MP_1000_2", "MP_1000_1"):
        (tmp_path / f"{name}.json").write_text("{}", encoding="utf-8")
    assert SummaryWriter(str(tmp_path)).list_summaries() == ["MP_900", "MP_1000", "MP_1000_1", "MP_1000_2"]


def test_load_rejects_unknown_and_unsafe_ids(tmp_path) -> None:
    writer = SummaryWriter(str(tmp_path))
    assert writer.load_summary("MP_123") is None
    assert writer.load_summary("../etc/passwd") is None
    assert not is_valid_meeting_id("MP_12/../x")
    assert is_valid_meeting_id("MP_1700000000")


def test_list_missing_dir(tmp_path) -> None:
    assert SummaryWriter(str(tmp_path / "absent")).list_summaries() == []


def test_save_failure_returns_none(tmp_path, session) -> None:
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x", encoding="utf-8")
    writer = SummaryWriter(str(blocker))
    assert writer.save(_summary(session)) is None


def test_factory_respects_setting(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("SUMMARY_DIR", str(tmp_path / "out"))
    writer = create_summary_writer()
    assert isinstance(writer, SummaryWriter)
    assert writer.summary_dir == str(tmp_path / "out")

    monkeypatch.setenv("SUMMARY_SAVE_ENABLED", "false")
    assert isinstance(create_summary_writer(), NoOpSummaryWriter)


def test_noop_writer(session) -> None:
    writer = NoOpSummaryWriter()
    assert writer.save(_summary(session)) is None
    assert writer.list_summaries() == []
    assert writer.load_summary("MP_1") is None
