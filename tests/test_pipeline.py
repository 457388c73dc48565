"""MeetingPipeline: ordered ingestion, publishing and summary persistence."""
import asyncio

from talkmap.broadcast import SnapshotHub
from talkmap.pipeline import MeetingPipeline
from talkmap.summary.writer import NoOpSummaryWriter, SummaryWriter
from talkmap.tracking.models import TrackerLimits
from talkmap.tracking.session import MeetingSession
from tests.helpers import odas_payload


def _pipeline(writer=None, **limit_kwargs) -> MeetingPipeline:
    limits = TrackerLimits(**{"num_channels": 1, **limit_kwargs})
    return MeetingPipeline(
        MeetingSession(limits),
        SnapshotHub(queue_size=4),
        writer or NoOpSummaryWriter(),
        queue_size=32,
    )


def test_fed_frames_processed_in_order() -> None:
    async def run():
        pipeline = _pipeline()
        pipeline.start()
        for angle in (10, 120, 10, 240):
            pipeline.feed(odas_payload((angle, 0.5, 0.0)).encode())
        await pipeline.join()
        snap = pipeline.hub.latest
        await pipeline.stop()
        return snap

    snap = asyncio.run(run())
    assert snap.total_ticks == 4
    assert [p.angle for p in snap.participants[:3]] == [10, 120, 240]
    assert snap.participants[0].total_talk_ticks == 2


def test_bad_frames_are_dropped() -> None:
    async def run():
        pipeline = _pipeline()
        pipeline.start()
        pipeline.feed(b"garbage")
        pipeline.feed(odas_payload((10, 0.5, 0.0)).encode())
        await pipeline.join()
        await pipeline.stop()
        return pipeline

    pipeline = asyncio.run(run())
    assert pipeline.frames_rejected == 1
    assert pipeline.session.total_ticks == 1


def test_out_of_range_activity_does_not_stop_consumer() -> None:
    async def run():
        pipeline = _pipeline()
        pipeline.start()
        pipeline.feed(odas_payload((90, 1e308, 0.0)).encode())
        pipeline.feed(odas_payload((90, 0.5, 0.0)).encode())
        await pipeline.join()
        snap = pipeline.hub.latest
        await pipeline.stop()
        return pipeline, snap

    pipeline, snap = asyncio.run(run())
    assert pipeline.frames_rejected == 0
    assert pipeline.frames_failed == 0
    assert snap.total_ticks == 2
    assert snap.participants[0].total_talk_ticks == 2
    assert snap.participants[0].talk_intensity == 5


class _FlakySession(MeetingSession):
    """Fails its first tick with an unexpected error."""

    def __init__(self, limits):
        super().__init__(limits)
        self.failures = 1

    def process_tick(self, samples):
        if self.failures:
            self.failures -= 1
            raise RuntimeError("tracker exploded")
        return super().process_tick(samples)


def test_consumer_survives_unexpected_errors() -> None:
    async def run():
        session = _FlakySession(TrackerLimits(num_channels=1))
        pipeline = MeetingPipeline(session, SnapshotHub(), NoOpSummaryWriter(), queue_size=8)
        pipeline.start()
        pipeline.feed(odas_payload((10, 0.5, 0.0)).encode())
        pipeline.feed(odas_payload((10, 0.5, 0.0)).encode())
        await pipeline.join()
        consumer_alive = not pipeline._consumer_task.done()
        await pipeline.stop()
        return pipeline, consumer_alive

    pipeline, consumer_alive = asyncio.run(run())
    assert consumer_alive
    assert pipeline.frames_failed == 1
    assert pipeline.session.total_ticks == 1


def test_queue_overflow_drops_newest() -> None:
    async def run():
        limits = TrackerLimits(num_channels=1)
        pipeline = MeetingPipeline(MeetingSession(limits), SnapshotHub(), NoOpSummaryWriter(), queue_size=2)
        for _ in range(5):
            pipeline.feed(odas_payload(None).encode())
        pipeline.start()
        await pipeline.join()
        await pipeline.stop()
        return pipeline

    pipeline = asyncio.run(run())
    assert pipeline.frames_dropped == 3
    assert pipeline.session.total_ticks == 2


def test_meeting_boundary_persists_summary(tmp_path) -> None:
    async def run():
        pipeline = _pipeline(SummaryWriter(str(tmp_path)), max_silence=3)
        await pipeline.ingest(odas_payload((75, 0.6, 150.0)))
        results = [await pipeline.ingest(odas_payload(None)) for _ in range(4)]
        return pipeline, results

    pipeline, results = asyncio.run(run())
    assert [r.meeting_closed for r in results] == [False, False, False, True]
    saved = list(tmp_path.glob("MP_*.json"))
    assert len(saved) == 1
    assert saved[0].stem == results[-1].closed.meeting_id
    assert pipeline.session.total_ticks == 0


def test_subscribers_receive_every_tick() -> None:
    async def run():
        pipeline = _pipeline()
        queue = pipeline.hub.subscribe()
        await pipeline.ingest(odas_payload((10, 0.5, 0.0)))
        await pipeline.ingest(odas_payload(None))
        return [queue.get_nowait().total_ticks, queue.get_nowait().total_ticks]

    assert asyncio.run(run()) == [1, 2]


def test_slow_subscriber_keeps_newest() -> None:
    async def run():
        pipeline = _pipeline()
        queue = pipeline.hub.subscribe()
        for _ in range(10):
            await pipeline.ingest(odas_payload(None))
        ticks = []
        while not queue.empty():
            ticks.append(queue.get_nowait().total_ticks)
        return ticks

    assert asyncio.run(run()) == [7, 8, 9, 10]


def test_close_meeting(tmp_path) -> None:
    async def run():
        pipeline = _pipeline(SummaryWriter(str(tmp_path)))
        empty = await pipeline.close_meeting()
        await pipeline.ingest(odas_payload((75, 0.6, 0.0)))
        closed = await pipeline.close_meeting()
        return empty, closed, pipeline.hub.latest

    empty, (summary, path), latest = asyncio.run(run())
    assert empty == (None, None)
    assert summary.snapshot.participant_count == 1
    assert path.endswith(".json")
    assert latest.total_ticks == 0
