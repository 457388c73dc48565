"""
FastAPI app: live meeting tracking from ODAS sound-source localization.

ODAS sends SST JSON frames over UDP (default 127.0.0.1:9000); each frame is one tick.
Clients follow the meeting over WebSocket /ws/meeting, which sends
{ "tMT": total_ticks, "m": [[angle, talk_intensity, turn_count, total_talk_ticks], ...] }
on connect and after every tick. Closed meetings are saved as MP_<unix>.json.

Run: uvicorn talkmap.main:app
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect

from talkmap.broadcast import SnapshotHub
from talkmap.config import get_settings
from talkmap.exceptions import PayloadError
from talkmap.ingest.receiver import start_odas_listener
from talkmap.logging_config import setup_logging
from talkmap.pipeline import MeetingPipeline
from talkmap.schemas.meeting import CloseMeetingResponse, FrameResponse, MeetingSnapshotResponse
from talkmap.schemas.odas import OdasFrame
from talkmap.summary.writer import create_summary_writer
from talkmap.tracking.models import TrackerLimits
from talkmap.tracking.session import MeetingSession

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)
    # Tracker constants are fixed here for the lifetime of the process.
    limits = TrackerLimits.from_settings(settings)
    session = MeetingSession(limits)
    writer = create_summary_writer()
    pipeline = MeetingPipeline(session, SnapshotHub(), writer)
    pipeline.hub.publish(session.snapshot())
    pipeline.start()
    app.state.pipeline = pipeline
    app.state.summary_writer = writer

    transport = None
    if settings.ODAS_LISTEN_ENABLED:
        transport, _ = await start_odas_listener(settings.ODAS_HOST, settings.ODAS_PORT, pipeline.feed)
    logger.info(
        "Tracker ready: %d participant slots, %d channels, spread %d°",
        limits.participant_capacity,
        limits.num_channels,
        limits.angle_spread,
    )
    yield
    if transport is not None:
        transport.close()
    await pipeline.stop()
    app.state.pipeline = None


app = FastAPI(
    title="Meeting participant tracker",
    description="Who speaks, from where, for how long: direction-based tracking from ODAS",
    lifespan=lifespan,
)


def _pipeline(request: Request) -> MeetingPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise RuntimeError("App not initialized (lifespan not run?)")
    return pipeline


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.get("/api/meeting", response_model=MeetingSnapshotResponse)
async def current_meeting(request: Request) -> MeetingSnapshotResponse:
    """Current meeting state, read atomically."""
    snapshot = _pipeline(request).session.snapshot()
    return MeetingSnapshotResponse.from_snapshot(snapshot)


@app.post("/api/meeting/frames", response_model=FrameResponse)
async def submit_frame(frame: OdasFrame, request: Request) -> FrameResponse:
    """Apply one ODAS frame as a tick (same path as UDP frames, without the queue)."""
    try:
        result = await _pipeline(request).ingest(frame)
    except (PayloadError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return FrameResponse(
        snapshot=MeetingSnapshotResponse.from_snapshot(result.snapshot),
        meeting_closed=result.meeting_closed,
        meeting_id=result.closed.meeting_id if result.closed else None,
    )


@app.post("/api/meeting/close", response_model=CloseMeetingResponse)
async def close_meeting(request: Request) -> CloseMeetingResponse:
    """Close the current meeting now (save summary if anyone spoke) and start a new one."""
    summary, path = await _pipeline(request).close_meeting()
    return CloseMeetingResponse.from_summary(summary, path)


@app.get("/api/meetings")
async def list_meetings(request: Request) -> dict:
    writer = request.app.state.summary_writer
    return {"meetings": writer.list_summaries()}


@app.get("/api/meetings/{meeting_id}")
async def get_meeting(meeting_id: str, request: Request) -> dict:
    writer = request.app.state.summary_writer
    summary = writer.load_summary(meeting_id)
    if summary is None:
        raise HTTPException(status_code=404, detail="Meeting summary not found")
    return summary


@app.websocket("/ws/meeting")
async def websocket_meeting(websocket: WebSocket) -> None:
    """
    WebSocket: server pushes the compact snapshot JSON on connect and after every tick.
    Client messages are ignored.
    """
    await websocket.accept()
    pipeline = getattr(websocket.app.state, "pipeline", None)
    if pipeline is None:
        await websocket.close()
        return
    hub = pipeline.hub
    queue = hub.subscribe()

    async def _sender() -> None:
        await websocket.send_text(pipeline.session.snapshot().to_json())
        while True:
            snapshot = await queue.get()
            await websocket.send_text(snapshot.to_json())

    async def _receiver() -> None:
        # Only here to notice the disconnect while the sender waits for the next tick.
        while True:
            msg = await websocket.receive()
            if msg.get("type") == "websocket.disconnect":
                return

    tasks = [asyncio.create_task(_sender()), asyncio.create_task(_receiver())]
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                logger.warning("Meeting WebSocket closed with error: %s", exc)
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        hub.unsubscribe(queue)
