"""
MeetingPipeline: orchestrates ODAS frames -> tracker -> live snapshot -> summary file.

Frames from the UDP listener are queued raw and consumed by one task, so ticks are
processed strictly in arrival order. Each tick:
1. decode the frame into one sample per channel (bad frames are logged and dropped)
2. MeetingSession.process_tick() (update, turns, snapshot, boundary check: one locked unit)
3. publish the snapshot to live subscribers
4. if the meeting closed, write its summary in the default executor (file I/O off the loop)
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Union

from talkmap.broadcast import SnapshotHub
from talkmap.config import get_settings
from talkmap.exceptions import PayloadError
from talkmap.ingest.decoder import decode_frame
from talkmap.schemas.odas import OdasFrame
from talkmap.summary.writer import SummaryWriterBase
from talkmap.tracking.session import MeetingSession, MeetingSummary, TickResult

logger = logging.getLogger(__name__)


class MeetingPipeline:
    """One tracker session fed by a FIFO of raw ODAS frames."""

    def __init__(
        self,
        session: MeetingSession,
        hub: SnapshotHub,
        writer: SummaryWriterBase,
        queue_size: Optional[int] = None,
    ) -> None:
        settings = get_settings()
        self._session = session
        self._hub = hub
        self._writer = writer
        self._queue: asyncio.Queue[bytes] = asyncio.Queue(
            maxsize=queue_size if queue_size is not None else settings.INGEST_QUEUE_SIZE
        )
        self._consumer_task: asyncio.Task[Any] | None = None
        self._closed = False
        self.frames_dropped = 0
        self.frames_rejected = 0
        self.frames_failed = 0

    @property
    def session(self) -> MeetingSession:
        return self._session

    @property
    def hub(self) -> SnapshotHub:
        return self._hub

    def feed(self, payload: bytes) -> None:
        """Queue one raw frame. Called by the UDP protocol; never blocks."""
        if self._closed:
            return
        try:
            self._queue.put_nowait(payload)
        except asyncio.QueueFull:
            self.frames_dropped += 1
            logger.warning("Ingest queue full, dropping ODAS frame (%d dropped so far)", self.frames_dropped)

    async def ingest(self, payload: Union[str, bytes, OdasFrame]) -> TickResult:
        """Decode and apply one frame. Raises PayloadError for frames that cannot be decoded."""
        decoded = decode_frame(payload, self._session.limits.num_channels)
        result = self._session.process_tick(decoded.samples)
        self._hub.publish(result.snapshot)
        if result.closed is not None:
            await self._persist(result.closed)
        return result

    async def close_meeting(self) -> tuple[Optional[MeetingSummary], Optional[str]]:
        """Force the meeting boundary. Returns (summary, saved path); (None, None) when nobody spoke."""
        summary = self._session.close_meeting()
        self._hub.publish(self._session.snapshot())
        if summary is None:
            return None, None
        return summary, await self._persist(summary)

    async def _persist(self, summary: MeetingSummary) -> Optional[str]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._writer.save, summary)

    async def _consumer(self) -> None:
        while True:
            payload = await self._queue.get()
            try:
                await self.ingest(payload)
            except PayloadError as e:
                self.frames_rejected += 1
                logger.warning("Dropping undecodable ODAS frame: %s", e.message)
            except ValueError as e:
                self.frames_rejected += 1
                logger.warning("Dropping ODAS frame: %s", e)
            except Exception:
                self.frames_failed += 1
                logger.exception("Error processing ODAS frame")
            finally:
                self._queue.task_done()

    def start(self) -> None:
        if self._consumer_task is None:
            self._closed = False
            self._consumer_task = asyncio.create_task(self._consumer())

    async def join(self) -> None:
        """Wait until every queued frame has been processed."""
        await self._queue.join()

    async def stop(self) -> None:
        """Stop accepting frames, drain the queue, then stop the consumer."""
        self._closed = True
        if self._consumer_task is None:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=5.0)
        except asyncio.TimeoutError:
            logger.warning("Ingest queue not drained on shutdown (%d frames left)", self._queue.qsize())
        self._consumer_task.cancel()
        try:
            await self._consumer_task
        except asyncio.CancelledError:
            pass
        self._consumer_task = None
