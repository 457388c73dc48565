"""
SnapshotHub: fans the latest meeting snapshot out to live subscribers (WebSocket clients).

publish() never blocks the tick loop: each subscriber has a small bounded queue and a
slow client loses its oldest pending snapshot, not the newest one. Snapshots are
immutable, so the same object is shared by every subscriber.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from talkmap.config import get_settings
from talkmap.tracking.snapshot import MeetingSnapshot

logger = logging.getLogger(__name__)


class SnapshotHub:
    """Latest snapshot plus one bounded queue per subscriber. Use from the event loop thread."""

    def __init__(self, queue_size: Optional[int] = None) -> None:
        settings = get_settings()
        self._queue_size = max(1, queue_size or settings.BROADCAST_QUEUE_SIZE)
        self._subscribers: set[asyncio.Queue[MeetingSnapshot]] = set()
        self._latest: Optional[MeetingSnapshot] = None

    @property
    def latest(self) -> Optional[MeetingSnapshot]:
        return self._latest

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue[MeetingSnapshot]:
        queue: asyncio.Queue[MeetingSnapshot] = asyncio.Queue(maxsize=self._queue_size)
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[MeetingSnapshot]) -> None:
        self._subscribers.discard(queue)

    def publish(self, snapshot: MeetingSnapshot) -> None:
        self._latest = snapshot
        for queue in self._subscribers:
            if queue.full():
                try:
                    queue.get_nowait()
                except asyncio.QueueEmpty:
                    pass
                logger.debug("Subscriber lagging; dropped oldest snapshot")
            queue.put_nowait(snapshot)
