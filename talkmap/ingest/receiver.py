"""
OdasDatagramProtocol: receives ODAS SST frames over UDP.

- One datagram = one JSON frame = one tick.
- Datagrams are handed to feed() unparsed; decoding happens in the pipeline consumer
  so a bad frame never stalls the event loop.
- Runs in the event loop; feed() must not block.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class OdasDatagramProtocol(asyncio.DatagramProtocol):
    """Forwards each non-empty datagram to feed(payload)."""

    def __init__(self, feed: Callable[[bytes], None]) -> None:
        self._feed = feed
        self._transport: Optional[asyncio.DatagramTransport] = None
        self.datagrams_received = 0

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self._transport = transport  # type: ignore[assignment]

    def datagram_received(self, data: bytes, addr) -> None:
        if not data:
            return
        self.datagrams_received += 1
        self._feed(data)

    def error_received(self, exc: Exception) -> None:
        logger.warning("ODAS UDP receive error: %s", exc)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        if exc is not None:
            logger.warning("ODAS UDP listener closed with error: %s", exc)
        self._transport = None


async def start_odas_listener(
    host: str,
    port: int,
    feed: Callable[[bytes], None],
) -> tuple[asyncio.DatagramTransport, OdasDatagramProtocol]:
    """Bind the UDP socket ODAS sends to. Caller closes the returned transport on shutdown."""
    loop = asyncio.get_running_loop()
    transport, protocol = await loop.create_datagram_endpoint(
        lambda: OdasDatagramProtocol(feed),
        local_addr=(host, port),
    )
    logger.info("Listening for ODAS frames on udp://%s:%d", host, port)
    return transport, protocol
