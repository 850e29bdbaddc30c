"""
Realtime broadcast channel for device readings.

Every live connection receives every ``iot_update``; subscriptions are only
acknowledged, never used for filtering. Delivery is best-effort and
at-most-once. Each connection has a bounded outbox drained by its own writer
task, so producers never wait on a peer. A connection that is not ready is
skipped; one whose send fails or times out, or whose outbox fills up, is
dropped. Nothing is retried.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Protocol, Union, runtime_checkable

from airwatch_core.application.ingest_reading import ingest_reading
from airwatch_core.domain.errors import InvalidInput
from airwatch_core.domain.models import DeviceReading
from airwatch_core.domain.ports import ReadingStore
from starlette.websockets import WebSocket, WebSocketState

from airwatch_server.adapters.ws.messages import (
    ConnectionAck,
    ErrorMessage,
    IngestMessage,
    IotUpdate,
    SubscriptionConfirmed,
    WireModel,
    parse_inbound,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class Connection(Protocol):
    """Transport handle for one live client."""

    def is_ready(self) -> bool: ...

    async def send_text(self, data: str) -> None: ...


class WebSocketConnection:
    """Adapts a Starlette ``WebSocket`` to :class:`Connection`."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    def is_ready(self) -> bool:
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def send_text(self, data: str) -> None:
        await self.websocket.send_text(data)


class _Outbox:
    """Pending frames for one connection and the task that writes them."""

    def __init__(self, conn: Connection, max_pending: int):
        self.conn = conn
        self.queue: "asyncio.Queue[str]" = asyncio.Queue(maxsize=max_pending)
        self.task: Optional["asyncio.Task[None]"] = None


class BroadcastChannel:
    def __init__(self, store: ReadingStore, send_timeout: float = 5.0, max_pending: int = 100):
        self.store = store
        self.send_timeout = send_timeout
        self.max_pending = max_pending
        self._live: Dict[Connection, _Outbox] = {}
        # serializes append + enqueue so broadcast order matches append order
        self._ingest_lock = asyncio.Lock()

    @property
    def connections(self) -> List[Connection]:
        return list(self._live)

    # lifecycle
    async def on_open(self, conn: Connection) -> None:
        outbox = _Outbox(conn, self.max_pending)
        outbox.task = asyncio.create_task(self._writer(outbox))
        self._live[conn] = outbox
        logger.info("WebSocket connection opened (%d live)", len(self._live))
        self._enqueue(conn, ConnectionAck().to_json())

    def on_close(self, conn: Connection) -> None:
        outbox = self._discard(conn)
        if outbox is not None and outbox.task is not None:
            outbox.task.cancel()

    async def on_message(self, conn: Connection, raw: Union[str, bytes]) -> None:
        try:
            message = parse_inbound(raw)
            if isinstance(message, IngestMessage):
                await self.ingest(message.to_domain())
            else:
                confirmed = SubscriptionConfirmed(subscription=message.subscription)
                self._enqueue(conn, confirmed.to_json())
        except InvalidInput as exc:
            logger.warning("Rejected WebSocket message: %s", exc)
            self._enqueue(conn, ErrorMessage(message=str(exc)).to_json())

    # fanout
    async def ingest(self, reading: DeviceReading) -> DeviceReading:
        """Store a device reading, then fan it out to every live connection.

        Returns once the update is queued for each connection; slow peers
        never hold up the caller.

        Raises:
            InvalidInput: the store rejected the reading; nothing is broadcast.
        """
        async with self._ingest_lock:
            stored = ingest_reading(reading, self.store)
            await self.broadcast(IotUpdate.from_domain(stored))
        return stored

    async def broadcast(self, message: WireModel) -> int:
        """Queue one message for all ready connections; returns how many took it."""
        text = message.to_json()
        queued = 0
        for conn in list(self._live):
            if not conn.is_ready():
                continue
            if self._enqueue(conn, text):
                queued += 1
        logger.debug("Broadcast %s to %d connection(s)", getattr(message, "type", "?"), queued)
        return queued

    async def drain(self) -> None:
        """Wait until every frame queued so far has been written or dropped."""
        await asyncio.gather(*(outbox.queue.join() for outbox in list(self._live.values())))

    def _enqueue(self, conn: Connection, text: str) -> bool:
        outbox = self._live.get(conn)
        if outbox is None:
            return False
        try:
            outbox.queue.put_nowait(text)
        except asyncio.QueueFull:
            logger.warning("Dropping WebSocket connection with %d unsent frames", outbox.queue.qsize())
            self.on_close(conn)
            return False
        return True

    async def _writer(self, outbox: _Outbox) -> None:
        while True:
            text = await outbox.queue.get()
            try:
                await asyncio.wait_for(outbox.conn.send_text(text), timeout=self.send_timeout)
            except Exception as exc:
                # a broken or stalled peer only loses its own connection
                logger.warning("Dropping WebSocket connection after failed send: %r", exc)
                self._discard(outbox.conn)
                return
            finally:
                outbox.queue.task_done()

    def _discard(self, conn: Connection) -> Optional[_Outbox]:
        outbox = self._live.pop(conn, None)
        if outbox is None:
            return None
        while not outbox.queue.empty():
            outbox.queue.get_nowait()
            outbox.queue.task_done()
        logger.info("WebSocket connection closed (%d live)", len(self._live))
        return outbox
