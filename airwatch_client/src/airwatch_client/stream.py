import json
import logging
import threading
from typing import Any, Callable, Dict, Optional, Protocol, runtime_checkable

from websockets.exceptions import ConnectionClosed, InvalidHandshake
from websockets.sync.client import connect

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], None]


@runtime_checkable
class ReconnectPolicy(Protocol):
    """Protocol for reconnect policy implementations."""

    def next_delay(self, *, success: bool) -> float: ...


class FixedDelay(ReconnectPolicy):
    """Waits the same delay after every lost or failed connection."""

    def __init__(self, delay: float = 5.0):
        self._delay = delay

    def next_delay(self, *, success: bool) -> float:
        return self._delay


class StreamClient(threading.Thread):
    """Thread that keeps a connection to the realtime channel and dispatches messages.

    Every decoded JSON message is passed to ``handler``. When the connection
    closes or cannot be opened, a brand-new connection is attempted after the
    policy's delay. ``max_attempts=None`` retries forever.
    """

    def __init__(
        self,
        url: str,
        handler: Handler,
        policy: Optional[ReconnectPolicy] = None,
        max_attempts: Optional[int] = None,
        connector: Callable[..., Any] = connect,
    ):
        super().__init__(name="stream-client", daemon=True)
        self.url = url
        self._handler = handler
        self._policy = policy or FixedDelay()
        self._max_attempts = max_attempts
        self._connect = connector
        self._stop_event = threading.Event()
        self._ws = None
        self._lock = threading.Lock()
        self.attempts = 0

    def stop(self) -> None:
        """Signal the client to stop and close the live connection."""
        logger.info("Stopping stream client")
        self._stop_event.set()
        with self._lock:
            if self._ws is not None:
                self._ws.close()

    def send(self, message: Dict[str, Any]) -> bool:
        """Send one JSON message on the live connection; False when not connected."""
        with self._lock:
            ws = self._ws
        if ws is None:
            return False
        try:
            ws.send(json.dumps(message))
            return True
        except ConnectionClosed:
            logger.warning("Send failed, connection closed")
            return False

    def run(self) -> None:
        logger.info("Starting stream client for %s", self.url)
        while not self._stop_event.is_set():
            if self._max_attempts is not None and self.attempts >= self._max_attempts:
                logger.warning("Giving up after %d connection attempts", self.attempts)
                break
            self.attempts += 1
            ok = self._session()
            if self._stop_event.is_set():
                break
            delay = self._policy.next_delay(success=ok)
            logger.info("Reconnecting in %.1f seconds", delay)
            self._stop_event.wait(delay)
        logger.info("Stream client stopped")

    def _session(self) -> bool:
        try:
            ws = self._connect(self.url)
        except (OSError, InvalidHandshake) as exc:
            logger.warning("Connection to %s failed: %s", self.url, exc)
            return False

        with self._lock:
            self._ws = ws
        logger.info("Connected to %s", self.url)
        try:
            for raw in ws:
                self._dispatch(raw)
        except ConnectionClosed as exc:
            logger.warning("Connection closed: %s", exc)
        finally:
            with self._lock:
                self._ws = None
            ws.close()
        return True

    def _dispatch(self, raw) -> None:
        try:
            message = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring non-JSON frame: %r", raw)
            return
        try:
            self._handler(message)
        except Exception:
            logger.exception("Handler failed for message %r", message)
