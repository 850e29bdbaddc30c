import dataclasses
import logging
import threading
import uuid
from collections import deque
from typing import Callable, Deque, List, Optional

from airwatch_core.domain.errors import InvalidInput
from airwatch_core.domain.models import (
    AQIReading,
    ChatMessage,
    DeviceReading,
    Reading,
    VoiceCommand,
)
from airwatch_core.domain.ports import ReadingKind, ReadingStore

from airwatch_server.utils.clock import MonotonicClock

log = logging.getLogger(__name__)

MATCH_MODES = ("substring", "exact")


def key_matcher(key: str, mode: str = "substring") -> Callable[[str], bool]:
    """Build a case-insensitive matcher for location / device id keys."""
    if mode not in MATCH_MODES:
        raise InvalidInput(f"Unknown match mode {mode!r}")
    needle = key.casefold().strip()
    if mode == "exact":
        return lambda value: value.casefold().strip() == needle
    return lambda value: needle in value.casefold()


def reading_keys(reading: Reading) -> List[str]:
    if isinstance(reading, DeviceReading):
        return [reading.location, reading.device_id]
    return [reading.location]


class InMemoryReadingStore(ReadingStore):
    """Process-local reading store.

    Readings are kept in insertion order, which is also timestamp order. All
    access goes through one lock so the store can be shared between the
    event loop and FastAPI's threadpool.
    """

    def __init__(
        self,
        match: str = "substring",
        max_readings: Optional[int] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        if match not in MATCH_MODES:
            raise InvalidInput(f"Unknown match mode {match!r}")
        if max_readings is not None and max_readings <= 0:
            raise InvalidInput("max_readings must be positive")
        self.match = match
        self.max_readings = max_readings
        self._clock = clock or MonotonicClock()
        self._lock = threading.Lock()
        self._readings: Deque[Reading] = deque()

    def __len__(self) -> int:
        with self._lock:
            return len(self._readings)

    def append(self, reading: Reading) -> Reading:
        if not isinstance(reading, (AQIReading, DeviceReading)):
            raise InvalidInput(f"Unsupported reading type {type(reading).__name__}")
        reading.validate()

        with self._lock:
            stored = dataclasses.replace(reading, id=uuid.uuid4().hex, ts=self._clock())
            self._readings.append(stored)
            if self.max_readings is not None and len(self._readings) > self.max_readings:
                evicted = self._readings.popleft()
                log.debug("Evicted reading %s (capacity %d)", evicted.id, self.max_readings)
        return stored

    def _matching(self, key: str, kind: ReadingKind) -> List[Reading]:
        matches = key_matcher(key, self.match)
        with self._lock:
            snapshot = list(self._readings)
        return [
            r
            for r in snapshot
            if (kind is None or isinstance(r, kind)) and any(matches(k) for k in reading_keys(r))
        ]

    def latest(self, key: str, kind: ReadingKind = None) -> Optional[Reading]:
        found = self._matching(key, kind)
        return found[-1] if found else None

    def list(self, key: str, limit: int = 24, kind: ReadingKind = None) -> List[Reading]:
        if limit < 0:
            raise InvalidInput(f"limit must be non-negative, got {limit}")
        if limit == 0:
            return []
        return self._matching(key, kind)[::-1][:limit]

    def list_by_time_range(
        self,
        key: str,
        start: float,
        end: float,
        kind: ReadingKind = None,
    ) -> List[Reading]:
        return [r for r in self._matching(key, kind) if start <= r.ts <= end]


class InMemoryConversationStore:
    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or MonotonicClock()
        self._lock = threading.Lock()
        self._messages: List[ChatMessage] = []
        self._commands: List[VoiceCommand] = []

    def add_message(self, message: ChatMessage) -> ChatMessage:
        with self._lock:
            stored = dataclasses.replace(message, id=uuid.uuid4().hex, ts=self._clock())
            self._messages.append(stored)
        return stored

    def history(self, session_id: str, limit: int = 50) -> List[ChatMessage]:
        """Last ``limit`` messages of a session, oldest first."""
        if limit <= 0:
            return []
        with self._lock:
            found = [m for m in self._messages if m.session_id == session_id]
        return found[-limit:]

    def add_voice_command(self, command: VoiceCommand) -> VoiceCommand:
        with self._lock:
            stored = dataclasses.replace(command, id=uuid.uuid4().hex, ts=self._clock())
            self._commands.append(stored)
        return stored

    def voice_history(self, session_id: str, limit: int = 20) -> List[VoiceCommand]:
        """Most recent ``limit`` voice commands of a session, newest first."""
        with self._lock:
            found = [c for c in self._commands if c.session_id == session_id]
        return found[::-1][: max(limit, 0)]
