import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

ONLINE = "online"
WARNING = "warning"
OFFLINE = "offline"

ONLINE_WITHIN_SEC = 60.0
WARNING_WITHIN_SEC = 300.0


def device_status(last_seen: float, now: float) -> str:
    age = now - last_seen
    if age < ONLINE_WITHIN_SEC:
        return ONLINE
    if age < WARNING_WITHIN_SEC:
        return WARNING
    return OFFLINE


@dataclass
class DeviceState:
    device_id: str
    location: str
    last_seen: float
    data: Dict[str, Any] = field(default_factory=dict)


class DeviceTracker:
    """Keeps the latest ``iot_update`` per device and derives its status from age."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._lock = threading.Lock()
        self._devices: Dict[str, DeviceState] = {}

    def __call__(self, message: Dict[str, Any]) -> None:
        self.handle(message)

    def handle(self, message: Dict[str, Any]) -> Optional[DeviceState]:
        """Record an ``iot_update``; every other message type is ignored."""
        if message.get("type") != "iot_update" or not message.get("deviceId"):
            return None
        state = DeviceState(
            device_id=message["deviceId"],
            location=message.get("location", ""),
            last_seen=self._clock(),
            data=dict(message.get("data") or {}),
        )
        with self._lock:
            self._devices[state.device_id] = state
        return state

    def status(self, device_id: str) -> Optional[str]:
        with self._lock:
            state = self._devices.get(device_id)
        if state is None:
            return None
        return device_status(state.last_seen, self._clock())

    def devices(self) -> List[DeviceState]:
        with self._lock:
            return sorted(self._devices.values(), key=lambda d: d.device_id)

    def online_count(self) -> int:
        now = self._clock()
        return sum(1 for d in self.devices() if device_status(d.last_seen, now) == ONLINE)
