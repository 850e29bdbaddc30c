import asyncio
import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from airwatch_core.domain.models import DeviceReading

from airwatch_server.adapters.ws.channel import BroadcastChannel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulatedDevice:
    device_id: str
    location: str


DEVICES: Tuple[SimulatedDevice, ...] = (
    SimulatedDevice("iot-bengaluru-001", "Bengaluru Central"),
    SimulatedDevice("iot-bengaluru-002", "Whitefield"),
    SimulatedDevice("iot-bengaluru-003", "Electronic City"),
)


class SimulatedDeviceSource:
    """Synthesizes device readings and feeds them through the channel."""

    def __init__(
        self,
        devices: Tuple[SimulatedDevice, ...] = DEVICES,
        rng: Optional[random.Random] = None,
    ):
        self.devices = devices
        self._rng = rng or random.Random()

    def make_reading(self, device: SimulatedDevice) -> DeviceReading:
        rng = self._rng
        return DeviceReading(
            device_id=device.device_id,
            location=device.location,
            pm25=round(rng.uniform(25, 75), 1),
            pm10=round(rng.uniform(45, 115), 1),
            temperature=round(rng.uniform(25, 33), 1),
            humidity=round(rng.uniform(55, 80), 1),
            battery_level=round(rng.uniform(70, 100), 1),
            signal_strength=round(rng.uniform(60, 100), 1),
        )

    async def tick(self, channel: BroadcastChannel) -> List[DeviceReading]:
        """One round: a reading per device. A failing device does not stop the others."""
        stored = []
        for device in self.devices:
            try:
                stored.append(await channel.ingest(self.make_reading(device)))
            except Exception:
                logger.exception("Simulated reading for %s failed", device.device_id)
        return stored

    async def run(
        self,
        channel: BroadcastChannel,
        interval: float = 30.0,
        stop: Optional[asyncio.Event] = None,
    ) -> None:
        stop = stop or asyncio.Event()
        logger.info("Starting device simulation every %.1fs for %d devices", interval, len(self.devices))
        while not stop.is_set():
            readings = await self.tick(channel)
            logger.debug("Simulated %d device readings", len(readings))
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
        logger.info("Device simulation stopped")
