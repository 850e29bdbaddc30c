# airwatch_server/adapters/ws/messages.py

from datetime import datetime, timezone
from typing import Annotated, Literal, Optional, Union

from airwatch_core.domain.errors import InvalidInput
from airwatch_core.domain.models import DeviceReading
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel


def now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


# ───────────── inbound ─────────────
class IngestMessage(WireModel):
    type: Literal["iot_reading"]
    device_id: str = Field(min_length=1)
    location: str = Field(min_length=1)
    pm25: Optional[float] = Field(None, ge=0)
    pm10: Optional[float] = Field(None, ge=0)
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    battery_level: Optional[float] = None
    signal_strength: Optional[float] = None

    def to_domain(self) -> DeviceReading:
        return DeviceReading(
            device_id=self.device_id,
            location=self.location,
            pm25=self.pm25,
            pm10=self.pm10,
            temperature=self.temperature,
            humidity=self.humidity,
            battery_level=self.battery_level,
            signal_strength=self.signal_strength,
        )


class SubscribeMessage(WireModel):
    type: Literal["subscribe"]
    subscription: str


InboundMessage = Annotated[Union[IngestMessage, SubscribeMessage], Field(discriminator="type")]

_inbound = TypeAdapter(InboundMessage)


def parse_inbound(raw: Union[str, bytes]) -> Union[IngestMessage, SubscribeMessage]:
    """Parse one client frame; anything else is ``InvalidInput``."""
    try:
        return _inbound.validate_json(raw)
    except ValidationError as exc:
        first = exc.errors()[0]
        where = ".".join(str(p) for p in first.get("loc", ())) or "message"
        raise InvalidInput(f"Invalid message format: {where}: {first['msg']}") from exc


# ───────────── outbound ─────────────
class DeviceReadingOut(WireModel):
    id: str
    device_id: str
    location: str
    pm25: Optional[float] = None
    pm10: Optional[float] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    battery_level: Optional[float] = None
    signal_strength: Optional[float] = None
    timestamp: str

    @classmethod
    def from_domain(cls, reading: DeviceReading) -> "DeviceReadingOut":
        return cls(
            id=reading.id,
            device_id=reading.device_id,
            location=reading.location,
            pm25=reading.pm25,
            pm10=reading.pm10,
            temperature=reading.temperature,
            humidity=reading.humidity,
            battery_level=reading.battery_level,
            signal_strength=reading.signal_strength,
            timestamp=datetime.fromtimestamp(reading.ts, tz=timezone.utc).isoformat(),
        )


class ConnectionAck(WireModel):
    type: Literal["connection"] = "connection"
    status: Literal["connected"] = "connected"
    message: str = "Connected to AirWatch IoT stream"
    timestamp: str = Field(default_factory=now_iso)


class IotUpdate(WireModel):
    type: Literal["iot_update"] = "iot_update"
    device_id: str
    location: str
    data: DeviceReadingOut
    timestamp: str = Field(default_factory=now_iso)

    @classmethod
    def from_domain(cls, reading: DeviceReading) -> "IotUpdate":
        return cls(
            device_id=reading.device_id,
            location=reading.location,
            data=DeviceReadingOut.from_domain(reading),
        )


class SubscriptionConfirmed(WireModel):
    type: Literal["subscription_confirmed"] = "subscription_confirmed"
    subscription: str
    timestamp: str = Field(default_factory=now_iso)


class ErrorMessage(WireModel):
    type: Literal["error"] = "error"
    message: str
    timestamp: str = Field(default_factory=now_iso)
