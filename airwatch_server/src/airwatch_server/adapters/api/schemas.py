# airwatch_server/adapters/api/schemas.py

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from airwatch_core.application.aqi_context import iso_timestamp
from airwatch_core.domain.models import AQIReading, ChatMessage, City
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _epoch(value: datetime) -> float:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ───────────── requests ─────────────
class CompareRequest(CamelModel):
    # checked by compare_cities so the error text matches the other 400s
    cities: Any = None


class ChatRequest(CamelModel):
    message: Optional[str] = None
    session_id: Optional[str] = None
    location: Optional[str] = None


class VoiceRequest(CamelModel):
    transcript: Optional[str] = None
    session_id: Optional[str] = None
    location: Optional[str] = None


class DateRange(CamelModel):
    from_: datetime = Field(..., alias="from")
    to: datetime

    def bounds(self) -> Tuple[float, float]:
        """Epoch seconds of both ends; naive datetimes are taken as UTC."""
        return _epoch(self.from_), _epoch(self.to)


class DataTypes(CamelModel):
    aqi: bool = False
    pollutants: bool = False
    weather: bool = False


class ExportRequestIn(CamelModel):
    format: Optional[str] = None
    date_range: Optional[DateRange] = None
    data_types: Optional[DataTypes] = None
    locations: Optional[List[str]] = None
    include_metadata: bool = False


# ───────────── responses ─────────────
class AQIReadingOut(CamelModel):
    id: Optional[str] = None
    location: str
    aqi: int
    pm25: float
    pm10: float
    co: float
    o3: float
    no2: float
    so2: float
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    wind_speed: Optional[float] = None
    source: str
    state: Optional[str] = None
    timestamp: str

    @classmethod
    def from_domain(cls, reading: AQIReading, state: Optional[str] = None) -> "AQIReadingOut":
        return cls(
            id=reading.id,
            location=reading.location,
            aqi=reading.aqi,
            pm25=reading.pm25,
            pm10=reading.pm10,
            co=reading.co,
            o3=reading.o3,
            no2=reading.no2,
            so2=reading.so2,
            temperature=reading.temperature,
            humidity=reading.humidity,
            wind_speed=reading.wind_speed,
            source=reading.source,
            state=state,
            timestamp=iso_timestamp(reading.ts),
        )


class ChatMessageOut(CamelModel):
    id: Optional[str] = None
    session_id: str
    role: str
    content: str
    context: Optional[Dict[str, Any]] = None
    timestamp: str

    @classmethod
    def from_domain(cls, message: ChatMessage) -> "ChatMessageOut":
        return cls(
            id=message.id,
            session_id=message.session_id,
            role=message.role,
            content=message.content,
            context=message.context,
            timestamp=iso_timestamp(message.ts),
        )


class CityOut(BaseModel):
    name: str
    lat: float
    lon: float
    state: Optional[str] = None

    @classmethod
    def from_domain(cls, city: City) -> "CityOut":
        return cls(name=city.name, lat=city.lat, lon=city.lon, state=city.state)
