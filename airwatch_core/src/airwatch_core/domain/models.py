from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Union

from airwatch_core.domain.errors import InvalidInput

POLLUTANTS = ("pm25", "pm10", "co", "o3", "no2", "so2")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_optional_numbers(reading, names) -> None:
    for name in names:
        value = getattr(reading, name)
        if value is not None and not _is_number(value):
            raise InvalidInput(f"{name} must be a number, got {value!r}")


def _check_key(reading, name: str) -> None:
    value = getattr(reading, name)
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"{name} is required")


@dataclass(frozen=True)
class AQIReading:
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
    source: str = "openweather"
    # assigned by the store
    id: Optional[str] = None
    ts: Optional[float] = None

    def validate(self) -> None:
        _check_key(self, "location")
        if not isinstance(self.aqi, int) or isinstance(self.aqi, bool):
            raise InvalidInput(f"aqi must be an integer, got {self.aqi!r}")
        if self.aqi < 0:
            raise InvalidInput(f"aqi must be non-negative, got {self.aqi}")
        for name in POLLUTANTS:
            value = getattr(self, name)
            if not _is_number(value):
                raise InvalidInput(f"{name} is required and must be a number")
            if value < 0:
                raise InvalidInput(f"{name} must be non-negative, got {value}")
        _check_optional_numbers(self, ("temperature", "humidity", "wind_speed"))

    def pollutants(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in POLLUTANTS}


@dataclass(frozen=True)
class DeviceReading:
    device_id: str
    location: str
    pm25: Optional[float] = None
    pm10: Optional[float] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    battery_level: Optional[float] = None
    signal_strength: Optional[float] = None
    id: Optional[str] = None
    ts: Optional[float] = None

    def validate(self) -> None:
        _check_key(self, "device_id")
        _check_key(self, "location")
        _check_optional_numbers(
            self,
            ("pm25", "pm10", "temperature", "humidity", "battery_level", "signal_strength"),
        )


Reading = Union[AQIReading, DeviceReading]


def reading_fields(reading: Reading) -> Dict[str, Any]:
    """Field values of a reading without the store-assigned id/ts."""
    return {f.name: getattr(reading, f.name) for f in fields(reading) if f.name not in ("id", "ts")}


@dataclass(frozen=True)
class ChatMessage:
    session_id: str
    role: str  # "user" or "assistant"
    content: str
    context: Optional[Dict[str, Any]] = None
    id: Optional[str] = None
    ts: Optional[float] = None


@dataclass(frozen=True)
class VoiceCommand:
    session_id: str
    transcript: str
    intent: str
    entities: Dict[str, str] = field(default_factory=dict)
    response: Optional[str] = None
    id: Optional[str] = None
    ts: Optional[float] = None


@dataclass(frozen=True)
class City:
    name: str
    lat: float
    lon: float
    state: Optional[str] = None
