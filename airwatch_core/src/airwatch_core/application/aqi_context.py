"""
AQI context handed to HTTP clients and to the chat model.

The context is always well-formed: when the store has nothing for a location
a fixed default snapshot is used instead, tagged with ``source="default"``.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from airwatch_core.domain.aqi import AQICategory, classify
from airwatch_core.domain.models import AQIReading
from airwatch_core.domain.ports import ReadingStore

DEFAULT_AQI = 125
DEFAULT_POLLUTANTS = {"pm25": 35, "pm10": 68, "co": 1.2, "o3": 85, "no2": 42, "so2": 15}
DEFAULT_WEATHER = {"temperature": 28, "humidity": 65, "windSpeed": 12}


def iso_timestamp(ts: Optional[float] = None) -> str:
    if ts is None:
        return datetime.now(tz=timezone.utc).isoformat()
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


@dataclass(frozen=True)
class AQIContext:
    current_aqi: int
    location: str
    pollutants: Dict[str, float]
    weather: Dict[str, float]
    timestamp: str
    source: str
    category: AQICategory = field(init=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "category", classify(self.current_aqi))

    @classmethod
    def from_reading(cls, reading: AQIReading) -> "AQIContext":
        return cls(
            current_aqi=reading.aqi,
            location=reading.location,
            pollutants=reading.pollutants(),
            weather={
                "temperature": _or_default(reading.temperature, "temperature"),
                "humidity": _or_default(reading.humidity, "humidity"),
                "windSpeed": _or_default(reading.wind_speed, "windSpeed"),
            },
            timestamp=iso_timestamp(reading.ts),
            source=reading.source,
        )

    @classmethod
    def default(cls, location: str) -> "AQIContext":
        return cls(
            current_aqi=DEFAULT_AQI,
            location=location,
            pollutants=dict(DEFAULT_POLLUTANTS),
            weather=dict(DEFAULT_WEATHER),
            timestamp=iso_timestamp(),
            source="default",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentAQI": self.current_aqi,
            "location": self.location,
            "pollutants": dict(self.pollutants),
            "weather": dict(self.weather),
            "timestamp": self.timestamp,
            "source": self.source,
            "category": {
                "label": self.category.label,
                "severity": self.category.severity,
                "color": self.category.color,
                "recommendations": list(self.category.recommendations),
                "sensitiveGroups": self.category.sensitive_groups,
            },
        }


def _or_default(value: Optional[float], name: str) -> float:
    return DEFAULT_WEATHER[name] if value is None else value


def build_aqi_context(location: str, store: ReadingStore) -> AQIContext:
    reading = store.latest(location, kind=AQIReading)
    if reading is None:
        return AQIContext.default(location)
    return AQIContext.from_reading(reading)
