import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from airwatch_core.application.aqi_context import iso_timestamp
from airwatch_core.domain.errors import InvalidInput
from airwatch_core.domain.models import AQIReading
from airwatch_core.domain.ports import ReadingStore

DEMO_ROWS = 100


@dataclass(frozen=True)
class ExportRequest:
    start_ts: float
    end_ts: float
    aqi: bool = False
    pollutants: bool = False
    weather: bool = False
    locations: Sequence[str] = field(default_factory=lambda: ("Bengaluru Central",))
    include_metadata: bool = False

    def wants_readings(self) -> bool:
        return self.aqi or self.pollutants or self.weather


def _row(reading: AQIReading, req: ExportRequest) -> Dict[str, Any]:
    record: Dict[str, Any] = {"timestamp": iso_timestamp(reading.ts), "location": reading.location}
    if req.aqi:
        record["aqi"] = reading.aqi
    if req.pollutants:
        record.update(reading.pollutants())
    if req.weather:
        record["temperature"] = reading.temperature
        record["humidity"] = reading.humidity
        record["windSpeed"] = reading.wind_speed
    if req.include_metadata:
        record["source"] = reading.source
        record["id"] = reading.id
    return record


def _demo_rows(req: ExportRequest) -> List[Dict[str, Any]]:
    location = req.locations[0] if req.locations else "Bengaluru Central"
    rng = random.Random(f"{location}:{req.start_ts}:{req.end_ts}")
    step = (req.end_ts - req.start_ts) / DEMO_ROWS

    rows = []
    for i in range(DEMO_ROWS):
        record: Dict[str, Any] = {
            "timestamp": iso_timestamp(req.start_ts + i * step),
            "location": location,
        }
        if req.aqi:
            record["aqi"] = 80 + rng.randrange(100)
        if req.pollutants:
            record["pm25"] = round(25 + rng.random() * 50, 2)
            record["pm10"] = round(45 + rng.random() * 70, 2)
            record["co"] = round(1 + rng.random() * 2, 2)
            record["o3"] = round(60 + rng.random() * 80)
            record["no2"] = round(30 + rng.random() * 40)
            record["so2"] = round(10 + rng.random() * 20)
        if req.weather:
            record["temperature"] = round(25 + rng.random() * 10, 1)
            record["humidity"] = round(50 + rng.random() * 40)
            record["windSpeed"] = round(5 + rng.random() * 15, 1)
        record["source"] = "demo"
        if req.include_metadata:
            record["id"] = f"demo-{i}"
        rows.append(record)
    return rows


def export_readings(req: ExportRequest, store: ReadingStore) -> List[Dict[str, Any]]:
    """Chronological export rows; falls back to generated demo rows when nothing matches."""
    if req.start_ts > req.end_ts:
        raise InvalidInput("dateRange.from must not be after dateRange.to")

    # overlapping keys can match the same reading more than once
    matched: Dict[Any, AQIReading] = {}
    if req.wants_readings():
        for location in req.locations:
            for reading in store.list_by_time_range(
                location, req.start_ts, req.end_ts, kind=AQIReading
            ):
                matched.setdefault(reading.id or id(reading), reading)

    ordered = sorted(matched.values(), key=lambda r: r.ts)
    rows = [_row(reading, req) for reading in ordered]

    if not rows:
        rows = _demo_rows(req)
    return rows
