from typing import List, Optional

from airwatch_core.domain.errors import InvalidInput
from airwatch_core.domain.models import AQIReading, Reading
from airwatch_core.domain.ports import ReadingKind, ReadingStore


def get_recent_readings(
    location: str,
    limit: int,
    store: ReadingStore,
    kind: ReadingKind = AQIReading,
) -> List[Reading]:
    if limit < 0:
        raise InvalidInput(f"limit must be non-negative, got {limit}")
    return store.list(location, limit=limit, kind=kind)


def get_readings_in_range(
    location: str,
    start_ts: float,
    end_ts: float,
    store: ReadingStore,
    kind: ReadingKind = AQIReading,
) -> List[Reading]:
    if start_ts > end_ts:
        raise InvalidInput("start of the range must not be after its end")
    return store.list_by_time_range(location, start_ts, end_ts, kind=kind)


def get_latest_reading(
    location: str, store: ReadingStore, kind: ReadingKind = AQIReading
) -> Optional[Reading]:
    return store.latest(location, kind=kind)
