import logging
import threading
import uuid
from typing import Callable, List, Optional, Type

from airwatch_core.domain.errors import InvalidInput
from airwatch_core.domain.models import AQIReading, DeviceReading, Reading
from airwatch_core.domain.ports import ReadingKind, ReadingStore
from sqlalchemy import ColumnElement, func, or_, select
from sqlalchemy.orm import Session

from airwatch_server.adapters.db.sqlalchemy_models import AQIReadingORM, DeviceReadingORM
from airwatch_server.adapters.memory.store import MATCH_MODES
from airwatch_server.utils.clock import MonotonicClock

log = logging.getLogger(__name__)

_AQI_COLUMNS = (
    "location",
    "aqi",
    "pm25",
    "pm10",
    "co",
    "o3",
    "no2",
    "so2",
    "temperature",
    "humidity",
    "wind_speed",
    "source",
)
_DEVICE_COLUMNS = (
    "device_id",
    "location",
    "pm25",
    "pm10",
    "temperature",
    "humidity",
    "battery_level",
    "signal_strength",
)


class SqlAlchemyReadingStore(ReadingStore):
    """Reading store backed by the ``aqi_readings`` / ``device_readings`` tables.

    Opens one session per operation. Timestamps are still assigned here, not by
    the database, so ordering matches the in-memory store.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        match: str = "substring",
        clock: Optional[Callable[[], float]] = None,
    ):
        if match not in MATCH_MODES:
            raise InvalidInput(f"Unknown match mode {match!r}")
        self.session_factory = session_factory
        self.match = match
        self._clock = clock or MonotonicClock()
        self._lock = threading.Lock()

    # WRITE side
    def append(self, reading: Reading) -> Reading:
        if isinstance(reading, AQIReading):
            row, columns = AQIReadingORM(), _AQI_COLUMNS
        elif isinstance(reading, DeviceReading):
            row, columns = DeviceReadingORM(), _DEVICE_COLUMNS
        else:
            raise InvalidInput(f"Unsupported reading type {type(reading).__name__}")
        reading.validate()

        for name in columns:
            setattr(row, name, getattr(reading, name))

        with self._lock, self.session_factory() as session, session.begin():
            row.id = uuid.uuid4().hex
            row.ts = self._clock()
            session.add(row)
            stored = self._to_domain(row)
        return stored

    # READ side
    def latest(self, key: str, kind: ReadingKind = None) -> Optional[Reading]:
        found = self.list(key, limit=1, kind=kind)
        return found[0] if found else None

    def list(self, key: str, limit: int = 24, kind: ReadingKind = None) -> List[Reading]:
        if limit < 0:
            raise InvalidInput(f"limit must be non-negative, got {limit}")
        if limit == 0:
            return []
        rows = self._query(key, kind, newest_first=True, limit=limit)
        return rows[:limit]

    def list_by_time_range(
        self,
        key: str,
        start: float,
        end: float,
        kind: ReadingKind = None,
    ) -> List[Reading]:
        return self._query(key, kind, newest_first=False, start=start, end=end)

    # helpers
    def _key_clause(self, column, key: str) -> ColumnElement[bool]:
        needle = key.strip().lower()
        if self.match == "exact":
            return func.lower(func.trim(column)) == needle
        return func.lower(column).contains(needle, autoescape=True)

    def _query(
        self,
        key: str,
        kind: ReadingKind,
        *,
        newest_first: bool,
        limit: Optional[int] = None,
        start: Optional[float] = None,
        end: Optional[float] = None,
    ) -> List[Reading]:
        models: List[Type] = []
        if kind in (None, AQIReading):
            models.append(AQIReadingORM)
        if kind in (None, DeviceReading):
            models.append(DeviceReadingORM)

        results: List[Reading] = []
        with self.session_factory() as session:
            for model in models:
                clause = self._key_clause(model.location, key)
                if model is DeviceReadingORM:
                    clause = or_(clause, self._key_clause(model.device_id, key))
                stmt = select(model).where(clause)
                if start is not None:
                    stmt = stmt.where(model.ts >= start)
                if end is not None:
                    stmt = stmt.where(model.ts <= end)
                stmt = stmt.order_by(model.ts.desc() if newest_first else model.ts.asc())
                if limit is not None:
                    stmt = stmt.limit(limit)
                results.extend(self._to_domain(r) for r in session.scalars(stmt).all())

        results.sort(key=lambda r: r.ts, reverse=newest_first)
        return results

    @staticmethod
    def _to_domain(row) -> Reading:
        if isinstance(row, AQIReadingORM):
            values = {name: getattr(row, name) for name in _AQI_COLUMNS}
            return AQIReading(id=row.id, ts=row.ts, **values)
        values = {name: getattr(row, name) for name in _DEVICE_COLUMNS}
        return DeviceReading(id=row.id, ts=row.ts, **values)
