import logging

from airwatch_core.domain.models import Reading
from airwatch_core.domain.ports import ReadingStore

log = logging.getLogger(__name__)


def ingest_reading(reading: Reading, store: ReadingStore) -> Reading:
    stored = store.append(reading)
    log.debug("Stored %s %s for %s", type(stored).__name__, stored.id, stored.location)
    return stored
