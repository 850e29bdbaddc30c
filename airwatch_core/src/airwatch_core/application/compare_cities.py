import logging
from typing import Any, List

from airwatch_core.domain.errors import InvalidInput
from airwatch_core.domain.models import AQIReading
from airwatch_core.domain.ports import AirQualityProvider, ReadingStore

log = logging.getLogger(__name__)


def validate_city_list(cities: Any, max_cities: int) -> List[str]:
    if not cities or not isinstance(cities, list):
        raise InvalidInput("Cities array is required")
    if len(cities) > max_cities:
        raise InvalidInput(f"Maximum {max_cities} cities allowed")
    if not all(isinstance(c, str) and c.strip() for c in cities):
        raise InvalidInput("City names must be non-empty strings")
    return cities


def compare_cities(
    cities: Any,
    provider: AirQualityProvider,
    store: ReadingStore,
    max_cities: int = 10,
) -> List[AQIReading]:
    """Fetch one AQI snapshot per city and keep each in the store."""
    names = validate_city_list(cities, max_cities)
    snapshots = provider.get_multi_city_aqi(names)

    results: List[AQIReading] = []
    for snapshot in snapshots:
        try:
            results.append(store.append(snapshot))
        except InvalidInput:
            log.exception("Failed to store AQI reading for %s", snapshot.location)
            results.append(snapshot)
    return results
