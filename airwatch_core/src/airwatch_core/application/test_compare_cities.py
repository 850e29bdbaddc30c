import dataclasses

import pytest

from airwatch_core.application.compare_cities import compare_cities
from airwatch_core.domain.errors import InvalidInput
from airwatch_core.domain.models import AQIReading


def snapshot(city):
    return AQIReading(
        location=city, aqi=90, pm25=27, pm10=45, co=0.9, o3=72, no2=36, so2=13, source="mock"
    )


class FakeProvider:
    def __init__(self):
        self.calls = []

    def get_multi_city_aqi(self, cities):
        self.calls.append(list(cities))
        return [snapshot(c) for c in cities]


class FakeReadingStore:
    def __init__(self):
        self.appended = []

    def append(self, reading):
        stored = dataclasses.replace(reading, id=f"r{len(self.appended)}", ts=1.0)
        self.appended.append(stored)
        return stored


@pytest.mark.parametrize("cities", [None, [], "Delhi", [f"City {i}" for i in range(11)]])
def test_invalid_city_lists_are_rejected(cities):
    provider = FakeProvider()
    with pytest.raises(InvalidInput):
        compare_cities(cities, provider, FakeReadingStore())
    assert provider.calls == []


def test_blank_city_name_is_rejected():
    with pytest.raises(InvalidInput):
        compare_cities(["Delhi", " "], FakeProvider(), FakeReadingStore())


def test_each_snapshot_is_stored_and_returned():
    store = FakeReadingStore()
    result = compare_cities(["Delhi", "Mumbai"], FakeProvider(), store)

    assert [r.location for r in result] == ["Delhi", "Mumbai"]
    assert all(r.id is not None for r in result)
    assert store.appended == result


def test_ten_cities_is_the_inclusive_limit():
    cities = [f"City {i}" for i in range(10)]
    assert len(compare_cities(cities, FakeProvider(), FakeReadingStore())) == 10
