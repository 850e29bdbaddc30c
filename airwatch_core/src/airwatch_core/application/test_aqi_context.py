from airwatch_core.application.aqi_context import AQIContext, build_aqi_context
from airwatch_core.domain.models import AQIReading


class FakeReadingStore:
    def __init__(self, reading=None):
        self.reading = reading
        self.calls = []

    def latest(self, key, kind=None):
        self.calls.append((key, kind))
        return self.reading


def test_context_falls_back_to_default_snapshot():
    store = FakeReadingStore()
    context = build_aqi_context("Nowhere", store)

    assert store.calls == [("Nowhere", AQIReading)]
    assert context.source == "default"
    assert context.location == "Nowhere"
    assert context.current_aqi == 125
    assert context.category.label == "Unhealthy for Sensitive Groups"


def test_context_uses_latest_reading_and_fills_missing_weather():
    reading = AQIReading(
        location="Test City",
        aqi=42,
        pm25=10,
        pm10=20,
        co=0.3,
        o3=40,
        no2=12,
        so2=3,
        temperature=22.5,
        source="mock",
        id="abc",
        ts=1_700_000_000.0,
    )
    context = build_aqi_context("test", FakeReadingStore(reading))

    payload = context.to_dict()
    assert payload["currentAQI"] == 42
    assert payload["location"] == "Test City"
    assert payload["weather"] == {"temperature": 22.5, "humidity": 65, "windSpeed": 12}
    assert payload["category"]["label"] == "Good"
    assert payload["source"] == "mock"
    assert payload["timestamp"].startswith("2023-11-14T22:13:20")


def test_default_context_serializes_pollutants():
    payload = AQIContext.default("Somewhere").to_dict()
    assert set(payload["pollutants"]) == {"pm25", "pm10", "co", "o3", "no2", "so2"}
