"""
OpenWeather air-pollution and weather client.

Without an API key, or when a request fails, deterministic mock data seeded by
the city name is returned instead (``source="mock"``).
"""

import logging
import random
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import requests
from airwatch_core.domain.errors import UnknownCity, UpstreamUnavailable
from airwatch_core.domain.models import AQIReading, City
from airwatch_core.domain.ports import AirQualityProvider

log = logging.getLogger(__name__)

INDIAN_CITIES: Dict[str, City] = {
    "bengaluru": City("Bengaluru", 12.9716, 77.5946, "Karnataka"),
    "delhi": City("Delhi", 28.6139, 77.2090, "Delhi"),
    "mumbai": City("Mumbai", 19.0760, 72.8777, "Maharashtra"),
    "kolkata": City("Kolkata", 22.5726, 88.3639, "West Bengal"),
    "chennai": City("Chennai", 13.0827, 80.2707, "Tamil Nadu"),
    "hyderabad": City("Hyderabad", 17.3850, 78.4867, "Telangana"),
    "pune": City("Pune", 18.5204, 73.8567, "Maharashtra"),
    "ahmedabad": City("Ahmedabad", 23.0225, 72.5714, "Gujarat"),
    "jaipur": City("Jaipur", 26.9124, 75.7873, "Rajasthan"),
    "lucknow": City("Lucknow", 26.8467, 80.9462, "Uttar Pradesh"),
}

# OpenWeather reports the European 1..5 index
EUROPEAN_TO_US_AQI = {1: 25, 2: 75, 3: 125, 4: 175, 5: 250}
UNKNOWN_EUROPEAN_AQI = 100

_BASE_AQI = {"Delhi": 180, "Mumbai": 110, "Bengaluru": 125}
_BASE_TEMP = {"Mumbai": 29, "Delhi": 25, "Bengaluru": 28}
_CONDITIONS = ("Clear", "Partly Cloudy", "Hazy", "Cloudy")


def find_city(name: str) -> Optional[City]:
    return INDIAN_CITIES.get("".join(name.lower().split()))


def convert_european_aqi(index: int) -> int:
    return EUROPEAN_TO_US_AQI.get(index, UNKNOWN_EUROPEAN_AQI)


def _iso(epoch: Optional[float] = None) -> str:
    if epoch is None:
        return datetime.now(tz=timezone.utc).isoformat()
    return datetime.fromtimestamp(epoch, tz=timezone.utc).isoformat()


# ───────────── mock data ─────────────
def mock_aqi(location: str) -> AQIReading:
    rng = random.Random(f"aqi:{location}")
    aqi = max(50, _BASE_AQI.get(location, 95) + rng.randint(-20, 19))
    temperature = _BASE_TEMP.get(location, 27) + rng.randint(-3, 2)
    return AQIReading(
        location=location,
        aqi=aqi,
        pm25=round(aqi * 0.3 + rng.random() * 10),
        pm10=round(aqi * 0.5 + rng.random() * 15),
        co=round(aqi * 0.01 + rng.random() * 0.5, 2),
        o3=round(aqi * 0.8 + rng.random() * 20),
        no2=round(aqi * 0.4 + rng.random() * 10),
        so2=round(aqi * 0.15 + rng.random() * 5),
        temperature=temperature,
        humidity=60 + rng.randint(0, 29),
        wind_speed=8 + rng.randint(0, 9),
        source="mock",
    )


def mock_weather(city: City) -> Dict[str, Any]:
    rng = random.Random(f"weather:{city.name}")
    return {
        "location": city.name,
        "state": city.state,
        "temperature": _BASE_TEMP.get(city.name, 27) + rng.randint(-3, 2),
        "humidity": 60 + rng.randint(0, 29),
        "windSpeed": 8 + rng.randint(0, 9),
        "visibility": 8 + rng.randint(0, 3),
        "condition": rng.choice(_CONDITIONS),
        "timestamp": _iso(),
        "source": "mock",
    }


class OpenWeatherClient(AirQualityProvider):
    def __init__(
        self,
        api_key: str = "",
        base_url: str = "https://api.openweathermap.org",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        if not self.has_key:
            log.warning("OpenWeather API key not set, serving mock data")

    @property
    def has_key(self) -> bool:
        return bool(self.api_key) and self.api_key != "demo"

    def supported_cities(self) -> List[City]:
        return list(INDIAN_CITIES.values())

    # AQI
    def get_aqi(self, city: str) -> AQIReading:
        """Current AQI snapshot for a supported city.

        Raises:
            UnknownCity: ``city`` is not one of the supported cities.
        """
        found = find_city(city)
        if found is None:
            raise UnknownCity(city)
        if not self.has_key:
            return mock_aqi(found.name)
        try:
            data = self._get("/data/2.5/air_pollution", found)
            return self._to_reading(data, found)
        except UpstreamUnavailable as exc:
            log.error("OpenWeather AQI request for %s failed: %s", found.name, exc)
            return mock_aqi(found.name)

    def get_multi_city_aqi(self, cities: Sequence[str]) -> List[AQIReading]:
        results = []
        for name in cities:
            try:
                results.append(self.get_aqi(name))
            except UnknownCity:
                log.info("No coordinates for %r, using mock snapshot", name)
                results.append(mock_aqi(name))
        return results

    # weather
    def get_weather(self, city: str) -> Dict[str, Any]:
        found = find_city(city)
        if found is None:
            raise UnknownCity(city)
        if not self.has_key:
            return mock_weather(found)
        try:
            data = self._get("/data/2.5/weather", found, units="metric")
        except UpstreamUnavailable as exc:
            log.error("OpenWeather weather request for %s failed: %s", found.name, exc)
            return mock_weather(found)
        visibility = data.get("visibility")
        weather = data.get("weather") or [{}]
        return {
            "location": found.name,
            "state": found.state,
            "temperature": round(data["main"]["temp"]),
            "humidity": data["main"]["humidity"],
            "windSpeed": round(data["wind"]["speed"] * 3.6),  # m/s -> km/h
            "visibility": round(visibility / 1000) if visibility else 10,
            "condition": weather[0].get("description", "Unknown"),
            "timestamp": _iso(data.get("dt")),
            "source": "openweather",
        }

    # helpers
    def _get(self, path: str, city: City, **params) -> Dict[str, Any]:
        params.update(lat=city.lat, lon=city.lon, appid=self.api_key)
        try:
            resp = self.session.get(f"{self.base_url}{path}", params=params, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise UpstreamUnavailable(f"OpenWeather {path}: {exc}") from exc

    @staticmethod
    def _to_reading(data: Dict[str, Any], city: City) -> AQIReading:
        try:
            entry = data["list"][0]
            components = entry["components"]
            return AQIReading(
                location=city.name,
                aqi=convert_european_aqi(entry["main"]["aqi"]),
                pm25=components["pm2_5"],
                pm10=components["pm10"],
                co=components["co"] / 1000,  # µg/m³ -> mg/m³
                o3=components["o3"],
                no2=components["no2"],
                so2=components["so2"],
                source="openweather",
            )
        except (KeyError, IndexError, TypeError) as exc:
            raise UpstreamUnavailable(f"Unexpected OpenWeather payload: {exc!r}") from exc
