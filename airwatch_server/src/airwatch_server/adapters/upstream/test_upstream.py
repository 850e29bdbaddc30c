from unittest.mock import Mock, patch

import pytest
import requests
from airwatch_core.domain.errors import UnknownCity, UpstreamUnavailable

from airwatch_server.adapters.upstream.chat import OpenAIChatModel, build_chat_model
from airwatch_server.adapters.upstream.openweather import (
    OpenWeatherClient,
    convert_european_aqi,
    find_city,
    mock_aqi,
)

POLLUTION_PAYLOAD = {
    "coord": {"lon": 77.59, "lat": 12.97},
    "list": [
        {
            "main": {"aqi": 3},
            "components": {
                "co": 1200.0,
                "no": 0.1,
                "no2": 41.0,
                "o3": 80.0,
                "so2": 12.0,
                "pm2_5": 36.5,
                "pm10": 70.0,
                "nh3": 3.0,
            },
            "dt": 1700000000,
        }
    ],
}

WEATHER_PAYLOAD = {
    "name": "Bengaluru",
    "main": {"temp": 27.6, "humidity": 64, "pressure": 1012},
    "wind": {"speed": 3.0},
    "visibility": 6000,
    "weather": [{"main": "Haze", "description": "haze"}],
    "dt": 1700000000,
}


def _session(payload=None, error=None):
    session = Mock()
    response = Mock()
    response.json.return_value = payload
    if error is not None:
        response.raise_for_status.side_effect = error
    session.get.return_value = response
    session.post.return_value = response
    return session


# ───────────── OpenWeather ─────────────
def test_city_lookup_ignores_case_and_spaces():
    """Supported cities are matched case-insensitively with whitespace removed."""
    assert find_city("  BENGA luru").name == "Bengaluru"
    assert find_city("Test City") is None


def test_european_index_conversion():
    assert [convert_european_aqi(i) for i in (1, 2, 3, 4, 5)] == [25, 75, 125, 175, 250]
    assert convert_european_aqi(9) == 100


def test_get_aqi_transforms_upstream_payload():
    session = _session(POLLUTION_PAYLOAD)
    client = OpenWeatherClient(api_key="k", session=session)

    reading = client.get_aqi("bengaluru")

    assert reading.location == "Bengaluru"
    assert reading.aqi == 125
    assert reading.pm25 == 36.5
    assert reading.co == pytest.approx(1.2)
    assert reading.source == "openweather"
    _, kwargs = session.get.call_args
    assert kwargs["params"]["appid"] == "k"
    assert kwargs["params"]["lat"] == pytest.approx(12.9716)


def test_get_aqi_falls_back_to_mock_on_http_error():
    session = _session(error=requests.HTTPError("500"))
    client = OpenWeatherClient(api_key="k", session=session)

    reading = client.get_aqi("Delhi")
    assert reading.source == "mock"
    assert reading == mock_aqi("Delhi")


def test_get_aqi_falls_back_to_mock_on_malformed_payload():
    client = OpenWeatherClient(api_key="k", session=_session({"list": []}))
    assert client.get_aqi("Delhi").source == "mock"


def test_missing_key_never_calls_upstream():
    session = _session(POLLUTION_PAYLOAD)
    client = OpenWeatherClient(api_key="", session=session)

    reading = client.get_aqi("Mumbai")
    assert reading.source == "mock"
    session.get.assert_not_called()


def test_mock_data_is_deterministic_and_valid():
    first, second = mock_aqi("Delhi"), mock_aqi("Delhi")
    assert first == second
    first.validate()
    assert first.aqi >= 50


def test_unknown_city_raises_for_single_lookups():
    client = OpenWeatherClient()
    with pytest.raises(UnknownCity, match="Atlantis"):
        client.get_aqi("Atlantis")
    with pytest.raises(UnknownCity):
        client.get_weather("Atlantis")


def test_multi_city_keeps_order_and_mocks_unknown_names():
    client = OpenWeatherClient()
    readings = client.get_multi_city_aqi(["Delhi", "Test City"])
    assert [r.location for r in readings] == ["Delhi", "Test City"]
    assert all(r.source == "mock" for r in readings)


def test_get_weather_converts_units():
    client = OpenWeatherClient(api_key="k", session=_session(WEATHER_PAYLOAD))
    weather = client.get_weather("Bengaluru")

    assert weather["temperature"] == 28
    assert weather["windSpeed"] == 11
    assert weather["visibility"] == 6
    assert weather["condition"] == "haze"
    assert weather["state"] == "Karnataka"


def test_supported_cities_lists_ten_indian_cities():
    names = [c.name for c in OpenWeatherClient().supported_cities()]
    assert len(names) == 10
    assert "Bengaluru" in names and "Lucknow" in names


def test_default_session_is_a_requests_session():
    with patch("requests.Session") as mock_session:
        client = OpenWeatherClient(api_key="k")
    assert client.session is mock_session.return_value


# ───────────── chat model ─────────────
def test_chat_completion_returns_message_content():
    session = _session({"choices": [{"message": {"content": "Wear a mask."}}]})
    model = OpenAIChatModel("secret", model="gpt-4", session=session)

    reply = model.complete([{"role": "user", "content": "hi"}], max_tokens=200)

    assert reply == "Wear a mask."
    _, kwargs = session.post.call_args
    assert kwargs["json"]["max_tokens"] == 200
    assert kwargs["json"]["model"] == "gpt-4"
    assert kwargs["headers"]["Authorization"] == "Bearer secret"


@pytest.mark.parametrize(
    "session",
    [
        _session(error=requests.ConnectionError("down")),
        _session({"choices": []}),
        _session({"choices": [{"message": {"content": ""}}]}),
    ],
)
def test_chat_failures_raise_upstream_unavailable(session):
    model = OpenAIChatModel("secret", session=session)
    with pytest.raises(UpstreamUnavailable):
        model.complete([{"role": "user", "content": "hi"}], max_tokens=10)


def test_build_chat_model_without_key_is_none():
    assert build_chat_model("", "http://x", "gpt-4", 1.0) is None
    assert build_chat_model("demo", "http://x", "gpt-4", 1.0) is None
    assert isinstance(build_chat_model("k", "http://x", "gpt-4", 1.0), OpenAIChatModel)
