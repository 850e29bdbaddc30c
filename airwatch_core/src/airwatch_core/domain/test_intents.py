import pytest

from airwatch_core.domain.intents import extract, voice_prompt


@pytest.mark.parametrize(
    "transcript",
    [
        "What is the AQI tomorrow?",
        "tomorrow what will the pollution be",
        "pollution this evening",
        "Morning smog levels?",
    ],
)
def test_time_plus_air_quality_keyword_is_forecast(transcript):
    assert extract(transcript).intent == "aqi_forecast"


def test_what_plus_air_quality_keyword_is_status():
    result = extract("What is the air quality in Whitefield?")
    assert result.intent == "aqi_status"
    assert result.is_air_quality_query is True
    assert result.entities == {"location": "whitefield"}


def test_action_phrase_is_health_advice():
    result = extract("Should I wear a mask for pollution")
    assert result.intent == "health_advice"
    assert result.is_air_quality_query is True


def test_health_advice_does_not_require_air_quality_keyword():
    result = extract("Is it safe to go for a run?")
    assert result.intent == "health_advice"
    assert result.is_air_quality_query is False


def test_location_only_is_location_intent():
    result = extract("Tell me about Koramangala")
    assert result.intent == "location_aqi"
    assert result.entities == {"location": "koramangala"}


def test_unmatched_input_falls_through_to_general_query():
    result = extract("sing me a song")
    assert result.intent == "general_query"
    assert result.entities == {}
    assert result.is_air_quality_query is False


def test_first_keyword_in_list_order_wins():
    # "whitefield" appears first in the text but "bengaluru" is earlier in the list
    result = extract("whitefield or bengaluru, which has worse aqi this evening or today")
    assert result.entities == {"location": "bengaluru", "timeframe": "today"}


def test_voice_prompt_templates():
    forecast = extract("aqi tomorrow in bangalore")
    assert voice_prompt(forecast, "x") == "What will the air quality be like tomorrow in bangalore?"

    status = extract("what is the aqi")
    assert voice_prompt(status, "x") == "What is the current air quality in Bengaluru?"

    general = extract("hello there")
    assert voice_prompt(general, "hello there") == "hello there"
