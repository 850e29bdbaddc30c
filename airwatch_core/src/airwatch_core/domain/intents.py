from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

AIR_QUALITY_KEYWORDS = ("aqi", "air quality", "pollution", "pm2.5", "pm10", "ozone", "smog")
LOCATION_KEYWORDS = ("bengaluru", "bangalore", "whitefield", "koramangala", "electronic city")
TIME_KEYWORDS = ("today", "tomorrow", "tonight", "morning", "evening", "afternoon")
ACTION_KEYWORDS = ("should i", "can i", "is it safe", "wear mask", "go outside", "exercise")

AQI_STATUS = "aqi_status"
AQI_FORECAST = "aqi_forecast"
HEALTH_ADVICE = "health_advice"
LOCATION_AQI = "location_aqi"
GENERAL_QUERY = "general_query"


@dataclass(frozen=True)
class VoiceIntent:
    intent: str
    entities: Dict[str, str] = field(default_factory=dict)
    is_air_quality_query: bool = False


def _first_match(text: str, keywords: Sequence[str]) -> Optional[str]:
    # list order decides, not position in the transcript
    for keyword in keywords:
        if keyword in text:
            return keyword
    return None


def extract(transcript: str) -> VoiceIntent:
    """Classify a spoken/typed request into a coarse intent plus entities."""
    text = transcript.casefold()

    is_aq = _first_match(text, AIR_QUALITY_KEYWORDS) is not None
    location = _first_match(text, LOCATION_KEYWORDS)
    timeframe = _first_match(text, TIME_KEYWORDS)
    action = _first_match(text, ACTION_KEYWORDS)

    if timeframe and is_aq:
        intent = AQI_FORECAST
    elif "what" in text and is_aq:
        intent = AQI_STATUS
    elif action:
        intent = HEALTH_ADVICE
    elif location:
        intent = LOCATION_AQI
    else:
        intent = GENERAL_QUERY

    entities: Dict[str, str] = {}
    if location:
        entities["location"] = location
    if timeframe:
        entities["timeframe"] = timeframe

    return VoiceIntent(intent=intent, entities=entities, is_air_quality_query=is_aq)


def voice_prompt(intent: VoiceIntent, transcript: str) -> str:
    """Rewrite a request into the short prompt sent to the voice model."""
    location = intent.entities.get("location", "Bengaluru")
    timeframe = intent.entities.get("timeframe", "now")

    if intent.intent == AQI_STATUS:
        return f"What is the current air quality in {location}?"
    if intent.intent == AQI_FORECAST:
        return f"What will the air quality be like {timeframe} in {location}?"
    if intent.intent == HEALTH_ADVICE:
        return (
            f"Is it safe to go outside {timeframe} given the current air quality in {location}?"
        )
    if intent.intent == LOCATION_AQI:
        return f"How is the air quality in {location} right now?"
    return transcript
