"""
Chat and voice assistant flows.

Both flows build an AQI context from the reading store, ask the hosted chat
model for an answer and persist the exchange. When the model is missing or
fails (``UpstreamUnavailable``) a rule-based reply built from the same
context is returned, so the caller always gets an answer.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from airwatch_core.application.aqi_context import AQIContext, build_aqi_context
from airwatch_core.domain.aqi import primary_concerns
from airwatch_core.domain.errors import InvalidInput, UpstreamUnavailable
from airwatch_core.domain.intents import VoiceIntent, extract, voice_prompt
from airwatch_core.domain.models import ChatMessage, VoiceCommand
from airwatch_core.domain.ports import ChatModel, ConversationStore, ReadingStore

log = logging.getLogger(__name__)

HISTORY_TURNS = 10
OFF_TOPIC_REPLY = (
    "I'm specialized in air quality questions. Please ask me about AQI, "
    "pollution levels, or health recommendations."
)


@dataclass(frozen=True)
class ChatReply:
    response: str
    context: AQIContext


@dataclass(frozen=True)
class VoiceReply:
    response: str
    intent: VoiceIntent
    context: Optional[AQIContext] = None


def system_prompt(context: AQIContext) -> str:
    p = context.pollutants
    w = context.weather
    return f"""You are AirWatch AI, an expert air quality assistant for Bengaluru, India. \
You provide accurate, helpful information about air pollution, health impacts, and safety \
recommendations.

Current Air Quality Context:
- Location: {context.location}
- Current AQI: {context.current_aqi} ({context.category.label})
- PM2.5: {p["pm25"]} μg/m³
- PM10: {p["pm10"]} μg/m³
- CO: {p["co"]} mg/m³
- O₃: {p["o3"]} μg/m³
- NO₂: {p["no2"]} μg/m³
- SO₂: {p["so2"]} μg/m³
- Temperature: {w["temperature"]}°C
- Humidity: {w["humidity"]}%
- Wind Speed: {w["windSpeed"]} km/h
- Last Updated: {context.timestamp}

AQI Categories:
- 0-50: Good (Green)
- 51-100: Moderate (Yellow)
- 101-150: Unhealthy for Sensitive Groups (Orange)
- 151-200: Unhealthy (Red)
- 201-300: Very Unhealthy (Purple)
- 301+: Hazardous (Maroon)

Guidelines:
1. Provide specific, actionable advice based on current conditions
2. Explain health impacts clearly for children, elderly and people with respiratory conditions
3. Give timing recommendations when useful
4. Suggest protective measures when needed (masks, indoor activities, air purifiers)
5. For prediction questions, explain that you're providing estimates based on patterns

Avoid medical diagnoses, overly technical jargon and speculation."""


def voice_system_prompt(context: AQIContext) -> str:
    concerns = primary_concerns(context.pollutants) or ["No major concerns"]
    return (
        "You are AirWatch AI voice assistant. Provide concise, spoken responses about air "
        "quality in Bengaluru. Keep responses under 100 words and conversational.\n\n"
        f"Current Context:\n- AQI: {context.current_aqi} ({context.category.label})\n"
        f"- Location: {context.location}\n- Primary concern: {', '.join(concerns)}\n\n"
        "Format for voice: Short, clear sentences."
    )


def mock_chat_response(message: str, context: AQIContext) -> str:
    text = message.lower()
    aqi = context.current_aqi
    label = context.category.label

    if "aqi" in text or "air quality" in text:
        return (
            f"The current AQI in {context.location} is {aqi}, which is considered {label}. "
            f"{context.category.advice}"
        )
    if "safe" in text or "outside" in text or "exercise" in text:
        if aqi <= 100:
            return (
                f"With an AQI of {aqi} ({label}), it's generally safe for outdoor activities. "
                "However, sensitive individuals should still be cautious."
            )
        if aqi <= 150:
            return (
                f"The AQI is {aqi} ({label}). Sensitive groups should limit outdoor activities. "
                "Consider wearing a mask if you must go outside."
            )
        return (
            f"The AQI is {aqi} ({label}). I recommend staying indoors and avoiding outdoor "
            "exercise. If you must go outside, wear an N95 mask."
        )
    if "mask" in text:
        if aqi > 100:
            return (
                "Yes, I recommend wearing an N95 mask when going outside. "
                f"The current AQI of {aqi} indicates {label} air quality."
            )
        return (
            f"With the current AQI of {aqi} ({label}), a mask isn't strictly necessary, "
            "but sensitive individuals may still benefit from wearing one."
        )
    if "weather" in text or "temperature" in text:
        w = context.weather
        return (
            f"Current weather in {context.location}: {w['temperature']}°C, "
            f"{w['humidity']}% humidity, wind speed {w['windSpeed']} km/h. "
            f"The AQI is {aqi} ({label})."
        )
    return (
        f"I'm here to help with air quality questions for {context.location}. "
        f"The current AQI is {aqi} ({label}). You can ask me about safety recommendations, "
        "pollution levels, or health advice."
    )


def mock_voice_response(prompt: str, context: AQIContext) -> str:
    text = prompt.lower()
    aqi = context.current_aqi
    label = context.category.label

    if "aqi" in text or "air quality" in text:
        return f"The AQI is {aqi}, which is {label}."
    if "safe" in text or "outside" in text:
        if aqi <= 100:
            return f"It's generally safe to go outside with an AQI of {aqi}."
        return f"With an AQI of {aqi}, I recommend limiting outdoor activities."
    if "mask" in text:
        if aqi > 100:
            return f"Yes, wear a mask. The AQI is {aqi}."
        return f"A mask isn't necessary right now. AQI is {aqi}."
    return f"The current AQI is {aqi}, which is {label}. How can I help you?"


class AirQualityAssistant:
    def __init__(
        self,
        readings: ReadingStore,
        conversations: ConversationStore,
        model: Optional[ChatModel] = None,
        default_location: str = "Bengaluru Central",
    ):
        self.readings = readings
        self.conversations = conversations
        self.model = model
        self.default_location = default_location

    def _ask(self, messages: List[Dict[str, str]], max_tokens: int) -> Optional[str]:
        if self.model is None:
            return None
        try:
            return self.model.complete(messages, max_tokens=max_tokens)
        except UpstreamUnavailable as exc:
            log.warning("Chat model unavailable, using rule-based reply: %s", exc)
            return None

    def chat(self, message: str, session_id: str, location: Optional[str] = None) -> ChatReply:
        if not message or not session_id:
            raise InvalidInput("Message and sessionId are required")

        context = build_aqi_context(location or self.default_location, self.readings)
        history = self.conversations.history(session_id, limit=HISTORY_TURNS)

        messages = [{"role": "system", "content": system_prompt(context)}]
        messages += [{"role": m.role, "content": m.content} for m in history]
        messages.append({"role": "user", "content": message})

        response = self._ask(messages, max_tokens=1000) or mock_chat_response(message, context)

        stored_context = context.to_dict()
        self.conversations.add_message(
            ChatMessage(session_id=session_id, role="user", content=message, context=stored_context)
        )
        self.conversations.add_message(
            ChatMessage(
                session_id=session_id, role="assistant", content=response, context=stored_context
            )
        )
        return ChatReply(response=response, context=context)

    def voice(
        self, transcript: str, session_id: str, location: Optional[str] = None
    ) -> VoiceReply:
        if not transcript or not session_id:
            raise InvalidInput("Transcript and sessionId are required")

        intent = extract(transcript)
        if not intent.is_air_quality_query:
            return VoiceReply(response=OFF_TOPIC_REPLY, intent=intent)

        prompt = voice_prompt(intent, transcript)
        where = location or intent.entities.get("location") or self.default_location
        context = build_aqi_context(where, self.readings)

        messages = [
            {"role": "system", "content": voice_system_prompt(context)},
            {"role": "user", "content": prompt},
        ]
        response = self._ask(messages, max_tokens=200) or mock_voice_response(prompt, context)

        self.conversations.add_voice_command(
            VoiceCommand(
                session_id=session_id,
                transcript=transcript,
                intent=intent.intent,
                entities=dict(intent.entities),
                response=response,
            )
        )
        return VoiceReply(response=response, intent=intent, context=context)
