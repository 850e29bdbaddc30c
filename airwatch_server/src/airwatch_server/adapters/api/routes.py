# airwatch_server/adapters/api/routes.py

import logging

from airwatch_core.application.aqi_context import build_aqi_context, iso_timestamp
from airwatch_core.application.assistant import AirQualityAssistant
from airwatch_core.application.compare_cities import compare_cities
from airwatch_core.application.export_data import ExportRequest, export_readings
from airwatch_core.application.query_readings import get_recent_readings
from airwatch_core.config.environments import Settings
from airwatch_core.domain.errors import InvalidInput
from airwatch_core.domain.ports import AirQualityProvider, ConversationStore, ReadingStore
from fastapi import APIRouter, Depends, Request, WebSocket

from airwatch_server.adapters.api.schemas import (
    AQIReadingOut,
    ChatMessageOut,
    ChatRequest,
    CityOut,
    CompareRequest,
    ExportRequestIn,
    VoiceRequest,
)
from airwatch_server.adapters.ws.channel import BroadcastChannel, WebSocketConnection

log = logging.getLogger(__name__)

router = APIRouter()


# ───────────── dependencies ─────────────
def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> ReadingStore:
    return request.app.state.store


def get_conversations(request: Request) -> ConversationStore:
    return request.app.state.conversations


def get_provider(request: Request) -> AirQualityProvider:
    return request.app.state.provider


def get_assistant(request: Request) -> AirQualityAssistant:
    return request.app.state.assistant


# ───────────── health ─────────────
@router.get("/ping")
def ping():
    return {"status": "ok"}


# ───────────── AQI ─────────────
@router.get("/api/aqi")
def default_aqi(
    store: ReadingStore = Depends(get_store),
    settings: Settings = Depends(get_settings_dep),
):
    return build_aqi_context(settings.DEFAULT_LOCATION, store).to_dict()


@router.get("/api/aqi/{location}")
def current_aqi(location: str, store: ReadingStore = Depends(get_store)):
    return build_aqi_context(location, store).to_dict()


@router.get("/api/aqi/{location}/history")
def aqi_history(location: str, limit: int = 24, store: ReadingStore = Depends(get_store)):
    readings = get_recent_readings(location, limit, store)
    return {"readings": [AQIReadingOut.from_domain(r).model_dump(by_alias=True) for r in readings]}


# ───────────── cities / weather ─────────────
@router.post("/api/cities/compare")
def compare(
    req: CompareRequest,
    store: ReadingStore = Depends(get_store),
    provider: AirQualityProvider = Depends(get_provider),
    settings: Settings = Depends(get_settings_dep),
):
    snapshots = compare_cities(req.cities, provider, store, max_cities=settings.MAX_COMPARE_CITIES)
    states = {c.name: c.state for c in provider.supported_cities()}
    cities = [
        AQIReadingOut.from_domain(s, state=states.get(s.location)).model_dump(by_alias=True)
        for s in snapshots
    ]
    return {"cities": cities, "timestamp": iso_timestamp(), "total": len(cities)}


@router.get("/api/cities/supported")
def supported_cities(provider: AirQualityProvider = Depends(get_provider)):
    return {"cities": [CityOut.from_domain(c).model_dump() for c in provider.supported_cities()]}


@router.get("/api/weather/{location}")
def weather(location: str, provider: AirQualityProvider = Depends(get_provider)):
    return provider.get_weather(location)


# ───────────── assistant ─────────────
@router.post("/api/chat")
def chat(req: ChatRequest, assistant: AirQualityAssistant = Depends(get_assistant)):
    reply = assistant.chat(req.message, req.session_id, location=req.location)
    return {
        "response": reply.response,
        "context": reply.context.to_dict(),
        "timestamp": iso_timestamp(),
    }


@router.get("/api/chat/{session_id}")
def chat_history(
    session_id: str,
    limit: int = 50,
    conversations: ConversationStore = Depends(get_conversations),
):
    if limit < 0:
        raise InvalidInput(f"limit must be non-negative, got {limit}")
    history = conversations.history(session_id, limit=limit)
    return {"history": [ChatMessageOut.from_domain(m).model_dump(by_alias=True) for m in history]}


@router.post("/api/voice")
def voice(req: VoiceRequest, assistant: AirQualityAssistant = Depends(get_assistant)):
    reply = assistant.voice(req.transcript, req.session_id, location=req.location)
    body = {
        "response": reply.response,
        "intent": reply.intent.intent,
        "entities": dict(reply.intent.entities),
    }
    if reply.context is not None:
        body["context"] = reply.context.to_dict()
        body["timestamp"] = iso_timestamp()
    return body


# ───────────── export ─────────────
@router.post("/api/export")
def export(req: ExportRequestIn, store: ReadingStore = Depends(get_store)):
    if not req.format or req.date_range is None or req.data_types is None:
        raise InvalidInput("Missing required export parameters")

    start_ts, end_ts = req.date_range.bounds()
    export_req = ExportRequest(
        start_ts=start_ts,
        end_ts=end_ts,
        aqi=req.data_types.aqi,
        pollutants=req.data_types.pollutants,
        weather=req.data_types.weather,
        locations=tuple(req.locations or ("Bengaluru Central",)),
        include_metadata=req.include_metadata,
    )
    rows = export_readings(export_req, store)
    return {
        "data": rows,
        "totalRecords": len(rows),
        "format": req.format,
        "timestamp": iso_timestamp(),
    }


# ───────────── realtime ─────────────
@router.websocket("/ws")
async def realtime(websocket: WebSocket):
    channel: BroadcastChannel = websocket.app.state.channel
    await websocket.accept()
    conn = WebSocketConnection(websocket)
    await channel.on_open(conn)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                log.debug("WebSocket client disconnected (code %s)", message.get("code"))
                break
            # binary frames carry the same JSON as text frames
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes") or b""
            await channel.on_message(conn, raw)
    finally:
        channel.on_close(conn)
