import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from airwatch_core.application.assistant import AirQualityAssistant
from airwatch_core.config.environments import Settings, get_settings
from airwatch_core.domain.errors import InvalidInput, UnknownCity
from airwatch_core.domain.ports import AirQualityProvider, ChatModel, ReadingStore
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from airwatch_server.adapters.api.routes import router
from airwatch_server.adapters.db.session import create_session_factory
from airwatch_server.adapters.db.store import SqlAlchemyReadingStore
from airwatch_server.adapters.memory.store import InMemoryConversationStore, InMemoryReadingStore
from airwatch_server.adapters.upstream.chat import build_chat_model
from airwatch_server.adapters.upstream.openweather import OpenWeatherClient
from airwatch_server.adapters.ws.channel import BroadcastChannel
from airwatch_server.simulation import SimulatedDeviceSource

log = logging.getLogger(__name__)


def build_store(settings: Settings) -> ReadingStore:
    if settings.STORE_BACKEND == "memory":
        return InMemoryReadingStore(match=settings.STORE_MATCH, max_readings=settings.STORE_MAX_READINGS)
    if settings.STORE_BACKEND == "sql":
        return SqlAlchemyReadingStore(create_session_factory(settings.DATABASE_URL), match=settings.STORE_MATCH)
    raise InvalidInput(f"Unknown STORE_BACKEND {settings.STORE_BACKEND!r}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    stop = asyncio.Event()
    simulation = None
    if settings.SIMULATION_ENABLED:
        source = SimulatedDeviceSource()
        simulation = asyncio.create_task(
            source.run(app.state.channel, interval=settings.SIMULATION_INTERVAL_SEC, stop=stop)
        )
    yield
    stop.set()
    if simulation is not None:
        await simulation


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": message})


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[ReadingStore] = None,
    provider: Optional[AirQualityProvider] = None,
    chat_model: Optional[ChatModel] = None,
) -> FastAPI:
    """Wire stores, upstream clients and the realtime channel into a FastAPI app."""
    settings = settings or get_settings()
    store = store if store is not None else build_store(settings)
    provider = provider or OpenWeatherClient(
        api_key=settings.OPENWEATHER_API_KEY,
        base_url=settings.OPENWEATHER_BASE_URL,
        timeout=settings.UPSTREAM_TIMEOUT_SEC,
    )
    if chat_model is None:
        chat_model = build_chat_model(
            settings.OPENAI_API_KEY,
            settings.CHAT_API_URL,
            settings.CHAT_MODEL,
            settings.UPSTREAM_TIMEOUT_SEC,
        )
    conversations = InMemoryConversationStore()

    app = FastAPI(title="AirWatch", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.provider = provider
    app.state.conversations = conversations
    app.state.assistant = AirQualityAssistant(
        store, conversations, model=chat_model, default_location=settings.DEFAULT_LOCATION
    )
    app.state.channel = BroadcastChannel(
        store, send_timeout=settings.SEND_TIMEOUT_SEC, max_pending=settings.SEND_QUEUE_MAX
    )

    @app.exception_handler(UnknownCity)
    async def unknown_city(request: Request, exc: UnknownCity):
        return _error(404, str(exc))

    @app.exception_handler(InvalidInput)
    async def invalid_input(request: Request, exc: InvalidInput):
        log.warning("Rejected %s %s: %s", request.method, request.url.path, exc)
        return _error(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ()))
        return _error(400, f"Invalid request: {where}: {first.get('msg', 'malformed body')}")

    app.include_router(router)
    return app


app = create_app()
