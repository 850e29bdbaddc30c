from typing import Any, Dict, List, Optional, Protocol, Sequence, Type

from airwatch_core.domain.models import (
    AQIReading,
    ChatMessage,
    City,
    Reading,
    VoiceCommand,
)

ReadingKind = Optional[Type[Reading]]


class ReadingStore(Protocol):
    def append(self, reading: Reading) -> Reading: ...

    def latest(self, key: str, kind: ReadingKind = None) -> Optional[Reading]: ...

    def list(self, key: str, limit: int = 24, kind: ReadingKind = None) -> List[Reading]: ...

    def list_by_time_range(
        self,
        key: str,
        start: float,
        end: float,
        kind: ReadingKind = None,
    ) -> List[Reading]: ...


class ConversationStore(Protocol):
    def add_message(self, message: ChatMessage) -> ChatMessage: ...

    def history(self, session_id: str, limit: int = 50) -> List[ChatMessage]: ...

    def add_voice_command(self, command: VoiceCommand) -> VoiceCommand: ...

    def voice_history(self, session_id: str, limit: int = 20) -> List[VoiceCommand]: ...


class AirQualityProvider(Protocol):
    def get_aqi(self, city: str) -> AQIReading: ...

    def get_multi_city_aqi(self, cities: Sequence[str]) -> List[AQIReading]: ...

    def get_weather(self, city: str) -> Dict[str, Any]: ...

    def supported_cities(self) -> List[City]: ...


class ChatModel(Protocol):
    def complete(self, messages: List[Dict[str, str]], max_tokens: int) -> str: ...
