import logging
from typing import Dict, List, Optional

import requests
from airwatch_core.domain.errors import UpstreamUnavailable
from airwatch_core.domain.ports import ChatModel

log = logging.getLogger(__name__)


class OpenAIChatModel(ChatModel):
    """Chat completions over any OpenAI-compatible endpoint."""

    def __init__(
        self,
        api_key: str,
        url: str = "https://api.openai.com/v1/chat/completions",
        model: str = "gpt-4",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.url = url
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()

    def complete(self, messages: List[Dict[str, str]], max_tokens: int) -> str:
        payload = {"model": self.model, "messages": messages, "max_tokens": max_tokens}
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            resp = self.session.post(self.url, json=payload, headers=headers, timeout=self.timeout)
            resp.raise_for_status()
            content = resp.json()["choices"][0]["message"]["content"]
        except (requests.RequestException, ValueError, KeyError, IndexError, TypeError) as exc:
            raise UpstreamUnavailable(f"chat completion failed: {exc!r}") from exc
        if not content:
            raise UpstreamUnavailable("chat completion returned no content")
        return content


def build_chat_model(api_key: str, url: str, model: str, timeout: float) -> Optional[ChatModel]:
    if not api_key or api_key == "demo":
        log.warning("OpenAI API key not set, assistant will use rule-based replies")
        return None
    return OpenAIChatModel(api_key, url=url, model=model, timeout=timeout)
