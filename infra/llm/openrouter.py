"""
OpenRouter chat completions client (OpenAI-compatible SSE stream).

Upstream frames look like `data: {"choices": [{"delta": {"content": "..."}}]}`
and end with `data: [DONE]`. Lines that do not parse are skipped.
"""

import json
import logging
from typing import AsyncIterator, Optional, Sequence

import httpx

from academy.core.llm import LLM
from academy.errors import ConfigurationError, StreamError
from academy.tutor.events import ChatMessage

logger = logging.getLogger("academy.llm.openrouter")

OPENROUTER_API_URL = "https://openrouter.ai/api/v1/chat/completions"


def extract_delta(line: str) -> Optional[str]:
    """Content of one upstream SSE line, or None for anything without text."""
    line = line.strip()
    if not line.startswith("data:"):
        return None
    payload = line[5:].strip()
    if not payload or payload == "[DONE]":
        return None
    try:
        data = json.loads(payload)
    except json.JSONDecodeError:
        logger.warning("skipping malformed upstream chunk: %.200s", payload)
        return None
    try:
        content = data["choices"][0]["delta"].get("content")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None
    return content if isinstance(content, str) and content else None


class OpenRouterLLM(LLM):
    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        url: str = OPENROUTER_API_URL,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        referer: str = "",
        title: str = "AgentCore Academy",
        connect_timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise ConfigurationError("OpenRouter API key is not set")
        self.api_key = api_key
        self.model = model
        self.url = url
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.referer = referer
        self.title = title
        # Read timeout is left to the streamer, which knows the idle budget.
        self._timeout = httpx.Timeout(connect=connect_timeout, read=None, write=connect_timeout, pool=connect_timeout)
        self._transport = transport

    def _payload(self, system_prompt: str, messages: Sequence[ChatMessage]) -> dict:
        return {
            "model": self.model,
            "messages": [{"role": "system", "content": system_prompt}] + [m.to_wire() for m in messages],
            "max_tokens": self.max_tokens,
            "stream": True,
            "temperature": self.temperature,
        }

    def _headers(self) -> dict:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Title": self.title,
        }
        if self.referer:
            headers["HTTP-Referer"] = self.referer
        return headers

    async def stream(self, system_prompt: str, messages: Sequence[ChatMessage]) -> AsyncIterator[str]:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            async with client.stream(
                "POST", self.url, headers=self._headers(), json=self._payload(system_prompt, messages)
            ) as response:
                if response.status_code != 200:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    logger.error("OpenRouter API error status=%s body=%.500s", response.status_code, body)
                    raise StreamError(f"OpenRouter API error: {response.status_code} - {body}")
                async for line in response.aiter_lines():
                    text = extract_delta(line)
                    if text:
                        yield text
