"""
Unit test fixtures. Use fakes; no real DB or LLM.
"""
import asyncio
from typing import AsyncIterator, Sequence

import pytest

from academy.core.llm import LLM
from academy.tutor.events import ChatMessage


class ScriptedLLM(LLM):
    """
    Yields the given chunks in order. An Exception in the script is raised at
    that point; a float sleeps that many seconds first.
    """

    def __init__(self, script):
        self.script = list(script)
        self.calls: list[tuple[str, list[ChatMessage]]] = []
        self.closed = False

    async def stream(self, system_prompt: str, messages: Sequence[ChatMessage]) -> AsyncIterator[str]:
        self.calls.append((system_prompt, list(messages)))
        try:
            for item in self.script:
                if isinstance(item, Exception):
                    raise item
                if isinstance(item, float):
                    await asyncio.sleep(item)
                    continue
                yield item
        finally:
            self.closed = True


@pytest.fixture
def scripted_llm():
    return ScriptedLLM
