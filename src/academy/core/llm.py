from abc import ABC, abstractmethod
from typing import AsyncIterator, Sequence

from academy.tutor.events import ChatMessage


class LLM(ABC):
    """
    Defines the contract for all token-producing model providers.
    stream() is one long-lived call; chunks are yielded in arrival order.
    """

    @abstractmethod
    def stream(self, system_prompt: str, messages: Sequence[ChatMessage]) -> AsyncIterator[str]:
        raise NotImplementedError

