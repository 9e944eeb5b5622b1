from typing import AsyncIterator, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_ollama import ChatOllama

from academy.core.llm import LLM
from academy.tutor.events import ChatMessage


def to_langchain_messages(system_prompt: str, messages: Sequence[ChatMessage]) -> list[BaseMessage]:
    out: list[BaseMessage] = []
    if system_prompt:
        out.append(SystemMessage(content=system_prompt))
    for m in messages:
        out.append(HumanMessage(content=m.content) if m.role == "user" else AIMessage(content=m.content))
    return out


class OllamaLLM(LLM):
    def __init__(
        self,
        model: str,
        temperature: float = 0.7,
        base_url: str = "http://localhost:11434",
        num_predict: int | None = None,
    ):
        self.model = model
        self._chat_llm = ChatOllama(model=model, temperature=temperature, base_url=base_url, num_predict=num_predict)

    async def stream(self, system_prompt: str, messages: Sequence[ChatMessage]) -> AsyncIterator[str]:
        # LangChain astream yields message chunks; normalize to plain text.
        async for chunk in self._chat_llm.astream(to_langchain_messages(system_prompt, messages)):
            text = getattr(chunk, "content", None)
            if isinstance(text, str):
                if text:
                    yield text
            elif text is not None:
                yield str(text)
