"""
Token budget management for the tutor's model input.

Policy: the assembled system prompt (instructions, knowledge, lesson, learning
state) is grounding and is never cut. Conversation history is trimmed oldest
turn first until system prompt + history fit the input budget. The newest
user turn is always kept, truncated if it alone does not fit.
"""

from typing import Sequence

from academy.tutor.events import ChatMessage

# Per-message role/formatting overhead.
MESSAGE_OVERHEAD_TOKENS = 4
# The newest user turn is never cut below this, even if the system prompt alone is over budget.
MIN_NEWEST_TOKENS = 256


def estimate_tokens(text: str) -> int:
    """
    Estimate token count from text.
    Rough approximation: ~1.33 tokens per word.
    """
    if not text:
        return 0
    words = len(text.split())
    return int(words * 1.33)


def truncate_text(text: str, max_tokens: int, suffix: str = "...") -> str:
    """
    Truncate text to fit within max_tokens.
    Tries to preserve word boundaries.
    """
    if estimate_tokens(text) <= max_tokens:
        return text

    # ~3 chars per token keeps the cut conservative
    max_chars = max(0, max_tokens) * 3
    truncated = text[:max_chars]

    last_space = truncated.rfind(" ")
    if last_space > max_chars * 0.8:
        truncated = truncated[:last_space]

    return truncated + suffix


def message_tokens(message: ChatMessage) -> int:
    return estimate_tokens(message.content) + MESSAGE_OVERHEAD_TOKENS


def fit_history(
    system_prompt: str,
    messages: Sequence[ChatMessage],
    max_input_tokens: int,
) -> list[ChatMessage]:
    """
    Drop the oldest messages until the request fits max_input_tokens.
    Returns a new list; the last message is always present.
    """
    history = list(messages)
    if not history:
        return history

    budget = max_input_tokens - estimate_tokens(system_prompt)
    kept: list[ChatMessage] = []
    used = 0
    for msg in reversed(history):
        cost = message_tokens(msg)
        if kept and used + cost > budget:
            break
        kept.insert(0, msg)
        used += cost

    newest = kept[-1]
    if len(kept) == 1 and message_tokens(newest) > budget:
        room = max(budget - MESSAGE_OVERHEAD_TOKENS, MIN_NEWEST_TOKENS)
        kept[-1] = ChatMessage(role=newest.role, content=truncate_text(newest.content, room))

    # Providers expect the conversation to open with a user turn.
    while len(kept) > 1 and kept[0].role != "user":
        kept.pop(0)
    return kept
