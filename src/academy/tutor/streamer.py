"""
TutorStreamer: drive one provider call and turn its chunks into StreamEvents.

Provider failures after the first byte cannot become an HTTP error (headers
are already committed), so every failure ends the stream with an ErrorEvent.
Timeouts and cancellation end it the same way. The provider iterator is always
closed on the way out, which aborts the upstream call where the provider
supports it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Optional, Sequence

from academy.core.llm import LLM
from academy.tutor.events import ChatMessage, DeltaEvent, DoneEvent, ErrorEvent, StreamEvent

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Response cancelled"

_EXHAUSTED = object()


async def _next_chunk(chunks: AsyncIterator[str]) -> Any:
    try:
        return await chunks.__anext__()
    except StopAsyncIteration:
        return _EXHAUSTED


async def _close(chunks: AsyncIterator[str]) -> None:
    aclose = getattr(chunks, "aclose", None)
    if aclose is None:
        return
    try:
        await aclose()
    except Exception:
        logger.warning("provider stream did not close cleanly", exc_info=True)


class TutorStreamer:
    def __init__(
        self,
        llm: LLM,
        *,
        idle_timeout: Optional[float] = 60.0,
        total_timeout: Optional[float] = 300.0,
    ):
        self.llm = llm
        self.idle_timeout = idle_timeout
        self.total_timeout = total_timeout

    def _wait_budget(self, deadline: Optional[float]) -> tuple[Optional[float], Optional[float]]:
        """(seconds to wait for the next chunk, configured limit that wait enforces)"""
        wait, limit = self.idle_timeout, self.idle_timeout
        if deadline is not None:
            remaining = max(0.0, deadline - asyncio.get_running_loop().time())
            if wait is None or remaining < wait:
                wait, limit = remaining, self.total_timeout
        return wait, limit

    async def stream(
        self,
        system_prompt: str,
        messages: Sequence[ChatMessage],
        cancel: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[StreamEvent]:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.total_timeout if self.total_timeout is not None else None
        cancel_wait = asyncio.ensure_future(cancel.wait()) if cancel is not None else None
        pending: Optional[asyncio.Task] = None
        delta_count = 0

        try:
            chunks = self.llm.stream(system_prompt, messages)
        except Exception as e:
            logger.exception("provider call failed to start")
            if cancel_wait is not None:
                cancel_wait.cancel()
            yield ErrorEvent(message=str(e) or type(e).__name__)
            return

        try:
            while True:
                if cancel is not None and cancel.is_set():
                    logger.info("tutor stream cancelled after %s deltas", delta_count)
                    yield ErrorEvent(message=CANCELLED_MESSAGE)
                    return
                pending = asyncio.ensure_future(_next_chunk(chunks))
                waiters = {pending} if cancel_wait is None else {pending, cancel_wait}
                timeout, limit = self._wait_budget(deadline)
                done, _ = await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)

                if pending not in done:
                    pending.cancel()
                    await asyncio.gather(pending, return_exceptions=True)
                    pending = None
                    if cancel is not None and cancel.is_set():
                        logger.info("tutor stream cancelled after %s deltas", delta_count)
                        yield ErrorEvent(message=CANCELLED_MESSAGE)
                    else:
                        logger.warning("tutor stream timed out after %s deltas limit=%s", delta_count, limit)
                        yield ErrorEvent(message=f"Tutor response timed out after {limit:g}s")
                    return

                task, pending = pending, None
                try:
                    chunk = task.result()
                except Exception as e:
                    logger.exception("provider failed mid-stream after %s deltas", delta_count)
                    yield ErrorEvent(message=str(e) or type(e).__name__)
                    return

                if chunk is _EXHAUSTED:
                    logger.info("tutor stream done deltas=%s", delta_count)
                    yield DoneEvent()
                    return
                if chunk:
                    delta_count += 1
                    yield DeltaEvent(text=str(chunk))
        finally:
            if pending is not None and not pending.done():
                pending.cancel()
                await asyncio.gather(pending, return_exceptions=True)
            if cancel_wait is not None:
                cancel_wait.cancel()
            await _close(chunks)
