# Server-Sent Events framing for agent runs.
# Author: Shibo Li
# Date: 2025-07-05
# Version: 0.1.0

import asyncio
import contextlib
from typing import AsyncIterator, Awaitable, Callable, Optional

from shopagent.streaming.events import AgentEvent
from shopagent.utils.logger import console

DONE_FRAME = "data: [DONE]\n\n"
HEARTBEAT_FRAME = ": ping\n\n"

Emit = Callable[[AgentEvent], None]


def format_event(event: AgentEvent) -> str:
    return f"data: {event.to_json()}\n\n"


class EventStream:
    """
    A queue of SSE frames between the task running a turn and the HTTP response
    consuming it. ``close`` marks the end; ``frames`` stops after it.
    """

    def __init__(self):
        self._queue: "asyncio.Queue[Optional[str]]" = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(self, event: AgentEvent):
        self._put(format_event(event))

    def heartbeat(self):
        self._put(HEARTBEAT_FRAME)

    def _put(self, frame: Optional[str]):
        if not self._closed:
            self._queue.put_nowait(frame)

    def close(self):
        """Sends the terminal frame and ends the stream. Safe to call more than once."""
        if self._closed:
            return
        self._put(DONE_FRAME)
        self._put(None)
        self._closed = True

    async def frames(self) -> AsyncIterator[str]:
        while True:
            frame = await self._queue.get()
            if frame is None:
                return
            yield frame


async def _heartbeat(stream: EventStream, interval: float):
    while not stream.closed:
        await asyncio.sleep(interval)
        stream.heartbeat()


async def stream_run(run: Callable[[Emit], Awaitable[None]], heartbeat_interval: float) -> AsyncIterator[str]:
    """
    Runs ``run(emit)`` in its own task and yields its events as SSE frames,
    interleaved with heartbeat comments. The terminal ``[DONE]`` frame is always
    sent; if the consumer goes away, the run and the heartbeat are cancelled.
    """
    stream = EventStream()

    async def _runner():
        try:
            await run(stream.emit)
        finally:
            stream.close()

    run_task = asyncio.create_task(_runner())
    heartbeat_task = asyncio.create_task(_heartbeat(stream, heartbeat_interval))
    try:
        async for frame in stream.frames():
            yield frame
    finally:
        heartbeat_task.cancel()
        if not run_task.done():
            console.warning("Client disconnected, cancelling the agent run.")
            run_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await heartbeat_task
        try:
            with contextlib.suppress(asyncio.CancelledError):
                await run_task
        except Exception as e:
            console.error(f"Agent run ended with an unhandled error: {e!r}")
