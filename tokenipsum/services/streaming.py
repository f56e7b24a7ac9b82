"""Server-Sent Events framing and pacing for streamed mock responses."""

import asyncio
import json
from dataclasses import dataclass
from typing import AsyncGenerator, Iterable

from fastapi.responses import StreamingResponse

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@dataclass(frozen=True)
class Fragment:
    """One SSE frame. `event` is None for providers that send bare data lines."""

    data: dict | str
    event: str | None = None

    def encode(self) -> str:
        payload = self.data if isinstance(self.data, str) else json.dumps(self.data)
        if self.event:
            return f"event: {self.event}\ndata: {payload}\n\n"
        return f"data: {payload}\n\n"


DONE = Fragment("[DONE]")


async def paced(fragments: Iterable[Fragment], delay: float) -> AsyncGenerator[str, None]:
    """
    Yield encoded fragments in order, sleeping `delay` seconds before each.

    The sleep is the only suspension point; if the client goes away the
    generator is cancelled there and nothing further is produced.
    """
    for fragment in fragments:
        await asyncio.sleep(delay)
        yield fragment.encode()


def event_stream_response(fragments: Iterable[Fragment], delay: float) -> StreamingResponse:
    return StreamingResponse(
        paced(fragments, delay),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
