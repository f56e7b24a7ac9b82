"""
Tests for SSE framing and pacing.

Run with: pytest tests/test_streaming.py -v
"""

import asyncio
import time

import pytest

from tokenipsum.services.streaming import DONE, Fragment, event_stream_response, paced


async def collect(fragments, delay):
    return [frame async for frame in paced(fragments, delay)]


class TestFraming:
    """Test how fragments are written on the wire."""

    def test_named_event(self):
        frame = Fragment({"type": "ping"}, event="ping").encode()
        assert frame == 'event: ping\ndata: {"type": "ping"}\n\n'

    def test_bare_data(self):
        assert Fragment({"a": 1}).encode() == 'data: {"a": 1}\n\n'

    def test_done_sentinel(self):
        assert DONE.encode() == "data: [DONE]\n\n"


class TestPacing:
    """Test ordering and delays of paced streams."""

    def test_order_preserved(self):
        fragments = [Fragment({"n": i}) for i in range(5)] + [DONE]
        frames = asyncio.run(collect(fragments, 0))
        assert frames == [f.encode() for f in fragments]

    def test_sleeps_before_every_fragment(self):
        fragments = [Fragment({"n": i}) for i in range(4)]
        start = time.perf_counter()
        asyncio.run(collect(fragments, 0.02))
        assert time.perf_counter() - start >= 4 * 0.02

    def test_empty_list(self):
        assert asyncio.run(collect([], 0.01)) == []

    def test_stops_when_closed(self):
        """A client going away closes the generator; nothing more is produced."""

        async def run():
            stream = paced([Fragment({"n": i}) for i in range(10)], 0)
            first = await stream.__anext__()
            await stream.aclose()
            rest = [frame async for frame in stream]
            return first, rest

        first, rest = asyncio.run(run())
        assert first == 'data: {"n": 0}\n\n'
        assert rest == []

    def test_response_headers(self):
        response = event_stream_response([DONE], 0)
        assert response.media_type == "text/event-stream"
        assert response.headers["cache-control"] == "no-cache"
        assert response.headers["connection"] == "keep-alive"
        assert response.headers["x-accel-buffering"] == "no"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
