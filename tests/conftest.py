import json

import pytest
from fastapi.testclient import TestClient

from tokenipsum.app import create_app
from tokenipsum.config import Config

CHAT_BODY = {
    "model": "llama-3.3-70b",
    "messages": [{"role": "user", "content": "Tell me a story"}],
    "max_tokens": 8,
}


def parse_sse(body: str) -> list[tuple[str | None, dict | str]]:
    """Split an event stream into (event name, decoded data) pairs."""
    events = []
    for frame in body.strip().split("\n\n"):
        name = None
        data = None
        for line in frame.split("\n"):
            if line.startswith("event: "):
                name = line[len("event: "):]
            elif line.startswith("data: "):
                data = line[len("data: "):]
        events.append((name, data if data == "[DONE]" else json.loads(data)))
    return events


@pytest.fixture(scope="module")
def client():
    """Create a test client on the default configuration."""
    with TestClient(create_app()) as c:
        yield c


@pytest.fixture
def make_client():
    """Build test clients for custom configurations, e.g. make_client(auth={...})."""
    clients = []

    def factory(**sections) -> TestClient:
        c = TestClient(create_app(Config(**sections)))
        c.__enter__()
        clients.append(c)
        return c

    yield factory

    for c in clients:
        c.__exit__(None, None, None)
