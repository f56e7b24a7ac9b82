"""Pieces shared by every provider response builder."""

import re
import time
from enum import Enum
from typing import Any, Protocol

from fastapi.responses import Response

from ..services.generator import ContentGenerator
from ..services.streaming import Fragment, event_stream_response

# Substrings of the last user turn that make the mock answer with a tool call
TOOL_TRIGGERS = ("weather", "search", "calculate", "what is", "find")

_EDGE_PUNCTUATION = re.compile(r"^[\W_]+|[\W_]+$")


class Provider(str, Enum):
    CHAT_COMPLETIONS = "chat_completions"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    RESPONSES = "responses"


def provider_from_path(path: str) -> Provider:
    """Which provider's error shape applies to a request path."""
    if path.startswith("/v1beta/models"):
        return Provider.GEMINI
    if path.startswith("/v1/messages"):
        return Provider.ANTHROPIC
    if path.startswith("/v1/responses"):
        return Provider.RESPONSES
    return Provider.CHAT_COMPLETIONS


class ResponseBuilder(Protocol):
    """What each provider module implements."""

    provider: Provider
    # Seconds between streamed fragments
    chunk_delay: float

    def wants_tool_call(self, request: Any) -> bool: ...

    def build(self, request: Any, gen: ContentGenerator) -> dict: ...

    def build_stream(self, request: Any, gen: ContentGenerator) -> list[Fragment]: ...


def should_call_tool(text: str | None, has_tools: bool) -> bool:
    """Answer with a tool call when tools exist and the text asks for one."""
    if not has_tools or not text:
        return False
    lower = text.lower()
    return any(trigger in lower for trigger in TOOL_TRIGGERS)


def extract_argument(text: str | None) -> str:
    """
    Pick the value passed to the tool: the last word longer than two
    characters, with surrounding punctuation removed.
    """
    if not text:
        return "unknown"
    candidates = [w for w in text.split() if len(w) > 2]
    if not candidates:
        return "unknown"
    return _EDGE_PUNCTUATION.sub("", candidates[-1])


def tool_arguments(text: str | None) -> dict[str, str]:
    return {"location": extract_argument(text)}


def join_chunks(chunks: list[str]) -> list[str]:
    """Prefix every chunk after the first with a single space."""
    return [chunk if i == 0 else f" {chunk}" for i, chunk in enumerate(chunks)]


def count_tokens(texts) -> int:
    return sum(ContentGenerator.estimate_tokens(t) for t in texts if t)


def now_unix() -> int:
    return int(time.time())


def render(
    builder: ResponseBuilder,
    request: Any,
    gen: ContentGenerator,
    stream: bool,
) -> dict | Response:
    """Build either the JSON body or the paced event stream for a request."""
    if stream:
        return event_stream_response(builder.build_stream(request, gen), builder.chunk_delay)
    return builder.build(request, gen)
