"""Anthropic Messages API (/v1/messages), including extended thinking."""

import json

from ..models.schemas import (
    AnthropicMessage,
    MessagesRequest,
    TextBlock,
    ThinkingBlock,
)
from ..services.generator import ContentGenerator
from ..services.streaming import Fragment
from .base import (
    Provider,
    count_tokens,
    join_chunks,
    should_call_tool,
    tool_arguments,
)

# Flat input cost charged for tool_use / tool_result / image blocks
NON_TEXT_BLOCK_TOKENS = 10
# Cap on streamed words for text and thinking blocks
MAX_STREAM_TOKENS = 100


def _first_text(message: AnthropicMessage) -> str | None:
    if isinstance(message.content, str):
        return message.content
    for block in message.content:
        if isinstance(block, TextBlock):
            return block.text
    return None


def _message_tokens(message: AnthropicMessage) -> int:
    if isinstance(message.content, str):
        return ContentGenerator.estimate_tokens(message.content)

    total = 0
    for block in message.content:
        if isinstance(block, TextBlock):
            total += ContentGenerator.estimate_tokens(block.text)
        elif isinstance(block, ThinkingBlock):
            total += ContentGenerator.estimate_tokens(block.thinking)
        else:
            total += NON_TEXT_BLOCK_TOKENS
    return total


def _event(name: str, data: dict) -> Fragment:
    return Fragment({"type": name, **data}, event=name)


class AnthropicBuilder:
    provider = Provider.ANTHROPIC
    chunk_delay = 0.015
    tool_call_tokens = 50

    def last_user_text(self, request: MessagesRequest) -> str | None:
        for message in reversed(request.messages):
            if message.role == "user":
                return _first_text(message)
        return None

    def wants_tool_call(self, request: MessagesRequest) -> bool:
        return should_call_tool(self.last_user_text(request), bool(request.tools))

    def wants_thinking(self, request: MessagesRequest) -> bool:
        return request.thinking is not None and request.thinking.type == "enabled"

    def count_input_tokens(self, request: MessagesRequest) -> int:
        if isinstance(request.system, str):
            system_tokens = ContentGenerator.estimate_tokens(request.system)
        elif request.system:
            system_tokens = count_tokens(block.text for block in request.system)
        else:
            system_tokens = 0

        return system_tokens + sum(_message_tokens(m) for m in request.messages)

    def _usage(self, input_tokens: int, output_tokens: int) -> dict:
        return {
            "input_tokens": input_tokens,
            "cache_creation_input_tokens": 0,
            "cache_read_input_tokens": 0,
            "output_tokens": output_tokens,
        }

    def _tool_use(self, request: MessagesRequest, gen: ContentGenerator) -> dict:
        return {
            "type": "tool_use",
            "id": f"toolu_{gen.tool_call_id()}",
            "name": request.tools[0].name,
            "input": tool_arguments(self.last_user_text(request)),
        }

    def build(self, request: MessagesRequest, gen: ContentGenerator) -> dict:
        message_id = f"msg_{gen.tool_call_id()}"
        input_tokens = self.count_input_tokens(request)
        content = []
        output_tokens = 0

        if self.wants_thinking(request):
            thinking = gen.paragraph()
            output_tokens += ContentGenerator.estimate_tokens(thinking)
            content.append({
                "type": "thinking",
                "thinking": thinking,
                "signature": gen.signature(),
            })

        if self.wants_tool_call(request):
            content.append(self._tool_use(request, gen))
            output_tokens += self.tool_call_tokens
            stop_reason = "tool_use"
        else:
            text = gen.paragraph()
            output_tokens += ContentGenerator.estimate_tokens(text)
            content.append({"type": "text", "text": text})
            stop_reason = "end_turn"

        return {
            "id": message_id,
            "type": "message",
            "role": "assistant",
            "model": request.model,
            "content": content,
            "stop_reason": stop_reason,
            "stop_sequence": None,
            "usage": self._usage(input_tokens, output_tokens),
        }

    def build_stream(self, request: MessagesRequest, gen: ContentGenerator) -> list[Fragment]:
        message_id = f"msg_{gen.tool_call_id()}"
        input_tokens = self.count_input_tokens(request)
        output_tokens = 0
        index = 0

        fragments = [
            _event("message_start", {
                "message": {
                    "id": message_id,
                    "type": "message",
                    "role": "assistant",
                    "model": request.model,
                    "content": [],
                    "stop_reason": None,
                    "stop_sequence": None,
                    "usage": self._usage(input_tokens, 1),
                }
            })
        ]

        if self.wants_thinking(request):
            budget = min(request.thinking.budget_tokens, MAX_STREAM_TOKENS)
            deltas = join_chunks(gen.stream_chunks(budget))
            output_tokens += count_tokens(deltas)

            fragments.append(_event("content_block_start", {
                "index": index,
                "content_block": {"type": "thinking", "thinking": "", "signature": ""},
            }))
            for text in deltas:
                fragments.append(_event("content_block_delta", {
                    "index": index,
                    "delta": {"type": "thinking_delta", "thinking": text},
                }))
            fragments.append(_event("content_block_delta", {
                "index": index,
                "delta": {"type": "signature_delta", "signature": gen.signature()},
            }))
            fragments.append(_event("content_block_stop", {"index": index}))
            index += 1

        if self.wants_tool_call(request):
            tool_use = self._tool_use(request, gen)
            output_tokens += self.tool_call_tokens

            fragments.append(_event("content_block_start", {
                "index": index,
                "content_block": {**tool_use, "input": {}},
            }))
            fragments.append(_event("content_block_delta", {
                "index": index,
                "delta": {"type": "input_json_delta", "partial_json": json.dumps(tool_use["input"])},
            }))
            stop_reason = "tool_use"
        else:
            deltas = join_chunks(gen.stream_chunks(min(request.max_tokens, MAX_STREAM_TOKENS)))
            output_tokens += count_tokens(deltas)

            fragments.append(_event("content_block_start", {
                "index": index,
                "content_block": {"type": "text", "text": ""},
            }))
            for text in deltas:
                fragments.append(_event("content_block_delta", {
                    "index": index,
                    "delta": {"type": "text_delta", "text": text},
                }))
            stop_reason = "end_turn"

        fragments.append(_event("content_block_stop", {"index": index}))
        fragments.append(_event("message_delta", {
            "delta": {"stop_reason": stop_reason, "stop_sequence": None},
            "usage": self._usage(input_tokens, output_tokens),
        }))
        fragments.append(_event("message_stop", {}))

        return fragments


anthropic_builder = AnthropicBuilder()
