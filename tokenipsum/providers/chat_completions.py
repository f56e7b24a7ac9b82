"""OpenAI-compatible /v1/chat/completions (Cerebras flavour, with time_info)."""

import json

from ..models.schemas import ChatCompletionRequest, ChatMessage
from ..services.generator import ContentGenerator
from ..services.streaming import DONE, Fragment
from .base import (
    Provider,
    count_tokens,
    join_chunks,
    now_unix,
    should_call_tool,
    tool_arguments,
)


def _message_texts(message: ChatMessage) -> list[str]:
    if message.content is None:
        return []
    if isinstance(message.content, str):
        return [message.content]
    return [part.text for part in message.content if part.text]


def _time_info() -> dict:
    return {
        "queue_time": 0.025,
        "prompt_time": 0.003,
        "completion_time": 0.005,
        "total_time": 0.035,
        "created": float(now_unix()),
    }


def _usage(prompt_tokens: int, completion_tokens: int) -> dict:
    return {
        "prompt_tokens": prompt_tokens,
        "completion_tokens": completion_tokens,
        "total_tokens": prompt_tokens + completion_tokens,
        "prompt_tokens_details": {"cached_tokens": 0},
    }


class ChatCompletionsBuilder:
    provider = Provider.CHAT_COMPLETIONS
    chunk_delay = 0.015
    # Output tokens reported for a tool call; arguments are not counted
    tool_call_tokens = 15
    default_stream_tokens = 50

    def last_user_text(self, request: ChatCompletionRequest) -> str | None:
        for message in reversed(request.messages):
            # A trailing tool result answers the last call; it never re-triggers one
            if message.role == "tool":
                return None
            if message.role != "user":
                continue
            texts = _message_texts(message)
            return texts[0] if texts else None
        return None

    def wants_tool_call(self, request: ChatCompletionRequest) -> bool:
        return should_call_tool(self.last_user_text(request), bool(request.tools))

    def count_input_tokens(self, request: ChatCompletionRequest) -> int:
        return sum(count_tokens(_message_texts(m)) for m in request.messages)

    def _tool_call(self, request: ChatCompletionRequest, gen: ContentGenerator) -> dict:
        return {
            "id": gen.tool_call_id(),
            "type": "function",
            "function": {
                "name": request.tools[0].function.name,
                "arguments": json.dumps(tool_arguments(self.last_user_text(request))),
            },
        }

    def build(self, request: ChatCompletionRequest, gen: ContentGenerator) -> dict:
        completion_id = gen.completion_id()
        fingerprint = gen.fingerprint()
        prompt_tokens = self.count_input_tokens(request)

        if self.wants_tool_call(request):
            message = {
                "role": "assistant",
                "content": None,
                "tool_calls": [self._tool_call(request, gen)],
            }
            finish_reason = "tool_calls"
            completion_tokens = self.tool_call_tokens
        else:
            content = gen.paragraph()
            message = {"role": "assistant", "content": content}
            finish_reason = "stop"
            completion_tokens = ContentGenerator.estimate_tokens(content)

        return {
            "id": completion_id,
            "object": "chat.completion",
            "created": now_unix(),
            "model": request.model,
            "system_fingerprint": fingerprint,
            "choices": [
                {
                    "index": 0,
                    "message": message,
                    "finish_reason": finish_reason,
                }
            ],
            "usage": _usage(prompt_tokens, completion_tokens),
            "time_info": _time_info(),
        }

    def build_stream(self, request: ChatCompletionRequest, gen: ContentGenerator) -> list[Fragment]:
        completion_id = gen.completion_id()
        fingerprint = gen.fingerprint()
        created = now_unix()
        prompt_tokens = self.count_input_tokens(request)
        include_usage = request.stream_options is not None and request.stream_options.include_usage

        def chunk(delta: dict, finish_reason: str | None = None) -> Fragment:
            choice = {"index": 0, "delta": delta}
            if finish_reason is not None:
                choice["finish_reason"] = finish_reason
            return Fragment({
                "id": completion_id,
                "object": "chat.completion.chunk",
                "created": created,
                "model": request.model,
                "system_fingerprint": fingerprint,
                "choices": [choice],
            })

        fragments = [chunk({"role": "assistant"})]

        if self.wants_tool_call(request):
            tool_call = self._tool_call(request, gen)
            arguments = tool_call["function"]["arguments"]
            tool_call["function"]["arguments"] = ""
            fragments.append(chunk({"tool_calls": [{"index": 0, **tool_call}]}))
            fragments.append(chunk({"tool_calls": [{"index": 0, "function": {"arguments": arguments}}]}))
            finish_reason = "tool_calls"
            completion_tokens = self.tool_call_tokens
        else:
            max_tokens = request.max_tokens
            if max_tokens is None:
                max_tokens = request.max_completion_tokens
            if max_tokens is None:
                max_tokens = self.default_stream_tokens
            deltas = join_chunks(gen.stream_chunks(max_tokens))
            fragments.extend(chunk({"content": text}) for text in deltas)
            finish_reason = "stop"
            completion_tokens = count_tokens(deltas)

        final = chunk({}, finish_reason)
        if include_usage:
            final.data["usage"] = _usage(prompt_tokens, completion_tokens)
            final.data["time_info"] = _time_info()
        fragments.append(final)
        fragments.append(DONE)

        return fragments


chat_completions_builder = ChatCompletionsBuilder()
