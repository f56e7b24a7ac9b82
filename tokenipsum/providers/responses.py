"""OpenAI Responses API (/v1/responses)."""

import json

from ..models.schemas import InputMessage, ResponsesRequest
from ..services.generator import ContentGenerator
from ..services.streaming import Fragment
from .base import (
    Provider,
    count_tokens,
    join_chunks,
    now_unix,
    should_call_tool,
    tool_arguments,
)


def _input_texts(message: InputMessage) -> list[str]:
    if message.content is None:
        return []
    if isinstance(message.content, str):
        return [message.content]
    return [part.text for part in message.content if part.text]


def _output_text(text: str) -> dict:
    return {"type": "output_text", "annotations": [], "logprobs": [], "text": text}


class ResponsesBuilder:
    provider = Provider.RESPONSES
    chunk_delay = 0.01
    tool_call_tokens = 15
    default_stream_tokens = 50

    def last_user_text(self, request: ResponsesRequest) -> str | None:
        if isinstance(request.input, str):
            return request.input
        for message in reversed(request.input):
            if message.role in (None, "user"):
                texts = _input_texts(message)
                return texts[0] if texts else None
        return None

    def _tool_name(self, request: ResponsesRequest) -> str | None:
        for tool in request.tools or []:
            if tool.name:
                return tool.name
        return None

    def wants_tool_call(self, request: ResponsesRequest) -> bool:
        return should_call_tool(self.last_user_text(request), self._tool_name(request) is not None)

    def count_input_tokens(self, request: ResponsesRequest) -> int:
        total = count_tokens([request.instructions])
        if isinstance(request.input, str):
            return total + ContentGenerator.estimate_tokens(request.input)
        return total + sum(count_tokens(_input_texts(m)) for m in request.input)

    def _function_call(self, request: ResponsesRequest, gen: ContentGenerator) -> dict:
        return {
            "id": f"fc_{gen.tool_call_id()}",
            "type": "function_call",
            "status": "completed",
            "name": self._tool_name(request),
            "arguments": json.dumps(tool_arguments(self.last_user_text(request))),
            "call_id": f"call_{gen.tool_call_id()}",
        }

    def _message(self, message_id: str, text: str) -> dict:
        return {
            "id": message_id,
            "type": "message",
            "status": "completed",
            "content": [_output_text(text)],
            "role": "assistant",
        }

    def envelope(
        self,
        request: ResponsesRequest,
        response_id: str,
        created_at: int,
        status: str,
        output: list[dict],
        usage: dict | None,
    ) -> dict:
        """The response object, shared by the JSON body and the stream events."""
        completed = status == "completed"
        return {
            "id": response_id,
            "object": "response",
            "created_at": created_at,
            "status": status,
            "background": False,
            "model": request.model,
            "output": output,
            "usage": usage,
            "billing": {"payer": "openai"},
            "completed_at": now_unix() if completed else None,
            "error": None,
            "incomplete_details": None,
            "instructions": request.instructions,
            "max_output_tokens": request.max_output_tokens,
            "max_tool_calls": None,
            "parallel_tool_calls": True,
            "previous_response_id": None,
            "reasoning": {
                "effort": request.reasoning.effort if request.reasoning else None,
                "summary": None,
            },
            "service_tier": "default",
            "store": True if request.store is None else request.store,
            "temperature": 1.0 if request.temperature is None else request.temperature,
            "text": {"format": {"type": "text"}, "verbosity": "medium"},
            "tool_choice": "auto",
            "tools": [tool.model_dump(exclude_none=True) for tool in request.tools or []],
            "top_p": 1.0 if request.top_p is None else request.top_p,
            "truncation": "disabled",
            "user": None,
            "metadata": {},
        }

    def _usage(self, input_tokens: int, output_tokens: int) -> dict:
        return {
            "input_tokens": input_tokens,
            "input_tokens_details": {"cached_tokens": 0},
            "output_tokens": output_tokens,
            "output_tokens_details": {"reasoning_tokens": 0},
            "total_tokens": input_tokens + output_tokens,
        }

    def build(self, request: ResponsesRequest, gen: ContentGenerator) -> dict:
        response_id = f"resp_{gen.tool_call_id()}"
        input_tokens = self.count_input_tokens(request)

        if self.wants_tool_call(request):
            output = [self._function_call(request, gen)]
            output_tokens = self.tool_call_tokens
        else:
            text = gen.paragraph()
            output = [self._message(f"msg_{gen.tool_call_id()}", text)]
            output_tokens = ContentGenerator.estimate_tokens(text)

        return self.envelope(
            request, response_id, now_unix(), "completed", output,
            self._usage(input_tokens, output_tokens),
        )

    def build_stream(self, request: ResponsesRequest, gen: ContentGenerator) -> list[Fragment]:
        response_id = f"resp_{gen.tool_call_id()}"
        created_at = now_unix()
        input_tokens = self.count_input_tokens(request)
        fragments = []

        def emit(name: str, **data):
            fragments.append(Fragment(
                {"type": name, "sequence_number": len(fragments), **data},
                event=name,
            ))

        emit("response.created",
             response=self.envelope(request, response_id, created_at, "in_progress", [], None))
        emit("response.in_progress",
             response=self.envelope(request, response_id, created_at, "in_progress", [], None))

        if self.wants_tool_call(request):
            item = self._function_call(request, gen)
            arguments = item["arguments"]
            output_tokens = self.tool_call_tokens

            emit("response.output_item.added", output_index=0,
                 item={**item, "status": "in_progress", "arguments": ""})
            emit("response.function_call_arguments.delta",
                 item_id=item["id"], output_index=0, delta=arguments)
            emit("response.function_call_arguments.done",
                 item_id=item["id"], output_index=0, arguments=arguments)
            emit("response.output_item.done", output_index=0, item=item)
        else:
            message_id = f"msg_{gen.tool_call_id()}"
            budget = self.default_stream_tokens if request.max_output_tokens is None else request.max_output_tokens
            deltas = join_chunks(gen.stream_chunks(budget))
            text = "".join(deltas)
            output_tokens = count_tokens(deltas)
            item = self._message(message_id, text)
            position = {"item_id": message_id, "output_index": 0, "content_index": 0}

            emit("response.output_item.added", output_index=0,
                 item={**item, "status": "in_progress", "content": []})
            emit("response.content_part.added", **position, part=_output_text(""))
            for delta in deltas:
                emit("response.output_text.delta", **position, delta=delta, logprobs=[])
            emit("response.output_text.done", **position, text=text, logprobs=[])
            emit("response.content_part.done", **position, part=_output_text(text))
            emit("response.output_item.done", output_index=0, item=item)

        emit("response.completed",
             response=self.envelope(
                 request, response_id, created_at, "completed", [item],
                 self._usage(input_tokens, output_tokens),
             ))

        return fragments


responses_builder = ResponsesBuilder()
