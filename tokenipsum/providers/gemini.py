"""Google Gemini generateContent / streamGenerateContent."""

from ..models.schemas import GeminiContent, GenerateContentRequest
from ..services.generator import ContentGenerator
from ..services.streaming import Fragment
from .base import (
    Provider,
    count_tokens,
    join_chunks,
    should_call_tool,
    tool_arguments,
)


def _content_texts(content: GeminiContent | None) -> list[str]:
    if content is None:
        return []
    return [part.text for part in content.parts if part.text]


class GeminiBuilder:
    """
    Built per request: the model name comes from the URL path rather than
    the body, so each builder carries it.
    """

    provider = Provider.GEMINI
    chunk_delay = 0.015
    tool_call_tokens = 12
    default_stream_tokens = 50

    def __init__(self, model: str):
        self.model = model

    def last_user_text(self, request: GenerateContentRequest) -> str | None:
        # The latest non-model turn: a user prompt (role may be absent) or a
        # function response, which carries no text
        for content in reversed(request.contents):
            if content.role != "model":
                texts = _content_texts(content)
                return texts[0] if texts else None
        return None

    def _function_name(self, request: GenerateContentRequest) -> str | None:
        for tool in request.tools or []:
            if tool.function_declarations:
                return tool.function_declarations[0].name
        return None

    def wants_tool_call(self, request: GenerateContentRequest) -> bool:
        has_tools = self._function_name(request) is not None
        return should_call_tool(self.last_user_text(request), has_tools)

    def count_input_tokens(self, request: GenerateContentRequest) -> int:
        total = count_tokens(_content_texts(request.system_instruction))
        return total + sum(count_tokens(_content_texts(c)) for c in request.contents)

    def _chunk(self, parts: list[dict], prompt_tokens: int, candidate_tokens: int,
               response_id: str, finish_reason: str | None = None) -> dict:
        candidate = {"content": {"parts": parts, "role": "model"}, "index": 0}
        if finish_reason is not None:
            candidate["finishReason"] = finish_reason
        return {
            "candidates": [candidate],
            "usageMetadata": {
                "promptTokenCount": prompt_tokens,
                "candidatesTokenCount": candidate_tokens,
                "totalTokenCount": prompt_tokens + candidate_tokens,
            },
            "modelVersion": self.model,
            "responseId": response_id,
        }

    def _function_call(self, request: GenerateContentRequest) -> dict:
        return {
            "functionCall": {
                "name": self._function_name(request),
                "args": tool_arguments(self.last_user_text(request)),
            }
        }

    def build(self, request: GenerateContentRequest, gen: ContentGenerator) -> dict:
        response_id = gen.tool_call_id()
        prompt_tokens = self.count_input_tokens(request)

        if self.wants_tool_call(request):
            parts = [self._function_call(request)]
            candidate_tokens = self.tool_call_tokens
        else:
            text = gen.paragraph()
            parts = [{"text": text}]
            candidate_tokens = ContentGenerator.estimate_tokens(text)

        return self._chunk(parts, prompt_tokens, candidate_tokens, response_id, "STOP")

    def build_stream(self, request: GenerateContentRequest, gen: ContentGenerator) -> list[Fragment]:
        response_id = gen.tool_call_id()
        prompt_tokens = self.count_input_tokens(request)
        fragments = []

        if self.wants_tool_call(request):
            total = self.tool_call_tokens
            fragments.append(Fragment(
                self._chunk([self._function_call(request)], prompt_tokens, total, response_id)
            ))
        else:
            budget = self.default_stream_tokens
            if request.generation_config and request.generation_config.max_output_tokens is not None:
                budget = request.generation_config.max_output_tokens

            total = 0
            for text in join_chunks(gen.stream_chunks(budget)):
                total += ContentGenerator.estimate_tokens(text)
                fragments.append(Fragment(
                    self._chunk([{"text": text}], prompt_tokens, total, response_id)
                ))

        fragments.append(Fragment(self._chunk([], prompt_tokens, total, response_id, "STOP")))
        return fragments
