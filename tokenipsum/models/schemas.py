from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    # Real SDKs send many fields we don't model; accept and ignore them
    model_config = ConfigDict(extra="allow")


# Chat Completion Models (OpenAI-compatible)
class ContentPart(RequestModel):
    type: str
    text: str | None = None


class ChatMessage(RequestModel):
    role: str
    content: str | list[ContentPart] | None = None


class StreamOptions(RequestModel):
    include_usage: bool = False


class FunctionDefinition(RequestModel):
    name: str
    description: str | None = None
    parameters: dict[str, Any] | None = None


class ChatTool(RequestModel):
    type: str = "function"
    function: FunctionDefinition


class ChatCompletionRequest(RequestModel):
    model: str
    messages: list[ChatMessage]
    stream: bool = False
    stream_options: StreamOptions | None = None
    max_tokens: int | None = None
    max_completion_tokens: int | None = None
    temperature: float | None = None
    top_p: float | None = None
    tools: list[ChatTool] | None = None
    tool_choice: str | dict | None = None


# Anthropic Messages Models
class TextBlock(RequestModel):
    type: Literal["text"]
    text: str


class ImageBlock(RequestModel):
    type: Literal["image"]
    source: dict[str, Any]


class ToolUseBlock(RequestModel):
    type: Literal["tool_use"]
    id: str
    name: str
    input: dict[str, Any] = {}


class ToolResultBlock(RequestModel):
    type: Literal["tool_result"]
    tool_use_id: str
    content: str | list[dict[str, Any]] | None = None


class ThinkingBlock(RequestModel):
    type: Literal["thinking"]
    thinking: str
    signature: str = ""


ContentBlock = Annotated[
    Union[TextBlock, ImageBlock, ToolUseBlock, ToolResultBlock, ThinkingBlock],
    Field(discriminator="type"),
]


class AnthropicMessage(RequestModel):
    role: str
    content: str | list[ContentBlock]


class AnthropicTool(RequestModel):
    name: str
    description: str | None = None
    input_schema: dict[str, Any] | None = None


class ThinkingConfig(RequestModel):
    type: str = "enabled"
    budget_tokens: int = 1024


class MessagesRequest(RequestModel):
    model: str
    messages: list[AnthropicMessage]
    max_tokens: int
    stream: bool = False
    system: str | list[TextBlock] | None = None
    temperature: float | None = None
    top_p: float | None = None
    tools: list[AnthropicTool] | None = None
    thinking: ThinkingConfig | None = None


# Gemini generateContent Models (camelCase on the wire)
class GeminiModel(RequestModel):
    model_config = ConfigDict(extra="allow", alias_generator=to_camel, populate_by_name=True)


class GeminiPart(GeminiModel):
    text: str | None = None
    function_call: dict[str, Any] | None = None
    function_response: dict[str, Any] | None = None


class GeminiContent(GeminiModel):
    role: str | None = None
    parts: list[GeminiPart] = []


class GenerationConfig(GeminiModel):
    max_output_tokens: int | None = None
    temperature: float | None = None
    top_p: float | None = None
    stop_sequences: list[str] | None = None


class FunctionDeclaration(GeminiModel):
    name: str
    description: str | None = None
    parameters: dict[str, Any] | None = None


class GeminiTool(GeminiModel):
    function_declarations: list[FunctionDeclaration] | None = None


class GenerateContentRequest(GeminiModel):
    contents: list[GeminiContent]
    system_instruction: GeminiContent | None = None
    generation_config: GenerationConfig | None = None
    tools: list[GeminiTool] | None = None
    tool_config: dict[str, Any] | None = None


# OpenAI Responses Models
class InputContentPart(RequestModel):
    type: str
    text: str | None = None


class InputMessage(RequestModel):
    role: str | None = None
    content: str | list[InputContentPart] | None = None


class ResponsesTool(RequestModel):
    type: str = "function"
    name: str | None = None
    description: str | None = None
    parameters: dict[str, Any] | None = None


class ReasoningConfig(RequestModel):
    effort: str | None = None
    summary: str | None = None


class ResponsesRequest(RequestModel):
    model: str
    input: str | list[InputMessage]
    stream: bool = False
    instructions: str | None = None
    max_output_tokens: int | None = None
    temperature: float | None = None
    top_p: float | None = None
    tools: list[ResponsesTool] | None = None
    tool_choice: str | dict | None = None
    store: bool | None = None
    reasoning: ReasoningConfig | None = None
    text: dict[str, Any] | None = None
