from .schemas import (
    ChatCompletionRequest,
    GenerateContentRequest,
    MessagesRequest,
    ResponsesRequest,
)

__all__ = [
    "ChatCompletionRequest",
    "MessagesRequest",
    "GenerateContentRequest",
    "ResponsesRequest",
]
