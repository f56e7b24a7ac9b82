from .anthropic import anthropic_builder
from .base import Provider, provider_from_path, render
from .chat_completions import chat_completions_builder
from .gemini import GeminiBuilder
from .responses import responses_builder

__all__ = [
    "Provider",
    "provider_from_path",
    "render",
    "chat_completions_builder",
    "anthropic_builder",
    "GeminiBuilder",
    "responses_builder",
]
