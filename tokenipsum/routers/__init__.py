from .chat_completions import router as chat_completions_router
from .gemini import router as gemini_router
from .messages import router as messages_router
from .responses import router as responses_router

__all__ = ["chat_completions_router", "messages_router", "gemini_router", "responses_router"]
