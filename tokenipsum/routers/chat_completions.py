from fastapi import APIRouter, Depends

from ..models.schemas import ChatCompletionRequest
from ..providers import chat_completions_builder, render
from ..services.generator import ContentGenerator
from ..state import get_generator

router = APIRouter(prefix="/v1", tags=["chat-completions"])


@router.post("/chat/completions")
async def chat_completions(
    request: ChatCompletionRequest,
    gen: ContentGenerator = Depends(get_generator),
):
    """OpenAI-compatible chat completion, JSON or SSE depending on `stream`."""
    return render(chat_completions_builder, request, gen, request.stream)
