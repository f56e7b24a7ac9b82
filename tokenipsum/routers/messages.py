from fastapi import APIRouter, Depends

from ..models.schemas import MessagesRequest
from ..providers import anthropic_builder, render
from ..services.generator import ContentGenerator
from ..state import get_generator

router = APIRouter(prefix="/v1", tags=["messages"])


@router.post("/messages")
async def create_message(
    request: MessagesRequest,
    gen: ContentGenerator = Depends(get_generator),
):
    """Anthropic Messages API."""
    return render(anthropic_builder, request, gen, request.stream)
