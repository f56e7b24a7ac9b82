from fastapi import APIRouter, Depends

from ..models.schemas import ResponsesRequest
from ..providers import render, responses_builder
from ..services.generator import ContentGenerator
from ..state import get_generator

router = APIRouter(prefix="/v1", tags=["responses"])


@router.post("/responses")
async def create_response(
    request: ResponsesRequest,
    gen: ContentGenerator = Depends(get_generator),
):
    """OpenAI Responses API."""
    return render(responses_builder, request, gen, request.stream)
