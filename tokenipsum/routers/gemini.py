from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..models.schemas import GenerateContentRequest
from ..providers import GeminiBuilder, render
from ..services.errors import gemini_error
from ..services.generator import ContentGenerator
from ..state import get_generator

router = APIRouter(prefix="/v1beta", tags=["gemini"])


@router.post("/models/{model_action}")
async def generate_content(
    model_action: str,
    request: GenerateContentRequest,
    gen: ContentGenerator = Depends(get_generator),
):
    """
    Handle `/v1beta/models/{model}:{action}`.

    `generateContent` answers with JSON, `streamGenerateContent` with SSE.
    The `alt=sse` query parameter real clients send is accepted and ignored.
    """
    model, sep, action = model_action.rpartition(":")
    if not sep or not model:
        return JSONResponse(
            status_code=400,
            content=gemini_error(
                400,
                f"Invalid path '{model_action}': expected models/{{model}}:{{action}}",
                "INVALID_ARGUMENT",
            ),
        )

    if action == "generateContent":
        return render(GeminiBuilder(model), request, gen, stream=False)
    if action == "streamGenerateContent":
        return render(GeminiBuilder(model), request, gen, stream=True)

    return JSONResponse(
        status_code=404,
        content=gemini_error(404, f"Unknown action: {action}", "NOT_FOUND"),
    )
