from fastapi import Request

from ..providers.base import Provider


def extract_api_key(request: Request, provider: Provider) -> str | None:
    """
    Pull the caller's key from wherever its SDK sends it.

    Every provider accepts `Authorization: Bearer <key>`. The Anthropic SDK
    sends `x-api-key`, and Gemini clients use `x-goog-api-key` or `?key=`.
    """
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]  # Remove "Bearer " prefix

    if provider is Provider.ANTHROPIC:
        return request.headers.get("x-api-key")

    if provider is Provider.GEMINI:
        return request.headers.get("x-goog-api-key") or request.query_params.get("key")

    return None
