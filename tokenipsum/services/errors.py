from enum import Enum

from fastapi.responses import JSONResponse

from ..providers.base import Provider


class Fault(str, Enum):
    """Simulated failures the server can inject."""

    UNAUTHORIZED = "unauthorized"
    RATE_LIMIT = "rate_limit"
    SERVER_ERROR = "server_error"
    TIMEOUT = "timeout"


FAULT_STATUS = {
    Fault.UNAUTHORIZED: 401,
    Fault.RATE_LIMIT: 429,
    Fault.SERVER_ERROR: 500,
    Fault.TIMEOUT: 504,
}


def _openai_error(message: str, error_type: str, code: str) -> dict:
    return {
        "error": {
            "message": message,
            "type": error_type,
            "param": None,
            "code": code,
        }
    }


def _anthropic_error(error_type: str, message: str) -> dict:
    return {
        "type": "error",
        "error": {
            "type": error_type,
            "message": message,
        },
    }


def gemini_error(code: int, message: str, status: str, details: list | None = None) -> dict:
    error = {
        "code": code,
        "message": message,
        "status": status,
    }
    if details is not None:
        error["details"] = details
    return {"error": error}


OPENAI_BODIES = {
    Fault.UNAUTHORIZED: _openai_error(
        "Invalid API key provided. You can find your API key at https://platform.example.com/account/api-keys.",
        "invalid_request_error",
        "invalid_api_key",
    ),
    Fault.RATE_LIMIT: _openai_error(
        "Rate limit reached for requests. Please slow down.",
        "rate_limit_error",
        "rate_limit_exceeded",
    ),
    Fault.SERVER_ERROR: _openai_error(
        "The server had an error while processing your request. Sorry about that!",
        "server_error",
        "internal_error",
    ),
    Fault.TIMEOUT: _openai_error(
        "Request timed out. Please try again.",
        "timeout_error",
        "timeout",
    ),
}

ANTHROPIC_BODIES = {
    Fault.UNAUTHORIZED: _anthropic_error("authentication_error", "Invalid API key provided."),
    Fault.RATE_LIMIT: _anthropic_error(
        "rate_limit_error", "Rate limit exceeded. Please retry after 60 seconds."
    ),
    Fault.SERVER_ERROR: _anthropic_error(
        "api_error", "An unexpected error occurred. Please try again later."
    ),
    Fault.TIMEOUT: _anthropic_error("timeout_error", "Request timed out."),
}

GEMINI_BODIES = {
    Fault.UNAUTHORIZED: gemini_error(
        401,
        "API key not valid. Please pass a valid API key.",
        "UNAUTHENTICATED",
        details=[{
            "@type": "type.googleapis.com/google.rpc.ErrorInfo",
            "reason": "API_KEY_INVALID",
            "domain": "googleapis.com",
        }],
    ),
    Fault.RATE_LIMIT: gemini_error(
        429,
        "Resource has been exhausted (e.g. check quota).",
        "RESOURCE_EXHAUSTED",
        details=[{
            "@type": "type.googleapis.com/google.rpc.QuotaFailure",
            "violations": [{
                "subject": "GenerateContentRequest",
                "description": "Quota exceeded",
            }],
        }],
    ),
    Fault.SERVER_ERROR: gemini_error(
        500,
        "An internal error has occurred. Please retry or report in "
        "https://developers.generativeai.google/guide/troubleshooting",
        "INTERNAL",
    ),
    Fault.TIMEOUT: gemini_error(
        504,
        "Deadline exceeded while waiting for response.",
        "DEADLINE_EXCEEDED",
    ),
}


def _rate_limit_headers(provider: Provider, requests_per_minute: int) -> dict[str, str]:
    if provider is Provider.GEMINI:
        return {"retry-after": "60"}

    if provider is Provider.ANTHROPIC:
        return {
            "retry-after": "60",
            "x-ratelimit-limit-requests": str(requests_per_minute),
            "x-ratelimit-remaining-requests": "0",
        }

    return {
        "x-ratelimit-limit-requests": str(requests_per_minute),
        "x-ratelimit-remaining-requests": "0",
        "x-ratelimit-reset-requests": "1s",
        "retry-after": "1",
    }


def error_response(fault: Fault, provider: Provider, requests_per_minute: int = 60) -> JSONResponse:
    """Render an injected fault the way `provider` reports that failure."""
    if provider is Provider.GEMINI:
        body = GEMINI_BODIES[fault]
    elif provider is Provider.ANTHROPIC:
        body = ANTHROPIC_BODIES[fault]
    else:
        body = OPENAI_BODIES[fault]

    headers = None
    if fault is Fault.RATE_LIMIT:
        headers = _rate_limit_headers(provider, requests_per_minute)

    return JSONResponse(status_code=FAULT_STATUS[fault], content=body, headers=headers)
