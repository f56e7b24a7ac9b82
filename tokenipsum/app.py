import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from . import __version__
from .config import Config, ForceError
from .middleware import SimulationMiddleware
from .routers import chat_completions_router, gemini_router, messages_router, responses_router
from .state import RuntimeState

logger = logging.getLogger(__name__)


def create_app(config: Config | None = None) -> FastAPI:
    """Build the mock server for `config` (defaults when None)."""
    config = config or Config()
    state = RuntimeState(config)

    enabled = [
        (config.providers.cerebras, chat_completions_router, "POST /v1/chat/completions"),
        (config.providers.claude, messages_router, "POST /v1/messages"),
        (config.providers.gemini, gemini_router, "POST /v1beta/models/{model}:{action}"),
        (config.providers.openai, responses_router, "POST /v1/responses"),
    ]

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler - logs what is being served."""
        for is_enabled, _, endpoint in enabled:
            if is_enabled:
                logger.info("Serving %s", endpoint)
        if config.rate_limit.fail_after_requests > 0:
            logger.info("Rate limiting every request from #%d", config.rate_limit.fail_after_requests)
        if config.errors.error_rate > 0:
            logger.info("Random error rate: %.0f%%", config.errors.error_rate * 100)
        if config.errors.force_error is not ForceError.NONE:
            logger.info("Forcing error: %s", config.errors.force_error.value)

        yield

        logger.info("Shutting down after %d requests", state.request_count)

    app = FastAPI(
        title="tokenipsum",
        description="Mock LLM server emulating OpenAI, Anthropic, Gemini and Cerebras APIs",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.runtime = state

    # Starlette runs the last added middleware first, so CORS wraps the simulation
    app.add_middleware(SimulationMiddleware, state=state)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for is_enabled, router, _ in enabled:
        if is_enabled:
            app.include_router(router)

    @app.get("/health", response_class=PlainTextResponse)
    async def health():
        """Health check endpoint."""
        return "ok"

    return app
