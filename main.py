"""
tokenipsum

A mock LLM server that answers like the real providers, for client testing:
- OpenAI-compatible chat completions (Cerebras flavour)
- Anthropic Messages, with extended thinking
- Google Gemini generateContent / streamGenerateContent
- OpenAI Responses
- Injected latency, auth failures, rate limits and server errors
"""

import logging

import uvicorn

from tokenipsum.app import create_app
from tokenipsum.config import Config, get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

config = Config.load_from(settings.config)
app = create_app(config)


if __name__ == "__main__":
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port or config.server.port,
        log_level=settings.log_level.lower(),
    )
