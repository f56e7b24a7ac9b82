import asyncio
import logging

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ..providers.base import provider_from_path
from ..services.errors import Fault, error_response
from ..state import RuntimeState
from .auth import extract_api_key

logger = logging.getLogger(__name__)


class SimulationMiddleware(BaseHTTPMiddleware):
    """
    Runs in front of every route, in this order: count the request, check
    the API key, inject a fault if one is due, then sleep for the configured
    latency before handing over to the route.
    """

    def __init__(self, app, state: RuntimeState):
        super().__init__(app)
        self.state = state

    async def dispatch(self, request: Request, call_next):
        request_number = self.state.increment_requests()
        provider = provider_from_path(request.url.path)
        requests_per_minute = self.state.config.rate_limit.requests_per_minute

        if not self.state.is_valid_key(extract_api_key(request, provider)):
            logger.info("Request %d to %s rejected: invalid API key", request_number, request.url.path)
            return error_response(Fault.UNAUTHORIZED, provider, requests_per_minute)

        fault = self.state.should_error(request_number)
        if fault is not None:
            logger.info("Injecting %s on request %d to %s", fault.value, request_number, request.url.path)
            return error_response(fault, provider, requests_per_minute)

        request.state.request_number = request_number

        if self.state.latency_ms > 0:
            await asyncio.sleep(self.state.latency_ms / 1000)

        return await call_next(request)
