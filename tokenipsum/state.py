import random
import threading

from fastapi import Request

from .config import Config, ForceError
from .services.errors import Fault
from .services.generator import ContentGenerator

# Faults picked from when a random error fires
RANDOM_FAULTS = (Fault.UNAUTHORIZED, Fault.RATE_LIMIT, Fault.SERVER_ERROR)


class RuntimeState:
    """
    Process-wide state shared by every request.

    Holds the request counter and the random generator used for fault
    decisions. Both are only touched while holding `_lock`.
    """

    def __init__(self, config: Config):
        self.config = config
        self._lock = threading.Lock()
        self._request_count = 0

        seed = config.content.seed if config.content.deterministic else None
        self._rng = random.Random(seed)

    @property
    def request_count(self) -> int:
        with self._lock:
            return self._request_count

    @property
    def latency_ms(self) -> int:
        return self.config.server.latency_ms

    def increment_requests(self) -> int:
        """Count a new request and return its number (1-based)."""
        with self._lock:
            self._request_count += 1
            return self._request_count

    def should_error(self, request_number: int | None = None) -> Fault | None:
        """
        Decide whether the request numbered `request_number` gets a fault.

        Checked in order: forced fault, the fail-after threshold, then the
        random error rate. Returns None when the request should go through.
        """
        force_error = self.config.errors.force_error
        if force_error is not ForceError.NONE:
            return Fault(force_error.value)

        if request_number is None:
            request_number = self.request_count

        threshold = self.config.rate_limit.fail_after_requests
        if threshold > 0 and request_number >= threshold:
            return Fault.RATE_LIMIT

        error_rate = self.config.errors.error_rate
        if error_rate > 0.0:
            with self._lock:
                if self._rng.random() < error_rate:
                    return RANDOM_FAULTS[self._rng.randrange(len(RANDOM_FAULTS))]

        return None

    def is_valid_key(self, key: str | None) -> bool:
        if not self.config.auth.require_auth:
            return True
        return key is not None and key in self.config.auth.valid_keys

    def new_generator(self, request_number: int) -> ContentGenerator:
        """
        Generator for one request. In deterministic mode it is seeded from the
        configured seed and the request number, so a replayed sequence of
        requests gets the same output while ids still differ between requests.
        """
        if self.config.content.deterministic:
            return ContentGenerator(seed=f"{self.config.content.seed}:{request_number}")
        return ContentGenerator()


# Dependencies for routes
def get_runtime_state(request: Request) -> RuntimeState:
    return request.app.state.runtime


def get_generator(request: Request) -> ContentGenerator:
    return get_runtime_state(request).new_generator(request.state.request_number)
