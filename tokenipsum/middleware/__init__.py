from .auth import extract_api_key
from .simulation import SimulationMiddleware

__all__ = ["SimulationMiddleware", "extract_api_key"]
