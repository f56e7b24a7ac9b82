import logging
from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict, TomlConfigSettingsSource

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Process settings taken from the environment (and an optional .env file)."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Server settings
    host: str = "0.0.0.0"
    port: int | None = None  # overrides [server].port when set

    # Path of the TOML settings document
    config: str = "config.toml"

    log_level: str = "info"


@lru_cache
def get_settings() -> Settings:
    return Settings()


class ForceError(str, Enum):
    NONE = "none"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMIT = "rate_limit"
    SERVER_ERROR = "server_error"
    TIMEOUT = "timeout"


class ServerConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    port: int = 8787
    latency_ms: int = Field(default=0, ge=0)


class RateLimitConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    enabled: bool = False
    # Advisory only: reported in rate-limit headers, never enforced
    requests_per_minute: int = 60
    # 0 disables the hard threshold
    fail_after_requests: int = Field(default=0, ge=0)


class ErrorConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    error_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    force_error: ForceError = ForceError.NONE


class AuthConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    require_auth: bool = False
    valid_keys: list[str] = []


class ProviderConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    cerebras: bool = True  # OpenAI-compatible /v1/chat/completions
    gemini: bool = True
    claude: bool = True
    openai: bool = True  # OpenAI Responses /v1/responses


class ContentConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    deterministic: bool = False
    seed: int = 42


class Config(BaseSettings):
    """The settings document. Loaded once at startup and never mutated."""

    model_config = SettingsConfigDict(frozen=True, extra="ignore")

    server: ServerConfig = ServerConfig()
    rate_limit: RateLimitConfig = RateLimitConfig()
    errors: ErrorConfig = ErrorConfig()
    auth: AuthConfig = AuthConfig()
    providers: ProviderConfig = ProviderConfig()
    content: ContentConfig = ContentConfig()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Environment overrides are handled by Settings, not here
        return (init_settings,)

    @classmethod
    def load_from(cls, path: str | Path) -> "Config":
        """Load the document at `path`, falling back to defaults."""
        path = Path(path)
        if not path.is_file():
            logger.info("No config file found at %s, using defaults", path)
            return cls()

        try:
            data = TomlConfigSettingsSource(cls, toml_file=path)()
            config = cls(**data)
        except ValueError as e:
            # Covers both TOML syntax errors and validation errors
            logger.warning("Failed to parse config %s: %s, using defaults", path, e)
            return cls()

        logger.info("Loaded config from %s", path)
        return config
