"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - Endpoints are http(s) URLs without a trailing slash
    - Retry, timeout and polling budgets are non-negative (attempts at least 1)
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box against us-east-1
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Remote backend
    featuredev_endpoint: str = "https://codewhisperer.us-east-1.amazonaws.com"
    featuredev_streaming_endpoint: str = (
        "https://codewhisperer.us-east-1.amazonaws.com"
    )
    featuredev_bearer_token: str = "placeholder-token"
    featuredev_timeout_seconds: int = Field(default=60, gt=0)
    featuredev_max_retries: int = Field(default=3, ge=0)
    featuredev_base_delay_ms: int = Field(default=500, ge=0)
    featuredev_max_delay_ms: int = Field(default=20_000, ge=0)

    @field_validator(
        "featuredev_endpoint", "featuredev_streaming_endpoint", mode="before",
    )
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        if isinstance(v, str):
            v = v.strip().rstrip("/")
            if not v.startswith(("http://", "https://")):
                raise ValueError(f"endpoint must be an http(s) URL, got '{v}'")
        return v

    # Code generation polling
    codegen_poll_interval_seconds: float = Field(default=10.0, ge=0)
    codegen_poll_max_attempts: int = Field(default=180, ge=1)

    # Telemetry
    telemetry_opt_out: bool = False
    client_id: str = "featuredev-proxy"
    product_name: str = "FeatureDev"
    credential_start_url: str | None = None

    # API
    cors_origins: list[str] = ["http://localhost:5173"]
    retry_after_seconds: int = Field(default=60, ge=0)

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
