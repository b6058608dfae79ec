from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FETCH_PROXY_", env_file=".env", extra="ignore")

    # Per-client fixed window
    rate_limit: int = Field(30, gt=0)
    rate_window_ms: int = Field(60_000, gt=0)

    # Outbound fetch
    max_size_bytes: int = Field(5 * 1024 * 1024, gt=0)
    fetch_timeout_ms: int = Field(8_000, gt=0)
    user_agent: str = "Mozilla/5.0 (SourceInspector/2.0)"
    stream_size_cap: bool = False  # abort while streaming instead of after the full read

    cache_ttl_ms: int = Field(300_000, gt=0)
    sweep_interval_ms: int = Field(60_000, gt=0)

    cors_allow_origin: str = "*"
    log_level: str = "INFO"

settings = Settings()
