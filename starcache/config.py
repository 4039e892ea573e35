"""Application configuration loaded from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration — reads from environment / .env file."""

    # Upstream
    upstream_base_url: str = "https://swapi.py4e.com/api"
    upstream_timeout_seconds: float = 10.0

    # Fallback snapshot
    fallback_path: str = "fallback.json"

    # Resolution cache
    cache_max_entries: int = 500
    cache_ttl_seconds: int = 300                # 5 minutes

    # Server
    host: str = "0.0.0.0"
    port: int = 4000
    allowed_origins: str = "*"
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def base_url(self) -> str:
        return self.upstream_base_url.rstrip("/")

    @property
    def cors_origins(self) -> list[str]:
        if self.allowed_origins == "*":
            return ["*"]
        return [o.strip() for o in self.allowed_origins.split(",")]


settings = Settings()
