"""Server settings, read once from ``SERVER_*`` environment variables."""

import os
from dataclasses import dataclass, field

# History query bounds.  Module-level so ``Query()`` defaults can use them.
DEFAULT_HISTORY_LIMIT = int(os.getenv("DEFAULT_HISTORY_LIMIT", "50"))
MAX_HISTORY_LIMIT = int(os.getenv("MAX_HISTORY_LIMIT", "200"))


def _split_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass(frozen=True)
class ServerSettings:
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    # Versioned mount point for every router
    api_prefix: str = "/api/v1"

    # "*" allows any origin (local development)
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # None serves the catalog bundled with mockexam_lifecycle
    stage_data_dir: str | None = None

    # When set, requests identifying a user via X-User-ID must also send
    # this value as X-Proxy-Secret.
    trusted_proxy_secret: str | None = None


def load_settings() -> ServerSettings:
    """Build settings from the environment, falling back to the defaults."""
    defaults = ServerSettings()
    return ServerSettings(
        host=os.getenv("SERVER_HOST", defaults.host),
        port=int(os.getenv("SERVER_PORT", str(defaults.port))),
        log_level=os.getenv("SERVER_LOG_LEVEL", defaults.log_level).upper(),
        api_prefix=os.getenv("SERVER_API_PREFIX", defaults.api_prefix).rstrip("/"),
        cors_origins=_split_origins(os.getenv("SERVER_CORS_ORIGINS", "*")),
        stage_data_dir=os.getenv("SERVER_STAGE_DATA_DIR") or None,
        trusted_proxy_secret=os.getenv("TRUSTED_PROXY_SECRET") or None,
    )
