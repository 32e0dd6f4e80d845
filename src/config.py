from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Subscription usage API
    usage_api_url: str = "https://api.anthropic.com/api/oauth/usage"
    usage_beta_header: str = "oauth-2025-04-20"
    usage_client_id: str = "usage-tracker/0.1.0"  # sent as User-Agent
    usage_poll_interval: int = 60  # seconds between background fetches
    usage_request_timeout: float = 10.0

    # Credentials
    # An explicit token wins; otherwise the OAuth credentials file is read.
    oauth_token: str = ""
    credentials_path: Path = Path.home() / ".claude" / ".credentials.json"

    # Session aggregation
    top_sessions_limit: int = 10

    # API
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"


settings = Settings()
