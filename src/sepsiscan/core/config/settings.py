"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """SepsiScan server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Loopback by default: profiles hold health data and there is no auth layer.
    sepsiscan_host: str = "127.0.0.1"
    sepsiscan_port: int = 8001
    sepsiscan_log_level: str = "info"
    # Non-loopback binds are refused unless this is set true.
    sepsiscan_allow_insecure_bind: bool = False

    # Storage (encrypted profile store)
    db_path: str = "~/.sepsiscan/profiles.db"

    # Encryption
    encryption_key: str = ""

    # Privacy
    default_auto_delete_days: int = 30


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
