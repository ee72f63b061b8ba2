"""Agent configuration: env-driven.

Reads ``FIG_*`` environment variables and an optional ``.env`` file.

Examples
--------
Override via environment::

    export FIG_CONFIG_DIR=/srv/fig
    export FIG_POLLING_INTERVAL=0.25
    export FIG_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_config_dir() -> Path:
    return Path.home() / ".config" / "fig" / "configs"


class FigSettings(BaseSettings):
    """Settings shared by the CLI and long-running agent commands."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="FIG_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Data directory holding manifests/, cache/ and versions.jsonl
    config_dir: Path = _default_config_dir()

    # Seconds between busy-file retries and version log polls
    polling_interval: float = 0.5

    log_level: str = "INFO"

    # HTTP prober request timeout, seconds
    http_timeout: float = 10.0


# Module-level singleton: import as `from figconf.config import settings`
settings = FigSettings()
