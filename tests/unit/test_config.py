"""Tests for agent config: env-driven settings and logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console

from figconf.config import FigSettings
from figconf.logging_config import setup_logging


class TestFigSettings:
    def test_defaults(self, monkeypatch):
        for name in ("FIG_CONFIG_DIR", "FIG_POLLING_INTERVAL", "FIG_LOG_LEVEL", "FIG_HTTP_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)
        config = FigSettings(_env_file=None)
        assert config.polling_interval == 0.5
        assert config.log_level == "INFO"
        assert config.http_timeout == 10.0
        assert config.config_dir == Path.home() / ".config" / "fig" / "configs"

    def test_env_overrides(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("FIG_CONFIG_DIR", str(tmp_path))
        monkeypatch.setenv("FIG_POLLING_INTERVAL", "0.25")
        monkeypatch.setenv("FIG_LOG_LEVEL", "DEBUG")
        config = FigSettings(_env_file=None)
        assert config.config_dir == tmp_path
        assert config.polling_interval == 0.25
        assert config.log_level == "DEBUG"

    def test_unrelated_env_ignored(self, monkeypatch):
        monkeypatch.setenv("FIG_SOMETHING_ELSE", "x")
        FigSettings(_env_file=None)


class TestLogging:
    def test_setup_is_idempotent(self):
        console = Console(record=True)
        setup_logging("DEBUG", console=console)
        setup_logging("WARNING", console=console)
        logger = logging.getLogger("figconf")
        assert logger.level == logging.WARNING
        assert sum(1 for h in logger.handlers if h.__class__.__name__ == "RichHandler") == 1
