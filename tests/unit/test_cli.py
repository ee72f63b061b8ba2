"""Unit tests for the ``fig`` CLI via typer.testing.CliRunner."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from figconf.cli.app import app
from figconf.models.manifest import MANIFEST_FILENAME

from tests.conftest import checksum_of

runner = CliRunner()


def fig(config_dir: Path, *args: str):
    """Invoke ``fig`` with the shared options appended after the verb."""
    return runner.invoke(app, [*args, "--config-path", str(config_dir), "--polling-interval", "0.01"])


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    return tmp_path / "fig-data"


@pytest.fixture
def staged(make_source_dir) -> Path:
    source, _ = make_source_dir(version="2.0.0")
    return source


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


class TestCliApp:
    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for verb in ("init", "prune", "version", "manifest", "file", "watch", "healthchecks"):
            assert verb in result.output

    @pytest.mark.parametrize(
        "args",
        [
            ["version", "--help"],
            ["version", "import", "--help"],
            ["manifest", "build", "--help"],
            ["file", "hash", "--help"],
            ["healthchecks", "watch", "--help"],
        ],
    )
    def test_subcommand_help(self, args: list[str]):
        assert runner.invoke(app, args).exit_code == 0


# ---------------------------------------------------------------------------
# Version lifecycle
# ---------------------------------------------------------------------------


class TestVersionCommands:
    def test_init_creates_directory(self, config_dir: Path):
        result = fig(config_dir, "init")
        assert result.exit_code == 0, result.output
        assert (config_dir / "versions.jsonl").is_file()

    def test_import_set_and_list(self, config_dir: Path, staged: Path):
        result = runner.invoke(
            app, ["version", "import", str(staged), "--config-path", str(config_dir), "--polling-interval", "0.01"]
        )
        assert result.exit_code == 0, result.output
        assert "Import completed successfully" in result.output

        result = fig(config_dir, "version", "set", "2.0.0")
        assert result.exit_code == 0, result.output

        result = fig(config_dir, "version", "list")
        assert result.exit_code == 0
        assert "2.0.0" in result.output
        assert "initial" in result.output

    def test_import_refuses_existing_without_force(self, config_dir: Path, staged: Path):
        args = ["version", "import", str(staged), "--config-path", str(config_dir)]
        assert runner.invoke(app, args).exit_code == 0
        result = runner.invoke(app, args)
        assert result.exit_code == 1
        assert "already exists" in result.output
        assert runner.invoke(app, [*args, "--force"]).exit_code == 0

    def test_import_rejects_bad_checksums(self, config_dir: Path, staged: Path):
        (staged / "app.cfg").write_bytes(b"tampered")
        result = runner.invoke(app, ["version", "import", str(staged), "--config-path", str(config_dir)])
        assert result.exit_code == 1
        assert "ERROR" in result.output
        assert not (config_dir / "manifests" / "2.0.0.json").exists()

    def test_import_requires_version(self, config_dir: Path, make_source_dir):
        source, manifest = make_source_dir()
        (source / MANIFEST_FILENAME).write_text(
            manifest.model_copy(update={"version": None}).to_json(), encoding="utf-8"
        )
        result = runner.invoke(app, ["version", "import", str(source), "--config-path", str(config_dir)])
        assert result.exit_code == 1
        assert "version" in result.output

    def test_set_unknown_version(self, config_dir: Path):
        fig(config_dir, "init")
        result = fig(config_dir, "version", "set", "9.9.9")
        assert result.exit_code == 1
        assert "9.9.9" in result.output

    def test_export(self, config_dir: Path, staged: Path, tmp_path: Path):
        runner.invoke(app, ["version", "import", str(staged), "--config-path", str(config_dir)])
        target = tmp_path / "exported"
        result = runner.invoke(app, ["version", "export", "2.0.0", str(target), "--config-path", str(config_dir)])
        assert result.exit_code == 0, result.output
        assert (target / "nested" / "db.json").read_bytes() == (staged / "nested" / "db.json").read_bytes()

    def test_remove_guards_active_version(self, config_dir: Path):
        fig(config_dir, "init")
        result = fig(config_dir, "version", "remove", "initial")
        assert result.exit_code == 1
        assert "active configuration" in result.output
        assert fig(config_dir, "version", "remove", "initial", "--force").exit_code == 0

    def test_remove_then_prune(self, config_dir: Path, staged: Path):
        runner.invoke(app, ["version", "import", str(staged), "--config-path", str(config_dir)])
        assert fig(config_dir, "version", "remove", "2.0.0").exit_code == 0
        result = fig(config_dir, "prune")
        assert result.exit_code == 0
        assert list((config_dir / "cache").iterdir()) == []

    def test_verify_detects_corruption(self, config_dir: Path, staged: Path):
        runner.invoke(app, ["version", "import", str(staged), "--config-path", str(config_dir)])
        assert fig(config_dir, "version", "verify", "2.0.0").exit_code == 0

        key = checksum_of((staged / "app.cfg").read_bytes())
        (config_dir / "cache" / key).write_bytes(b"bit rot")
        result = fig(config_dir, "version", "verify", "2.0.0")
        assert result.exit_code == 1
        assert "did not match" in result.output

    def test_verify_reports_missing_cache_file(self, config_dir: Path, staged: Path):
        runner.invoke(app, ["version", "import", str(staged), "--config-path", str(config_dir)])
        key = checksum_of((staged / "app.cfg").read_bytes())
        (config_dir / "cache" / key).unlink()

        result = fig(config_dir, "version", "verify", "2.0.0")
        assert result.exit_code == 1
        assert "did not match" in result.output
        assert "Traceback" not in result.output


# ---------------------------------------------------------------------------
# Manifest and file tools
# ---------------------------------------------------------------------------


class TestManifestCommands:
    def test_build_then_verify(self, tmp_path: Path):
        source = tmp_path / "src"
        source.mkdir()
        (source / "a.cfg").write_text("a", encoding="utf-8")

        result = runner.invoke(app, ["manifest", "build", str(source), "3.0.0"])
        assert result.exit_code == 0, result.output
        assert (source / MANIFEST_FILENAME).is_file()

        assert runner.invoke(app, ["manifest", "verify", str(source)]).exit_code == 0

        (source / "a.cfg").write_text("changed", encoding="utf-8")
        result = runner.invoke(app, ["manifest", "verify", str(source)])
        assert result.exit_code == 1

    def test_verify_without_manifest(self, tmp_path: Path):
        result = runner.invoke(app, ["manifest", "verify", str(tmp_path)])
        assert result.exit_code == 1


class TestFileCommands:
    def test_hash(self, tmp_path: Path):
        path = tmp_path / "x.txt"
        path.write_bytes(b"hello")
        result = runner.invoke(app, ["file", "hash", str(path)])
        assert result.exit_code == 0
        assert checksum_of(b"hello") in result.output.replace("\n", "")

    def test_hash_missing_file(self, tmp_path: Path):
        result = runner.invoke(app, ["file", "hash", str(tmp_path / "nope")])
        assert result.exit_code == 1

    def test_cat(self, config_dir: Path, staged: Path):
        runner.invoke(app, ["version", "import", str(staged), "--config-path", str(config_dir)])
        result = fig(config_dir, "file", "cat", "app.cfg", "--version", "2.0.0")
        assert result.exit_code == 0, result.output
        assert "name = demo" in result.output

    def test_cat_unknown_file(self, config_dir: Path):
        fig(config_dir, "init")
        result = fig(config_dir, "file", "cat", "missing.cfg")
        assert result.exit_code == 1
