"""Integration test: build, import, select, watch and probe a version end to end."""

from __future__ import annotations

import asyncio
import json
import os
import time
from pathlib import Path

import httpx
import pytest

from figconf.core.client import ConfigClient
from figconf.core.importer import ConfigurationImporter
from figconf.healthchecks.http import HttpProber
from figconf.healthchecks.registry import ProberRegistry
from figconf.healthchecks.reporters import CollectingReporter
from figconf.healthchecks.runner import HealthcheckRunner
from figconf.models.healthchecks import HEALTHCHECK_FILENAME
from figconf.models.manifest import MANIFEST_FILENAME, Manifest

from tests.conftest import POLL


def _stage(directory: Path, endpoint: str) -> None:
    directory.mkdir()
    (directory / "service.toml").write_text('port = 8080\n', encoding="utf-8")
    (directory / HEALTHCHECK_FILENAME).write_text(
        json.dumps({
            "healthchecks": [
                {"id": "api", "kind": "http", "initialDelay": "00:00:00", "period": "00:00:00.02",
                 "endpoint": endpoint},
            ]
        }),
        encoding="utf-8",
    )


class TestFullPipeline:
    @pytest.mark.asyncio
    async def test_build_import_select_and_probe(self, tmp_path: Path):
        source = tmp_path / "release"
        _stage(source, "http://service.local/health")
        importer = ConfigurationImporter()

        manifest = await importer.build_manifest(source, "2024.06.1", polling_interval=POLL)
        await manifest.write(source / MANIFEST_FILENAME, POLL)
        staged = await Manifest.read_from_directory(source, POLL)
        staged.validate_manifest()
        await importer.validate(staged, source, POLL)

        client = ConfigClient(tmp_path / "data", polling_interval=POLL)
        await client.data_directory.initialize()
        await importer.import_version(staged, source, client.data_directory)

        stop = asyncio.Event()
        stream = client.get_version_stream(stop)
        assert (await asyncio.wait_for(stream.__anext__(), timeout=2)).version == "initial"

        await client.set_version("2024.06.1")
        stamp = time.time() + 5
        os.utime(client.data_directory.version_log.path, (stamp, stamp))
        changed = await asyncio.wait_for(stream.__anext__(), timeout=2)
        assert changed.version == "2024.06.1"

        current = await client.get_current_version()
        assert await current.read_file("service.toml") == b"port = 8080\n"
        healthchecks = await current.get_healthcheck_manifest()

        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="up"))
        reporter = CollectingReporter()
        async with httpx.AsyncClient(transport=transport) as http:
            runner = HealthcheckRunner(ProberRegistry([HttpProber(client=http)]), reporter)
            task = asyncio.create_task(runner.run(healthchecks, stop))
            await asyncio.sleep(0.1)
            stop.set()
            await asyncio.wait_for(task, timeout=2)

        assert reporter.latest()["api"].is_healthy
        assert reporter.latest()["api"].message == "up"
        with pytest.raises(StopAsyncIteration):
            await asyncio.wait_for(stream.__anext__(), timeout=2)
