"""Healthcheck scheduler.

Each declared healthcheck runs on its own schedule::

    wait(initialDelay) -> probe -> report -> sleep(rest of period) -> probe -> ...

The period is measured from when a probe *starts*, so a slow probe
shortens the following wait instead of pushing the schedule back. Probe
failures become unhealthy results and never stop a schedule; schedules
end only when the stop event is set or the running task is cancelled.
"""

from __future__ import annotations

import asyncio
import logging

from figconf.core.errors import MissingFieldError
from figconf.core.filesystem import pause
from figconf.core.tasks import gather_all
from figconf.healthchecks.base import Prober
from figconf.healthchecks.registry import ProberRegistry
from figconf.healthchecks.reporters import HealthcheckReporter
from figconf.models.healthchecks import Healthcheck, HealthcheckManifest

logger = logging.getLogger(__name__)


class HealthcheckRunner:
    """Runs healthchecks and hands every result to a reporter.

    Parameters
    ----------
    registry:
        The probers available, keyed by kind.
    reporter:
        Receives each result as soon as its probe completes.
    """

    def __init__(self, registry: ProberRegistry, reporter: HealthcheckReporter) -> None:
        self._registry = registry
        self._reporter = reporter

    def resolve(self, healthcheck: Healthcheck) -> Prober:
        """Find the prober for *healthcheck*'s kind.

        Raises
        ------
        MissingFieldError
            If the healthcheck has no ``kind``.
        UnrecognizedKindError
            If no prober is registered for the kind.
        """
        if healthcheck.kind is None:
            raise MissingFieldError("kind")
        return self._registry.get(healthcheck.kind)

    async def run(self, manifest: HealthcheckManifest, stop: asyncio.Event | None = None) -> None:
        """Run every healthcheck in *manifest* concurrently until stopped.

        All kinds are resolved before any schedule starts. A probe failure
        in one healthcheck never cancels the others.
        """
        probers = [(hc, self.resolve(hc)) for hc in manifest.healthchecks]
        logger.info("Starting %d healthcheck(s)", len(probers))
        await gather_all(self._schedule(hc, prober, stop) for hc, prober in probers)

    async def run_single(self, healthcheck: Healthcheck, stop: asyncio.Event | None = None) -> None:
        """Run one healthcheck until stopped."""
        await self._schedule(healthcheck, self.resolve(healthcheck), stop)

    async def _schedule(self, healthcheck: Healthcheck, prober: Prober, stop: asyncio.Event | None) -> None:
        loop = asyncio.get_running_loop()
        period = healthcheck.period.total_seconds()

        if await pause(healthcheck.initial_delay.total_seconds(), stop):
            return

        while stop is None or not stop.is_set():
            started = loop.time()
            result = await prober.get_health(healthcheck)
            await self._reporter.report(healthcheck, result)

            remaining = period - (loop.time() - started)
            if await pause(remaining, stop):
                return
