"""Reporters receive the latest result of every healthcheck."""

from __future__ import annotations

import logging
from typing import Protocol

from figconf.models.healthchecks import Healthcheck, HealthcheckResult

logger = logging.getLogger(__name__)


class HealthcheckReporter(Protocol):
    """Anything that can surface a probe outcome."""

    async def report(self, healthcheck: Healthcheck, result: HealthcheckResult) -> None: ...


class LoggingReporter:
    """Writes each result to the log; unhealthy results as warnings."""

    async def report(self, healthcheck: Healthcheck, result: HealthcheckResult) -> None:
        if result.is_healthy:
            logger.info("Healthcheck %s is healthy: %s", healthcheck.id, result.message or "")
        else:
            logger.warning("Healthcheck %s is unhealthy: %s", healthcheck.id, result.message or "")


class CollectingReporter:
    """Keeps every reported result in memory, in report order."""

    def __init__(self) -> None:
        self.reports: list[tuple[Healthcheck, HealthcheckResult]] = []

    async def report(self, healthcheck: Healthcheck, result: HealthcheckResult) -> None:
        self.reports.append((healthcheck, result))

    def latest(self) -> dict[str | None, HealthcheckResult]:
        """The most recent result per healthcheck id."""
        return {hc.id: result for hc, result in self.reports}

    def results_for(self, healthcheck_id: str) -> list[HealthcheckResult]:
        return [result for hc, result in self.reports if hc.id == healthcheck_id]
