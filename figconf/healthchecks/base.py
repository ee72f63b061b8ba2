"""Prober base class: one implementation per healthcheck ``kind``."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from figconf.models.healthchecks import Healthcheck, HealthcheckResult

logger = logging.getLogger(__name__)


class Prober(ABC):
    """Evaluates healthchecks of a single ``kind``.

    Subclasses implement ``probe()``. Callers use ``get_health()``, which
    never raises for a failing probe: any exception is reported as an
    unhealthy result carrying the exception message.
    """

    kind: str = ""

    async def get_health(self, healthcheck: Healthcheck) -> HealthcheckResult:
        try:
            return await self.probe(healthcheck)
        except Exception as exc:
            logger.debug("Healthcheck %s raised %r", healthcheck.id, exc)
            return HealthcheckResult(
                is_healthy=False,
                message=f"The healthcheck encountered an unhandled exception: {exc}",
            )

    @abstractmethod
    async def probe(self, healthcheck: Healthcheck) -> HealthcheckResult:
        """Run the check described by *healthcheck*."""

    async def aclose(self) -> None:
        """Release any resources held by the prober."""
