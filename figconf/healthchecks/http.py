"""HTTP prober: healthy iff the endpoint answers with a success status."""

from __future__ import annotations

import httpx
from pydantic import BaseModel, ConfigDict

from figconf.healthchecks.base import Prober
from figconf.models.healthchecks import Healthcheck, HealthcheckResult


class HttpOptions(BaseModel):
    """Options accepted by ``kind: http`` healthchecks."""

    model_config = ConfigDict(extra="ignore")

    endpoint: str


class HttpProber(Prober):
    """Issues a GET to ``endpoint`` and reports the response body.

    Parameters
    ----------
    client:
        An ``httpx.AsyncClient`` to use. One is created (and owned) when
        omitted.
    timeout:
        Request timeout in seconds for an owned client.
    """

    kind = "http"

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = 10.0) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def probe(self, healthcheck: Healthcheck) -> HealthcheckResult:
        options = healthcheck.get_options(HttpOptions)
        response = await self._client.get(options.endpoint)
        return HealthcheckResult(is_healthy=response.is_success, message=response.text)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
