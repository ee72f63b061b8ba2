"""Healthcheck declarations and results.

Healthchecks travel as an ordinary file (``fig.healthchecks.json``) inside
a configuration version. Anything beyond ``id``, ``kind``,
``initialDelay`` and ``period`` is a kind-specific option and is kept as
an extra field for the prober to interpret.
"""

from __future__ import annotations

import re
from datetime import timedelta
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

HEALTHCHECK_FILENAME = "fig.healthchecks.json"

OptionsT = TypeVar("OptionsT", bound=BaseModel)

# [-][d.]hh:mm:ss[.fffffff]
_TIMESPAN_RE = re.compile(
    r"^(?P<sign>-)?(?:(?P<days>\d+)\.)?(?P<hours>\d{1,2}):(?P<minutes>\d{1,2}):(?P<seconds>\d{1,2}(?:\.\d+)?)$"
)


def parse_timespan(value: Any) -> Any:
    """Convert ``"00:05:00"`` style durations to ``timedelta``.

    Other values are returned untouched for pydantic to handle (numbers of
    seconds, ISO 8601 durations, ``timedelta`` instances).
    """
    if not isinstance(value, str):
        return value
    match = _TIMESPAN_RE.match(value.strip())
    if match is None:
        return value
    delta = timedelta(
        days=int(match["days"] or 0),
        hours=int(match["hours"]),
        minutes=int(match["minutes"]),
        seconds=float(match["seconds"]),
    )
    return -delta if match["sign"] else delta


def format_timespan(value: timedelta) -> str:
    """Render a ``timedelta`` as ``[d.]hh:mm:ss``."""
    total = int(value.total_seconds())
    sign = "-" if total < 0 else ""
    days, rest = divmod(abs(total), 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    prefix = f"{days}." if days else ""
    return f"{sign}{prefix}{hours:02d}:{minutes:02d}:{seconds:02d}"


class Healthcheck(BaseModel):
    """A declared, periodically-run probe."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    id: str | None = None
    kind: str | None = None
    initial_delay: timedelta = Field(default=timedelta(minutes=5), alias="initialDelay")
    period: timedelta = Field(default=timedelta(minutes=1))

    @field_validator("initial_delay", "period", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any) -> Any:
        return parse_timespan(value)

    @field_serializer("initial_delay", "period")
    def _serialize_duration(self, value: timedelta) -> str:
        return format_timespan(value)

    @property
    def options(self) -> dict[str, Any]:
        """The kind-specific options declared alongside the schedule."""
        return dict(self.model_extra or {})

    def get_options(self, model: type[OptionsT]) -> OptionsT:
        """Parse the kind-specific options into *model*."""
        return model.model_validate(self.options)


class HealthcheckManifest(BaseModel):
    """The contents of ``fig.healthchecks.json``."""

    model_config = ConfigDict(frozen=True)

    healthchecks: list[Healthcheck] = Field(default_factory=list)


class HealthcheckResult(BaseModel):
    """The outcome of a single probe."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    is_healthy: bool = Field(alias="isHealthy")
    message: str | None = None
