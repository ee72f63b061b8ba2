"""Periodic health probes declared alongside a configuration version."""

from figconf.healthchecks.base import Prober
from figconf.healthchecks.http import HttpOptions, HttpProber
from figconf.healthchecks.registry import ProberRegistry, default_registry
from figconf.healthchecks.reporters import CollectingReporter, HealthcheckReporter, LoggingReporter
from figconf.healthchecks.runner import HealthcheckRunner

__all__ = [
    "CollectingReporter",
    "HealthcheckReporter",
    "HealthcheckRunner",
    "HttpOptions",
    "HttpProber",
    "LoggingReporter",
    "Prober",
    "ProberRegistry",
    "default_registry",
]
