"""Explicit registry of prober implementations, keyed by ``kind``.

Kinds match case-insensitively. The registry is filled once at start-up
by explicit ``register()`` calls; ``default_registry()`` builds the one
the agent uses.
"""

from __future__ import annotations

import logging

from figconf.core.errors import UnrecognizedKindError
from figconf.healthchecks.base import Prober

logger = logging.getLogger(__name__)


class ProberRegistry:
    """Maps healthcheck kinds to prober instances."""

    def __init__(self, probers: list[Prober] | None = None) -> None:
        self._probers: dict[str, Prober] = {}
        for prober in probers or []:
            self.register(prober)

    def register(self, prober: Prober) -> None:
        """Add *prober* under its kind.

        Raises
        ------
        ValueError
            If the prober has no kind or the kind is already registered.
        """
        if not prober.kind:
            raise ValueError(f"{type(prober).__name__} does not declare a healthcheck kind")
        key = prober.kind.lower()
        if key in self._probers:
            raise ValueError(f"A prober for healthcheck kind '{prober.kind}' is already registered")
        self._probers[key] = prober
        logger.debug("Registered %s for healthcheck kind %s", type(prober).__name__, prober.kind)

    def get(self, kind: str) -> Prober:
        """Return the prober for *kind*, or raise ``UnrecognizedKindError``."""
        prober = self._probers.get(kind.lower())
        if prober is None:
            raise UnrecognizedKindError("healthcheck", kind, self.kinds)
        return prober

    @property
    def kinds(self) -> list[str]:
        return [p.kind for p in self._probers.values()]

    def __contains__(self, kind: str) -> bool:
        return kind.lower() in self._probers

    def __len__(self) -> int:
        return len(self._probers)

    async def aclose(self) -> None:
        for prober in self._probers.values():
            await prober.aclose()


def default_registry(http_timeout: float = 10.0) -> ProberRegistry:
    """Registry with every built-in prober."""
    from figconf.healthchecks.http import HttpProber

    return ProberRegistry([HttpProber(timeout=http_timeout)])
