"""figconf data models: all Pydantic v2, all frozen (immutable)."""

from figconf.models.healthchecks import (
    HEALTHCHECK_FILENAME,
    Healthcheck,
    HealthcheckManifest,
    HealthcheckResult,
)
from figconf.models.ledger import VersionLogEntry
from figconf.models.manifest import MANIFEST_FILENAME, Manifest, ManifestFile

__all__ = [
    # manifest
    "MANIFEST_FILENAME",
    "Manifest",
    "ManifestFile",
    # ledger
    "VersionLogEntry",
    # healthchecks
    "HEALTHCHECK_FILENAME",
    "Healthcheck",
    "HealthcheckManifest",
    "HealthcheckResult",
]
