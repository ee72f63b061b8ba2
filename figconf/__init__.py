"""figconf: versioned, checksum-verified configuration distribution.

Keeps a local, content-addressed cache of configuration files and an
append-only ledger of which version is active:
  - Manifests describe the files (and checksums) that make up a version
  - Files are cached once per unique checksum and shared across versions
  - Switching versions appends to ``versions.jsonl``; nothing is rewritten
  - Declared healthchecks probe the deployed configuration periodically
"""

__version__ = "0.2.0"
__description__ = "Versioned, checksum-verified configuration distribution agent"

from figconf.core.client import ConfigClient, ConfigVersion
from figconf.core.data_directory import DataDirectory
from figconf.core.importer import ConfigurationImporter

__all__ = [
    "ConfigClient",
    "ConfigVersion",
    "ConfigurationImporter",
    "DataDirectory",
    "__version__",
]
