"""distsum: dist checksum reconciliation for package registries.

Before a build's archives are uploaded, distsum
  - writes a SHA-1 sidecar for every archive in the build's temp namespace,
  - recovers checksums for unchanged placeholder archives from their
    published copies (fix-checksums mode),
  - rewrites stale ``dist.shasum`` values in the registry document so the
    published metadata matches the published archives.
"""

__version__ = "0.1.0"
__description__ = "Dist checksum reconciliation for Composer-style package registries"

from distsum.core.orchestrator import Orchestrator
from distsum.cli.app import app as cli

__all__ = ["Orchestrator", "cli", "__version__"]
