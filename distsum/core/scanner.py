"""ArtifactScanner: discovers archives under the build's temp prefix."""

from __future__ import annotations

import logging

from distsum.core.errors import IOFailure, ScanError
from distsum.core.paths import (
    has_archive_extension,
    relative_path_for,
    sidecar_path_for,
)
from distsum.models.artifacts import BuildArtifact
from distsum.models.config import FixerConfig
from distsum.storage import LocalStore

logger = logging.getLogger(__name__)


class ArtifactScanner:
    """Enumerates archive files and derives their storage paths.

    Parameters
    ----------
    store:
        Scratch storage holding the build output.
    config:
        Supplies the temp prefix and the archive extensions to keep.
    """

    def __init__(self, store: LocalStore, config: FixerConfig) -> None:
        self._store = store
        self._config = config

    def derive(self, storage_path: str, size: int = 0) -> BuildArtifact:
        """Build a ``BuildArtifact`` for one listed file (no I/O)."""
        prefix = self._config.temp_prefix
        relative = relative_path_for(storage_path, prefix)
        return BuildArtifact(
            storage_path=storage_path,
            real_path=self._store.real_path(storage_path),
            relative_path=relative,
            sidecar_path=sidecar_path_for(relative, prefix),
            size=size,
        )

    def scan(self) -> list[BuildArtifact]:
        """List the temp namespace and return one artifact per archive.

        Raises
        ------
        ScanError
            If the namespace cannot be listed.  Nothing else is possible
            without the listing, so this is fatal for the pass.
        """
        prefix = self._config.temp_prefix
        try:
            files = self._store.list(prefix)
        except Exception as exc:
            raise ScanError(f"Cannot list temp namespace {prefix!r}: {exc}") from exc

        artifacts: list[BuildArtifact] = []
        for path in files:
            if not has_archive_extension(path, self._config.archive_extensions):
                continue
            try:
                size = self._store.size(path)
            except IOFailure as exc:
                logger.warning("Skipping %s: %s", path, exc)
                continue
            artifacts.append(self.derive(path, size))

        logger.info(
            "Scanned %s: %d archive(s) out of %d file(s)",
            prefix,
            len(artifacts),
            len(files),
        )
        return artifacts
