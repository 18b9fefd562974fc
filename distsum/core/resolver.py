"""ChecksumResolver: computes or recovers one digest per artifact.

Freshly built archives (``size > 0``) are hashed from the scratch store.
Placeholders (``size == 0``) stand in for an archive that did not change
since the last build; their checksum is only recovered from the published
remote copy when fix-checksums mode is on.

Each artifact touches nothing but its own sidecar path, so artifacts are
resolved on a bounded thread pool.  One artifact failing never stops the
others, and a sidecar is only ever written with a complete digest.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from distsum.core.errors import ChecksumError, IOFailure, RemoteUnavailable
from distsum.core.hasher import is_valid_digest, sha1_chunks, sha1_file
from distsum.core.paths import remote_key_for
from distsum.models.artifacts import (
    BuildArtifact,
    ChecksumEntry,
    ChecksumSource,
    ResolutionOutcome,
    ResolutionResult,
)
from distsum.models.config import FixerConfig
from distsum.storage import LocalStore, RemoteStore

logger = logging.getLogger(__name__)


class ChecksumResolver:
    """Writes a sidecar checksum for every resolvable artifact.

    Parameters
    ----------
    local:
        Scratch storage; archives are read from and sidecars written to it.
    remote:
        Published archive storage, consulted for placeholders in
        fix-checksums mode.  ``None`` means placeholders cannot be fixed.
    config:
        Per-build configuration (fix-checksums flag).
    max_workers:
        Upper bound on concurrently resolved artifacts.
    """

    def __init__(
        self,
        local: LocalStore,
        remote: RemoteStore | None,
        config: FixerConfig,
        *,
        max_workers: int = 4,
    ) -> None:
        self._local = local
        self._remote = remote
        self._config = config
        self._max_workers = max(1, max_workers)

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    def resolve_all(self, artifacts: list[BuildArtifact]) -> list[ResolutionResult]:
        """Resolve every artifact; results come back in input order."""
        if not artifacts:
            return []
        workers = min(self._max_workers, len(artifacts))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="distsum") as pool:
            return list(pool.map(self._resolve_isolated, artifacts))

    def _resolve_isolated(self, artifact: BuildArtifact) -> ResolutionResult:
        try:
            return self.resolve(artifact)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Unexpected error resolving %s: %s", artifact.relative_path, exc
            )
            return self._failed(artifact, f"unexpected error: {exc}")

    # ------------------------------------------------------------------
    # Single artifact
    # ------------------------------------------------------------------

    def resolve(self, artifact: BuildArtifact) -> ResolutionResult:
        """Compute or recover the checksum for one artifact."""
        if artifact.is_placeholder:
            return self._resolve_placeholder(artifact)

        logger.debug("Generating checksum for %s.", artifact.relative_path)
        try:
            checksum = sha1_file(artifact.real_path)
            entry = self._persist(artifact, checksum, ChecksumSource.LOCAL)
        except (OSError, ChecksumError) as exc:
            logger.debug(
                "Failed generating checksum for %s: %s", artifact.relative_path, exc
            )
            return self._failed(artifact, str(exc))

        return ResolutionResult(
            relative_path=artifact.relative_path,
            outcome=ResolutionOutcome.HASHED,
            entry=entry,
        )

    def _resolve_placeholder(self, artifact: BuildArtifact) -> ResolutionResult:
        relative = artifact.relative_path
        if not self._config.fix_checksums:
            logger.debug("File %s is a placeholder - skipping checksum.", relative)
            return ResolutionResult(
                relative_path=relative,
                outcome=ResolutionOutcome.PLACEHOLDER_SKIPPED,
            )

        remote_key = remote_key_for(relative)
        if self._remote is None:
            logger.debug("No remote store configured - cannot fix %s.", relative)
            return self._missing(artifact, "no remote store configured")

        try:
            if not self._remote.exists(remote_key):
                logger.debug("Remote file %s not found - skipping.", remote_key)
                return self._missing(artifact, f"{remote_key} not found")
            checksum = sha1_chunks(self._remote.open(remote_key))
            entry = self._persist(artifact, checksum, ChecksumSource.REMOTE)
        except (RemoteUnavailable, IOFailure) as exc:
            logger.debug("Error reading %s from remote: %s", remote_key, exc)
            return self._failed(artifact, str(exc))

        logger.info("Checksum fetched from remote for %s -> %s", relative, checksum)
        return ResolutionResult(
            relative_path=relative,
            outcome=ResolutionOutcome.PLACEHOLDER_FETCHED,
            entry=entry,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _persist(
        self, artifact: BuildArtifact, checksum: str, source: ChecksumSource
    ) -> ChecksumEntry:
        if not is_valid_digest(checksum):
            raise IOFailure(f"refusing to write malformed digest {checksum!r}")
        self._local.write(artifact.sidecar_path, checksum)
        return ChecksumEntry(
            relative_path=artifact.relative_path,
            checksum=checksum,
            sidecar_path=artifact.sidecar_path,
            source=source,
        )

    @staticmethod
    def _failed(artifact: BuildArtifact, detail: str) -> ResolutionResult:
        return ResolutionResult(
            relative_path=artifact.relative_path,
            outcome=ResolutionOutcome.FAILED,
            detail=detail,
        )

    @staticmethod
    def _missing(artifact: BuildArtifact, detail: str) -> ResolutionResult:
        return ResolutionResult(
            relative_path=artifact.relative_path,
            outcome=ResolutionOutcome.PLACEHOLDER_MISSING,
            detail=detail,
        )
