"""MetadataReconciler: rewrites stale ``dist.shasum`` values.

For every (package, version) record the checks run in a fixed order::

    no dist -> missing shasum/url -> external URL -> no sidecar
        -> checksum already equal -> rewrite

Only the last step touches the document.  A second pass over the same
document and sidecars is therefore a no-op.  The reconciler is the single
writer of the document; it does not spread work over threads.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping

from distsum.core.errors import FormatError, IOFailure
from distsum.core.hasher import is_valid_digest
from distsum.core.paths import is_absolute_url, sidecar_path_for, strip_host
from distsum.models.config import FixerConfig
from distsum.models.reports import ReconcileOutcome, ReconcileReport, ReconcileResult
from distsum.registry.document import RegistryDocument, VersionRecord
from distsum.storage import LocalStore

logger = logging.getLogger(__name__)


class SidecarLookup:
    """Reads sidecar checksums written by the resolver.

    Calling the lookup with an archive's relative path returns its digest,
    or ``None`` when that archive was not part of this build.
    """

    def __init__(self, store: LocalStore, temp_prefix: str) -> None:
        self._store = store
        self._temp_prefix = temp_prefix

    def path_for(self, relative_path: str) -> str:
        return sidecar_path_for(relative_path, self._temp_prefix)

    def __call__(self, relative_path: str) -> str | None:
        if "\x00" in relative_path:
            raise FormatError(f"Archive path {relative_path!r} contains a NUL byte")
        try:
            relative_path.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise FormatError(f"Archive path {relative_path!r} is not valid UTF-8") from exc
        sidecar = self.path_for(relative_path)
        if not self._store.exists(sidecar):
            return None
        checksum = self._store.read(sidecar).decode("utf-8", errors="replace").strip()
        if not is_valid_digest(checksum):
            raise FormatError(f"Checksum file {sidecar} holds {checksum!r}")
        return checksum


class ReconcileVisitor:
    """Capabilities the reconciler needs while walking the document.

    Parameters
    ----------
    sidecar_lookup:
        Maps a relative archive path to its sidecar digest or ``None``.
    is_external:
        Decides whether a host-stripped dist path is hosted elsewhere.
    log:
        Logger receiving per-record diagnostics.
    """

    def __init__(
        self,
        sidecar_lookup: Callable[[str], str | None],
        *,
        is_external: Callable[[str], bool] = is_absolute_url,
        log: logging.Logger | None = None,
    ) -> None:
        self.sidecar_lookup = sidecar_lookup
        self.is_external = is_external
        self.log = log or logger

    @classmethod
    def for_store(cls, store: LocalStore, config: FixerConfig) -> ReconcileVisitor:
        return cls(SidecarLookup(store, config.temp_prefix))


class MetadataReconciler:
    """Brings every locally hosted version's shasum in line with its sidecar.

    Parameters
    ----------
    visitor:
        Sidecar lookup, external-URL predicate, and logger.
    url_host:
        Host prefix stripped from ``dist.url`` to recover the archive's
        relative path.  ``None`` leaves URLs as they are.
    """

    def __init__(self, visitor: ReconcileVisitor, url_host: str | None = None) -> None:
        self._visitor = visitor
        self._url_host = url_host

    def reconcile(self, document: RegistryDocument) -> ReconcileReport:
        results = [self.visit(record) for record in document.iter_versions()]
        report = ReconcileReport(results=results)
        self._visitor.log.info(
            "Reconciled %d version(s): %d rewritten", len(results), report.modified_count
        )
        return report

    def visit(self, record: VersionRecord) -> ReconcileResult:
        """Evaluate one version record, rewriting its shasum if stale."""
        log = self._visitor.log
        label = f"{record.package_name}:{record.version_string}"

        if "dist" not in record.data:
            log.debug("Version %s does not have a dist - skipping.", label)
            return self._result(record, ReconcileOutcome.NO_DIST)

        dist = record.dist
        if not isinstance(dist, Mapping):
            log.debug("Version %s has a malformed dist - skipping.", label)
            return self._result(record, ReconcileOutcome.MALFORMED, detail="dist is not an object")

        if "shasum" not in dist or "url" not in dist:
            log.debug("Version %s does not have a shasum or url - skipping.", label)
            return self._result(record, ReconcileOutcome.INCOMPLETE_DIST)

        url = dist["url"]
        previous = dist["shasum"]
        if not isinstance(url, str):
            log.debug("Version %s has a non-string url - skipping.", label)
            return self._result(
                record, ReconcileOutcome.MALFORMED, previous, detail="url is not a string"
            )

        path = strip_host(url, self._url_host)
        if self._visitor.is_external(path):
            log.debug("Version %s has a remote url - skipping.", label)
            return self._result(record, ReconcileOutcome.EXTERNAL, previous)

        try:
            checksum = self._visitor.sidecar_lookup(path)
        except FormatError as exc:
            log.debug("Version %s: %s - skipping.", label, exc)
            return self._result(record, ReconcileOutcome.MALFORMED, previous, detail=str(exc))
        except IOFailure as exc:
            log.debug("Version %s: checksum unreadable (%s) - skipping.", label, exc)
            return self._result(record, ReconcileOutcome.NO_SIDECAR, previous, detail=str(exc))

        if checksum is None:
            log.debug("Checksum file for %s does not exist - skipping.", path)
            return self._result(record, ReconcileOutcome.NO_SIDECAR, previous)

        if previous == checksum:
            log.debug(
                "Version %s has a local url and the checksum is correct - skipping.", label
            )
            return self._result(record, ReconcileOutcome.UNCHANGED, previous, checksum)

        record.set_shasum(checksum)
        log.info("Version %s has a local url - fixing checksum.", label)
        return self._result(record, ReconcileOutcome.REWRITTEN, previous, checksum)

    @staticmethod
    def _result(
        record: VersionRecord,
        outcome: ReconcileOutcome,
        previous: object = None,
        shasum: str | None = None,
        *,
        detail: str = "",
    ) -> ReconcileResult:
        previous_shasum = previous if isinstance(previous, str) else None
        return ReconcileResult(
            package_name=record.package_name,
            version_string=record.version_string,
            outcome=outcome,
            previous_shasum=previous_shasum,
            shasum=shasum or previous_shasum,
            detail=detail,
        )
