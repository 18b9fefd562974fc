"""Pipeline orchestrator: runs the checksum stages in order.

The orchestrator owns the run context handed to each stage and is the
only place the registry document is written back to disk.  It decides
nothing about *when* it runs; the surrounding build calls it right before
uploading.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict

from distsum.config import Settings, settings as default_settings
from distsum.models.artifacts import ResolutionResult
from distsum.models.config import FixerConfig
from distsum.models.reports import ReconcileReport
from distsum.registry.document import RegistryDocument
from distsum.stages.fix_packages import FixPackagesStage
from distsum.stages.save_checksums import SaveChecksumsStage
from distsum.storage import LocalStore, RemoteStore

logger = logging.getLogger(__name__)


class RunSummary(BaseModel):
    """What one orchestrated run did."""

    model_config = ConfigDict(frozen=True)

    resolutions: list[ResolutionResult] = []
    report: ReconcileReport | None = None
    saved: bool = False


class Orchestrator:
    """Coordinates scanning, resolution, and reconciliation for one build.

    Parameters
    ----------
    config:
        Per-build configuration (temp prefix, fix mode, URL host).
    local:
        Scratch storage holding archives and sidecars.
    remote:
        Published archive storage, used for placeholders in fix mode.
    settings:
        Process settings; supplies the worker pool size.
    """

    def __init__(
        self,
        config: FixerConfig,
        local: LocalStore,
        remote: RemoteStore | None = None,
        *,
        settings: Settings | None = None,
    ) -> None:
        self.config = config
        self.local = local
        self.remote = remote
        self._settings = settings or default_settings
        self.save_stage = SaveChecksumsStage()
        self.fix_stage = FixPackagesStage()

    def _context(self, **extra: Any) -> dict[str, Any]:
        context: dict[str, Any] = {
            "config": self.config,
            "local_store": self.local,
            "remote_store": self.remote,
            "max_workers": self._settings.max_workers,
        }
        context.update(extra)
        return context

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def save_checksums(self) -> list[ResolutionResult]:
        """Run the save-checksums stage and return per-artifact results."""
        result = self.save_stage.run_stage(self._context())
        return result["results"]

    def fix_packages(self, document: RegistryDocument) -> ReconcileReport:
        """Run the fix-packages stage against an in-memory document."""
        result = self.fix_stage.run_stage(self._context(document=document))
        return result["report"]

    # ------------------------------------------------------------------
    # Full run
    # ------------------------------------------------------------------

    def run(self, registry_path: Path | str, *, dry_run: bool = False) -> RunSummary:
        """Save checksums, fix the registry, and persist it if it changed."""
        resolutions = self.save_checksums()
        return self.reconcile_file(registry_path, dry_run=dry_run, resolutions=resolutions)

    def reconcile_file(
        self,
        registry_path: Path | str,
        *,
        dry_run: bool = False,
        resolutions: list[ResolutionResult] | None = None,
    ) -> RunSummary:
        """Load, reconcile, and (unless *dry_run*) save a registry file."""
        document = RegistryDocument.from_path(registry_path)
        report = self.fix_packages(document)

        saved = False
        if document.is_modified and not dry_run:
            document.save(registry_path)
            saved = True
        elif document.is_modified:
            logger.info(
                "Dry run: %d record(s) would be rewritten in %s",
                report.modified_count,
                registry_path,
            )

        return RunSummary(resolutions=resolutions or [], report=report, saved=saved)
