"""Stage: fix ``dist.shasum`` values in the registry document.

Consumes the sidecar checksums written by :mod:`save_checksums` and
rewrites any stale shasum in place.  Persisting the document is left to
the orchestrator.
"""

from __future__ import annotations

import logging
from typing import Any

from distsum.core.reconciler import MetadataReconciler, ReconcileVisitor
from distsum.models.config import FixerConfig
from distsum.registry.document import RegistryDocument
from distsum.stages.base import BaseStage

logger = logging.getLogger(__name__)


class FixPackagesStage(BaseStage):
    """Reconcile the registry document against sidecar checksums."""

    @property
    def stage_id(self) -> str:
        return "fix_packages"

    @property
    def display_name(self) -> str:
        return "Fix Packages Files"

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        """Reads ``config``, ``local_store``, ``document``."""
        config: FixerConfig = run_context["config"]
        document: RegistryDocument = run_context["document"]

        visitor = ReconcileVisitor.for_store(run_context["local_store"], config)
        report = MetadataReconciler(visitor, config.url_host).reconcile(document)

        return {
            "report": report,
            "modified_count": report.modified_count,
            "document_modified": document.is_modified,
        }
