"""Stage: save checksums for every archive awaiting upload.

Scans the build's temp namespace and writes one sidecar checksum per
archive.  Runs before the registry is fixed and before anything is
uploaded.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any

from distsum.core.resolver import ChecksumResolver
from distsum.core.scanner import ArtifactScanner
from distsum.models.artifacts import ResolutionResult
from distsum.models.config import FixerConfig
from distsum.stages.base import BaseStage

logger = logging.getLogger(__name__)


class SaveChecksumsStage(BaseStage):
    """Scan + resolve: produces the sidecar checksums."""

    @property
    def stage_id(self) -> str:
        return "save_checksums"

    @property
    def display_name(self) -> str:
        return "Save Checksums"

    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        """Reads ``config``, ``local_store``, ``remote_store``, ``max_workers``."""
        config: FixerConfig = run_context["config"]
        local = run_context["local_store"]

        artifacts = ArtifactScanner(local, config).scan()
        resolver = ChecksumResolver(
            local,
            run_context.get("remote_store"),
            config,
            max_workers=run_context.get("max_workers", 4),
        )
        results: list[ResolutionResult] = resolver.resolve_all(artifacts)
        counts = Counter(r.outcome.value for r in results)

        return {
            "artifact_count": len(artifacts),
            "results": results,
            "outcomes": dict(counts),
        }
