"""distsum data models: Pydantic v2, frozen."""

from distsum.models.artifacts import (
    BuildArtifact,
    ChecksumEntry,
    ChecksumSource,
    ResolutionOutcome,
    ResolutionResult,
)
from distsum.models.config import DEFAULT_ARCHIVE_EXTENSIONS, FixerConfig
from distsum.models.reports import ReconcileOutcome, ReconcileReport, ReconcileResult

__all__ = [
    # artifacts
    "BuildArtifact",
    "ChecksumEntry",
    "ChecksumSource",
    "ResolutionOutcome",
    "ResolutionResult",
    # config
    "DEFAULT_ARCHIVE_EXTENSIONS",
    "FixerConfig",
    # reports
    "ReconcileOutcome",
    "ReconcileReport",
    "ReconcileResult",
]
