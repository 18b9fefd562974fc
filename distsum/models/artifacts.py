"""Build artifact and checksum models (immutable once created)."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

from distsum.core.hasher import is_valid_digest


class BuildArtifact(BaseModel):
    """An archive discovered under the build's temporary namespace.

    All path fields are derived from ``storage_path`` by the pure rules in
    :mod:`distsum.core.paths`.  ``size == 0`` marks a placeholder archive.
    """

    model_config = ConfigDict(frozen=True)

    storage_path: str  # "build123/vendor/pkg/pkg-1.0.0.zip"
    real_path: Path
    relative_path: str  # "vendor/pkg/pkg-1.0.0.zip"
    sidecar_path: str  # "build123/.checksums/vendor/pkg/pkg-1.0.0.zip.sha1"
    size: int = 0

    @property
    def is_placeholder(self) -> bool:
        return self.size == 0


class ChecksumSource(str, Enum):
    """Where a checksum's content was read from."""

    LOCAL = "local"
    REMOTE = "remote"


class ChecksumEntry(BaseModel):
    """A relative path mapped to its SHA-1 hex digest."""

    model_config = ConfigDict(frozen=True)

    relative_path: str
    checksum: str
    sidecar_path: str
    source: ChecksumSource = ChecksumSource.LOCAL

    @field_validator("checksum")
    @classmethod
    def _checksum_is_hex_digest(cls, value: str) -> str:
        if not is_valid_digest(value):
            raise ValueError(f"not a 40-character lowercase hex digest: {value!r}")
        return value


class ResolutionOutcome(str, Enum):
    """Terminal state of a single artifact after checksum resolution."""

    HASHED = "hashed"
    PLACEHOLDER_SKIPPED = "placeholder_skipped"
    PLACEHOLDER_FETCHED = "placeholder_fetched"
    PLACEHOLDER_MISSING = "placeholder_missing"
    FAILED = "failed"


class ResolutionResult(BaseModel):
    """What happened to one artifact during resolution."""

    model_config = ConfigDict(frozen=True)

    relative_path: str
    outcome: ResolutionOutcome
    entry: ChecksumEntry | None = None
    detail: str = ""

    @property
    def checksum(self) -> str | None:
        return self.entry.checksum if self.entry else None
