"""Reconciliation report models."""

from __future__ import annotations

from collections import Counter
from enum import Enum

from pydantic import BaseModel, ConfigDict


class ReconcileOutcome(str, Enum):
    """Terminal state of a single version record after reconciliation."""

    NO_DIST = "no_dist"
    INCOMPLETE_DIST = "incomplete_dist"
    EXTERNAL = "external"
    MALFORMED = "malformed"
    NO_SIDECAR = "no_sidecar"
    UNCHANGED = "unchanged"
    REWRITTEN = "rewritten"


class ReconcileResult(BaseModel):
    """Outcome for one (package, version) pair."""

    model_config = ConfigDict(frozen=True)

    package_name: str
    version_string: str
    outcome: ReconcileOutcome
    previous_shasum: str | None = None
    shasum: str | None = None
    detail: str = ""


class ReconcileReport(BaseModel):
    """All per-record results of a reconciliation pass."""

    model_config = ConfigDict(frozen=True)

    results: list[ReconcileResult] = []

    @property
    def rewritten(self) -> list[ReconcileResult]:
        return [r for r in self.results if r.outcome == ReconcileOutcome.REWRITTEN]

    @property
    def modified_count(self) -> int:
        return len(self.rewritten)

    def counts(self) -> dict[ReconcileOutcome, int]:
        """Number of records per outcome."""
        return dict(Counter(r.outcome for r in self.results))
