"""In-memory registry document with per-record modification tracking.

Two layouts are accepted:

* Satis / Composer v1: ``{"packages": {name: {version: {...}}}}``
* bare mapping: ``{name: {version: {...}}}``

Composer v2 ``p2`` files list versions as an array instead of a mapping;
those are walked too, keyed by each entry's ``version`` field.

Version records are handed out as live views: editing ``record.data``
edits the document.  Nothing is re-serialised until :meth:`save`.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterator, MutableMapping
from pathlib import Path
from typing import Any

from distsum.core.errors import FormatError, IOFailure

logger = logging.getLogger(__name__)


class VersionRecord:
    """A single (package, version) entry of the registry."""

    __slots__ = ("package_name", "version_string", "data", "_modified")

    def __init__(
        self,
        package_name: str,
        version_string: str,
        data: MutableMapping[str, Any],
    ) -> None:
        self.package_name = package_name
        self.version_string = version_string
        self.data = data
        self._modified = False

    @property
    def dist(self) -> Any:
        return self.data.get("dist")

    @property
    def modified(self) -> bool:
        return self._modified

    def set_shasum(self, shasum: str) -> None:
        """Overwrite ``dist.shasum`` and flag the record for persistence."""
        self.data["dist"]["shasum"] = shasum
        self._modified = True

    def __repr__(self) -> str:
        return f"VersionRecord({self.package_name}:{self.version_string})"


class RegistryDocument:
    """Ordered package -> version -> record mapping loaded from JSON."""

    def __init__(self, data: MutableMapping[str, Any]) -> None:
        if not isinstance(data, MutableMapping):
            raise FormatError("registry document must be a JSON object")
        self._data = data
        self._records: list[VersionRecord] | None = None

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------

    @classmethod
    def from_path(cls, path: Path | str) -> RegistryDocument:
        path = Path(path)
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise IOFailure(f"Cannot read registry {path}: {exc}") from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise FormatError(f"Registry {path} is not valid JSON: {exc}") from exc
        return cls(data)

    def to_json(self) -> str:
        return json.dumps(self._data, indent=4, ensure_ascii=False) + "\n"

    def save(self, path: Path | str) -> None:
        """Write the document atomically to *path*."""
        path = Path(path)
        try:
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(self.to_json())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise IOFailure(f"Cannot write registry {path}: {exc}") from exc
        logger.info("Saved registry to %s", path)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    @property
    def data(self) -> MutableMapping[str, Any]:
        return self._data

    @property
    def packages(self) -> MutableMapping[str, Any]:
        packages = self._data.get("packages")
        if isinstance(packages, MutableMapping):
            return packages
        return self._data

    def iter_versions(self) -> Iterator[VersionRecord]:
        """Yield every version record; the same objects on every call."""
        if self._records is None:
            self._records = list(self._collect())
        return iter(self._records)

    def _collect(self) -> Iterator[VersionRecord]:
        for package_name, versions in self.packages.items():
            if isinstance(versions, MutableMapping):
                for version_string, data in versions.items():
                    if isinstance(data, MutableMapping):
                        yield VersionRecord(package_name, str(version_string), data)
            elif isinstance(versions, list):
                for data in versions:
                    if isinstance(data, MutableMapping):
                        yield VersionRecord(
                            package_name, str(data.get("version", "")), data
                        )
            else:
                logger.debug("Package %s has no version map - skipping.", package_name)

    @property
    def modified_records(self) -> list[VersionRecord]:
        return [r for r in self.iter_versions() if r.modified]

    @property
    def is_modified(self) -> bool:
        return any(r.modified for r in self.iter_versions())
