"""Filesystem-backed store rooted at a scratch directory.

Writes go to a temporary sibling file first and are moved into place with
``os.replace``, so a reader sees either the old content or the new content
and never a partial file.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterator
from pathlib import Path

from distsum.core.errors import IOFailure
from distsum.core.hasher import CHUNK_SIZE
from distsum.core.paths import real_path_for

logger = logging.getLogger(__name__)


class LocalFileStore:
    """Store whose keys are paths relative to *root*.

    Parameters
    ----------
    root:
        Directory backing the store.  Created if missing.
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def real_path(self, path: str) -> Path:
        target = real_path_for(self._root, path)
        root = self._root.resolve()
        try:
            resolved = target.resolve()
        except (OSError, ValueError) as exc:
            raise IOFailure(f"Invalid store path {path!r}: {exc}") from exc
        if resolved != root and root not in resolved.parents:
            raise IOFailure(f"Path escapes store root: {path}")
        return target

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def list(self, prefix: str) -> list[str]:
        """Return all files under *prefix* as sorted, root-relative paths.

        A missing prefix directory lists as empty.
        """
        base = self.real_path(prefix) if prefix else self._root
        if not base.exists():
            return []
        try:
            return sorted(
                p.relative_to(self._root).as_posix()
                for p in base.rglob("*")
                if p.is_file()
            )
        except OSError as exc:
            raise IOFailure(f"Cannot list {prefix!r}: {exc}") from exc

    def exists(self, path: str) -> bool:
        return self.real_path(path).is_file()

    def size(self, path: str) -> int:
        try:
            return self.real_path(path).stat().st_size
        except (OSError, ValueError) as exc:
            raise IOFailure(f"Cannot stat {path}: {exc}") from exc

    def read(self, path: str) -> bytes:
        try:
            return self.real_path(path).read_bytes()
        except (OSError, ValueError) as exc:
            raise IOFailure(f"Cannot read {path}: {exc}") from exc

    def open(self, path: str) -> Iterator[bytes]:
        target = self.real_path(path)
        try:
            with target.open("rb") as fh:
                while chunk := fh.read(CHUNK_SIZE):
                    yield chunk
        except OSError as exc:
            raise IOFailure(f"Cannot read {path}: {exc}") from exc

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    def write(self, path: str, data: bytes | str) -> None:
        payload = data.encode("utf-8") if isinstance(data, str) else data
        target = self.real_path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(payload)
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise IOFailure(f"Cannot write {path}: {exc}") from exc
        logger.debug("LocalFileStore: wrote %d bytes to %s", len(payload), path)

    def __repr__(self) -> str:
        return f"LocalFileStore(root={str(self._root)!r})"
