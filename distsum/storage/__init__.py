"""Storage capability protocols.

The scanner, resolver, and reconciler never reach for a global disk; they
are handed objects that satisfy these protocols.  ``LocalFileStore`` serves
the build's scratch directory (and can double as a mirrored remote),
``HttpObjectStore`` reads previously published archives over HTTP.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class LocalStore(Protocol):
    """Scratch storage holding the build's archives and sidecar checksums.

    Paths are ``/``-separated and relative to the store root.
    """

    def list(self, prefix: str) -> list[str]:
        """Return every file under *prefix*, recursively."""
        ...

    def size(self, path: str) -> int:
        ...

    def read(self, path: str) -> bytes:
        ...

    def open(self, path: str) -> Iterator[bytes]:
        """Yield the file's content in chunks."""
        ...

    def write(self, path: str, data: bytes | str) -> None:
        """Write *data* to *path* atomically, creating parent directories."""
        ...

    def exists(self, path: str) -> bool:
        ...

    def real_path(self, path: str) -> Path:
        """Return the filesystem location backing *path*."""
        ...


@runtime_checkable
class RemoteStore(Protocol):
    """Read-only view of previously published archives."""

    def exists(self, key: str) -> bool:
        ...

    def open(self, key: str) -> Iterator[bytes]:
        """Yield the object's content in chunks.

        Raises ``RemoteUnavailable`` when the object cannot be read.
        """
        ...


__all__ = ["LocalStore", "RemoteStore"]
