"""Pure path-construction rules shared by the scanner and the reconciler.

All functions here are string-in, string-out with no I/O.  The scanner and
the reconciler must derive identical sidecar paths for the same archive, so
both go through :func:`sidecar_path_for`.

Layout::

    {temp_prefix}/{relative_path}                    archive in scratch storage
    {temp_prefix}/.checksums/{relative_path}.sha1    sidecar checksum
    dist/{relative_path}                             published remote copy
"""

from __future__ import annotations

from pathlib import Path

CHECKSUM_NAMESPACE = ".checksums"
CHECKSUM_SUFFIX = ".sha1"
PUBLISH_PREFIX = "dist/"

_ABSOLUTE_SCHEMES = ("http://", "https://")


def relative_path_for(storage_path: str, temp_prefix: str) -> str:
    """Strip the temp prefix segment from a storage path.

    ``build123/vendor/pkg/pkg-1.0.0.zip`` -> ``vendor/pkg/pkg-1.0.0.zip``.
    A path outside the prefix is only trimmed of its leading slash.
    """
    path = storage_path
    if temp_prefix and path.startswith(temp_prefix):
        path = path[len(temp_prefix):]
    return path.lstrip("/")


def sidecar_path_for(relative_path: str, temp_prefix: str) -> str:
    """Return the sidecar checksum path for an archive's relative path."""
    name = f"{CHECKSUM_NAMESPACE}/{relative_path.lstrip('/')}{CHECKSUM_SUFFIX}"
    prefix = temp_prefix.rstrip("/")
    return f"{prefix}/{name}" if prefix else name


def remote_key_for(relative_path: str) -> str:
    """Return the key under which the published archive lives remotely."""
    path = relative_path.lstrip("/")
    if path.startswith(PUBLISH_PREFIX):
        return path
    return PUBLISH_PREFIX + path


def real_path_for(root: Path | str, storage_path: str) -> Path:
    """Map a storage path onto the scratch store's filesystem root."""
    return Path(root) / storage_path.lstrip("/")


def strip_host(url: str, url_host: str | None) -> str:
    """Remove the configured host from a dist URL and trim leading slashes.

    Every occurrence of *url_host* is removed, matching how the registry
    generator builds the URLs in the first place.
    """
    path = url.replace(url_host, "") if url_host else url
    return path.lstrip("/")


def is_absolute_url(path: str) -> bool:
    """True for ``http://`` and ``https://`` URLs."""
    return path.startswith(_ABSOLUTE_SCHEMES)


def has_archive_extension(path: str, extensions: tuple[str, ...]) -> bool:
    return path.endswith(tuple(extensions))
