"""SHA-1 helpers for content fingerprints.

``dist.shasum`` in a Composer registry is a SHA-1 hex digest, so that is
the only algorithm used here.  Digests are always computed in full before
anyone gets to see them.
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Iterable
from pathlib import Path

DIGEST_LENGTH = 40
CHUNK_SIZE = 1 << 16

_DIGEST_RE = re.compile(r"[0-9a-f]{40}")


def sha1_hex(data: bytes) -> str:
    """Return the SHA-1 hex digest of raw bytes."""
    return hashlib.sha1(data).hexdigest()


def sha1_chunks(chunks: Iterable[bytes]) -> str:
    """Hash an iterable of byte chunks without materialising the whole body."""
    digest = hashlib.sha1()
    for chunk in chunks:
        if chunk:
            digest.update(chunk)
    return digest.hexdigest()


def sha1_file(path: Path | str, chunk_size: int = CHUNK_SIZE) -> str:
    """Stream a file from disk through SHA-1."""
    with Path(path).open("rb") as fh:
        return sha1_chunks(iter(lambda: fh.read(chunk_size), b""))


def is_valid_digest(value: object) -> bool:
    """True if *value* is a 40-character lowercase hex string."""
    return isinstance(value, str) and _DIGEST_RE.fullmatch(value) is not None
