"""Error taxonomy for checksum resolution and reconciliation.

Everything except ``ScanError`` is scoped to a single artifact or version
record: it is logged, recorded in the pass report, and the pass continues.
"""

from __future__ import annotations


class ChecksumError(RuntimeError):
    """Base class for all distsum errors."""


class IOFailure(ChecksumError):
    """Raised when a local scratch file cannot be read or written."""


class RemoteUnavailable(ChecksumError):
    """Raised when a remote object is missing or cannot be reached."""


class FormatError(ChecksumError):
    """Raised when a required metadata field is missing or malformed."""


class ScanError(ChecksumError):
    """Raised when the temporary namespace cannot be listed."""
