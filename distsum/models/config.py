"""Per-build checksum fixer configuration."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from distsum.core.errors import FormatError

DEFAULT_ARCHIVE_EXTENSIONS: tuple[str, ...] = (".tar", ".zip")


class FixerConfig(BaseModel):
    """Typed configuration for one scan/resolve/reconcile pass.

    ``url_host`` is resolved once from the build config by
    :meth:`from_build_config`; nothing downstream looks at the raw build
    config again.
    """

    model_config = ConfigDict(frozen=True)

    temp_prefix: str
    fix_checksums: bool = False
    url_host: str | None = None
    archive_extensions: tuple[str, ...] = DEFAULT_ARCHIVE_EXTENSIONS

    @classmethod
    def from_build_config(
        cls,
        build_config: Mapping[str, Any],
        *,
        temp_prefix: str,
        fix_checksums: bool = False,
        archive_extensions: tuple[str, ...] = DEFAULT_ARCHIVE_EXTENSIONS,
    ) -> FixerConfig:
        """Resolve the URL host from a Satis-style build config.

        Fallback chain: ``archive.prefix-url``, then ``homepage``.  The
        homepage is used only when ``archive`` or its ``prefix-url`` key is
        absent; an explicit ``null`` prefix-url means "no host".
        """
        archive = build_config.get("archive", {})
        if not isinstance(archive, Mapping):
            raise FormatError(
                f"build config 'archive' must be an object, got {type(archive).__name__}"
            )
        url_host = archive.get("prefix-url", build_config.get("homepage"))
        if url_host is not None and not isinstance(url_host, str):
            raise FormatError(
                f"archive prefix-url must be a string, got {type(url_host).__name__}"
            )
        return cls(
            temp_prefix=temp_prefix,
            fix_checksums=fix_checksums,
            url_host=url_host or None,
            archive_extensions=tuple(archive_extensions),
        )
