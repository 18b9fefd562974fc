"""Runtime settings: env-driven.

Reads from a ``.env`` file and ``DISTSUM_*`` environment variables.  CLI
options override these per invocation.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide defaults for the checksum fixer.

    Examples
    --------
    Override via environment::

        export DISTSUM_TEMP_ROOT=/var/build/tmp
        export DISTSUM_FIX_CHECKSUMS=true
        export DISTSUM_REMOTE_BASE_URL=https://packages.example.com
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DISTSUM_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "WARNING"

    # Scratch storage
    temp_root: Path = Path(".distsum/temp")
    temp_prefix: str = ""
    archive_extensions: tuple[str, ...] = (".tar", ".zip")

    # Placeholder recovery
    fix_checksums: bool = False
    remote_base_url: str = ""
    remote_timeout_seconds: float = 30.0

    # Worker pool for hashing and remote reads
    max_workers: int = 8


# Module-level singleton: import as `from distsum.config import settings`
settings = Settings()
