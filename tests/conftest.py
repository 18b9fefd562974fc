"""Shared test fixtures for distsum."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from distsum.core.errors import RemoteUnavailable
from distsum.models.config import FixerConfig
from distsum.registry.document import RegistryDocument
from distsum.storage.local import LocalFileStore

TEMP_PREFIX = "build123"
HOST = "https://repo.example.com"


class InMemoryRemoteStore:
    """Remote store fake holding published objects in a dict."""

    def __init__(self, objects: dict[str, bytes] | None = None) -> None:
        self.objects: dict[str, bytes] = dict(objects or {})
        self.unreachable: set[str] = set()
        self.opened: list[str] = []

    def exists(self, key: str) -> bool:
        if key in self.unreachable:
            raise RemoteUnavailable(f"{key} unreachable")
        return key in self.objects

    def open(self, key: str) -> Iterator[bytes]:
        self.opened.append(key)
        if key not in self.objects:
            raise RemoteUnavailable(f"{key} not found")
        data = self.objects[key]
        for i in range(0, len(data), 4):
            yield data[i:i + 4]


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    """The CLI installs handlers on the ``distsum`` logger; undo that."""
    package_logger = logging.getLogger("distsum")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)


@pytest.fixture
def temp_prefix() -> str:
    return TEMP_PREFIX


@pytest.fixture
def scratch(tmp_path: Path) -> LocalFileStore:
    """Scratch store standing in for the build's temp disk."""
    return LocalFileStore(tmp_path / "temp")


@pytest.fixture
def remote() -> InMemoryRemoteStore:
    return InMemoryRemoteStore()


@pytest.fixture
def config(temp_prefix: str) -> FixerConfig:
    return FixerConfig(temp_prefix=temp_prefix, url_host=HOST)


@pytest.fixture
def fix_config(temp_prefix: str) -> FixerConfig:
    return FixerConfig(temp_prefix=temp_prefix, url_host=HOST, fix_checksums=True)


@pytest.fixture
def put_archive(scratch: LocalFileStore, temp_prefix: str) -> Callable[..., str]:
    """Factory fixture: drop an archive into the build's temp namespace."""

    def _put(relative_path: str, content: bytes = b"") -> str:
        storage_path = f"{temp_prefix}/{relative_path}"
        scratch.write(storage_path, content)
        return storage_path

    return _put


@pytest.fixture
def make_version() -> Callable[..., dict[str, Any]]:
    """Factory fixture: a Composer version entry with a dist block."""

    def _factory(
        name: str = "vendor/pkg",
        version: str = "1.0.0",
        *,
        url: str | None = None,
        shasum: str = "0" * 40,
        **overrides: Any,
    ) -> dict[str, Any]:
        filename = f"{name.split('/')[-1]}-{version}.zip"
        entry: dict[str, Any] = {
            "name": name,
            "version": version,
            "dist": {
                "type": "zip",
                "url": url if url is not None else f"{HOST}/{name}/{filename}",
                "reference": "abcdef",
                "shasum": shasum,
            },
        }
        entry.update(overrides)
        return entry

    return _factory


@pytest.fixture
def make_document() -> Callable[..., RegistryDocument]:
    """Factory fixture: wrap version entries in a Satis ``packages`` document."""

    def _factory(*versions: dict[str, Any]) -> RegistryDocument:
        packages: dict[str, dict[str, Any]] = {}
        for entry in versions:
            packages.setdefault(entry["name"], {})[entry["version"]] = entry
        return RegistryDocument({"packages": packages})

    return _factory
