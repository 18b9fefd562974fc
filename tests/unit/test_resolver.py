"""Tests for ChecksumResolver: fresh hashing, placeholder gating and recovery."""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterator

import pytest

from distsum.core.errors import RemoteUnavailable
from distsum.core.resolver import ChecksumResolver
from distsum.core.scanner import ArtifactScanner
from distsum.models.artifacts import ChecksumSource, ResolutionOutcome

SIDECAR = "build123/.checksums/vendor/pkg/pkg-1.0.0.zip.sha1"


def _scan(scratch, config):
    return ArtifactScanner(scratch, config).scan()


class _TruncatingRemote:
    """Remote whose objects exist but whose stream drops after a few chunks."""

    def exists(self, key: str) -> bool:
        return True

    def open(self, key: str) -> Iterator[bytes]:
        yield b"first"
        yield b"second"
        raise RemoteUnavailable(f"{key}: connection reset")


class TestFreshArtifacts:
    def test_hashes_content_into_sidecar(self, scratch, remote, config, put_archive):
        content = b"fresh archive content"
        put_archive("vendor/pkg/pkg-1.0.0.zip", content)
        [artifact] = _scan(scratch, config)

        result = ChecksumResolver(scratch, remote, config).resolve(artifact)

        expected = hashlib.sha1(content).hexdigest()
        assert result.outcome == ResolutionOutcome.HASHED
        assert result.checksum == expected
        assert result.entry.source == ChecksumSource.LOCAL
        assert scratch.read(SIDECAR) == expected.encode()
        assert remote.opened == []

    def test_overwrites_stale_sidecar(self, scratch, remote, config, put_archive):
        content = b"new build"
        put_archive("vendor/pkg/pkg-1.0.0.zip", content)
        scratch.write(SIDECAR, "f" * 40)
        [artifact] = _scan(scratch, config)

        ChecksumResolver(scratch, remote, config).resolve(artifact)
        assert scratch.read(SIDECAR).decode() == hashlib.sha1(content).hexdigest()

    def test_fix_mode_does_not_affect_fresh_artifacts(self, scratch, remote, fix_config, put_archive):
        put_archive("vendor/pkg/pkg-1.0.0.zip", b"local")
        remote.objects["dist/vendor/pkg/pkg-1.0.0.zip"] = b"remote"
        [artifact] = _scan(scratch, fix_config)

        result = ChecksumResolver(scratch, remote, fix_config).resolve(artifact)
        assert result.checksum == hashlib.sha1(b"local").hexdigest()

    def test_read_failure_is_soft(self, scratch, remote, config, put_archive):
        put_archive("vendor/pkg/pkg-1.0.0.zip", b"data")
        [artifact] = _scan(scratch, config)
        artifact.real_path.unlink()

        result = ChecksumResolver(scratch, remote, config).resolve(artifact)
        assert result.outcome == ResolutionOutcome.FAILED
        assert not scratch.exists(SIDECAR)


class TestPlaceholders:
    def test_skipped_without_fix_mode(self, scratch, remote, config, put_archive, caplog):
        put_archive("vendor/pkg/pkg-1.0.0.zip", b"")
        remote.objects["dist/vendor/pkg/pkg-1.0.0.zip"] = b"published"
        [artifact] = _scan(scratch, config)

        with caplog.at_level(logging.DEBUG, logger="distsum"):
            result = ChecksumResolver(scratch, remote, config).resolve(artifact)

        assert result.outcome == ResolutionOutcome.PLACEHOLDER_SKIPPED
        assert result.checksum is None
        assert not scratch.exists(SIDECAR)
        assert remote.opened == []
        assert "is a placeholder - skipping checksum" in caplog.text

    def test_recovered_from_remote_in_fix_mode(self, scratch, remote, fix_config, put_archive):
        published = b"previously published archive" * 50
        put_archive("vendor/pkg/pkg-1.0.0.zip", b"")
        remote.objects["dist/vendor/pkg/pkg-1.0.0.zip"] = published
        [artifact] = _scan(scratch, fix_config)

        result = ChecksumResolver(scratch, remote, fix_config).resolve(artifact)

        expected = hashlib.sha1(published).hexdigest()
        assert result.outcome == ResolutionOutcome.PLACEHOLDER_FETCHED
        assert result.entry.source == ChecksumSource.REMOTE
        assert scratch.read(SIDECAR).decode() == expected
        assert remote.opened == ["dist/vendor/pkg/pkg-1.0.0.zip"]

    def test_missing_remote_is_noop(self, scratch, remote, fix_config, put_archive):
        put_archive("vendor/pkg/pkg-1.0.0.zip", b"")
        [artifact] = _scan(scratch, fix_config)

        result = ChecksumResolver(scratch, remote, fix_config).resolve(artifact)
        assert result.outcome == ResolutionOutcome.PLACEHOLDER_MISSING
        assert not scratch.exists(SIDECAR)

    def test_unreachable_remote_is_soft(self, scratch, remote, fix_config, put_archive):
        put_archive("vendor/pkg/pkg-1.0.0.zip", b"")
        remote.unreachable.add("dist/vendor/pkg/pkg-1.0.0.zip")
        [artifact] = _scan(scratch, fix_config)

        result = ChecksumResolver(scratch, remote, fix_config).resolve(artifact)
        assert result.outcome == ResolutionOutcome.FAILED
        assert not scratch.exists(SIDECAR)

    def test_stream_cut_mid_read_writes_nothing(self, scratch, fix_config, put_archive):
        put_archive("vendor/pkg/pkg-1.0.0.zip", b"")
        [artifact] = _scan(scratch, fix_config)

        result = ChecksumResolver(scratch, _TruncatingRemote(), fix_config).resolve(artifact)

        assert result.outcome == ResolutionOutcome.FAILED
        assert "connection reset" in result.detail
        assert not scratch.exists(SIDECAR)

    def test_stream_cut_mid_read_keeps_existing_sidecar(self, scratch, fix_config, put_archive):
        put_archive("vendor/pkg/pkg-1.0.0.zip", b"")
        stale = "f" * 40
        scratch.write(SIDECAR, stale)
        [artifact] = _scan(scratch, fix_config)

        result = ChecksumResolver(scratch, _TruncatingRemote(), fix_config).resolve(artifact)

        assert result.outcome == ResolutionOutcome.FAILED
        assert scratch.read(SIDECAR) == stale.encode()

    def test_no_remote_store_configured(self, scratch, fix_config, put_archive):
        put_archive("vendor/pkg/pkg-1.0.0.zip", b"")
        [artifact] = _scan(scratch, fix_config)

        result = ChecksumResolver(scratch, None, fix_config).resolve(artifact)
        assert result.outcome == ResolutionOutcome.PLACEHOLDER_MISSING


class TestBatch:
    def test_every_artifact_processed_despite_failures(
        self, scratch, remote, fix_config, put_archive
    ):
        put_archive("a/a-1.zip", b"a")
        put_archive("b/b-1.zip", b"")
        put_archive("c/c-1.zip", b"")
        put_archive("d/d-1.tar", b"d")
        remote.objects["dist/b/b-1.zip"] = b"b-published"
        remote.unreachable.add("dist/c/c-1.zip")
        artifacts = _scan(scratch, fix_config)

        results = ChecksumResolver(scratch, remote, fix_config, max_workers=3).resolve_all(artifacts)

        assert [r.relative_path for r in results] == ["a/a-1.zip", "b/b-1.zip", "c/c-1.zip", "d/d-1.tar"]
        assert [r.outcome for r in results] == [
            ResolutionOutcome.HASHED,
            ResolutionOutcome.PLACEHOLDER_FETCHED,
            ResolutionOutcome.FAILED,
            ResolutionOutcome.HASHED,
        ]
        assert scratch.exists("build123/.checksums/d/d-1.tar.sha1")

    def test_unexpected_exception_isolated(self, scratch, remote, config, put_archive, monkeypatch):
        put_archive("a/a-1.zip", b"a")
        put_archive("b/b-1.zip", b"b")
        artifacts = _scan(scratch, config)
        resolver = ChecksumResolver(scratch, remote, config, max_workers=2)
        original = resolver.resolve

        def _resolve(artifact):
            if artifact.relative_path.startswith("a/"):
                raise ValueError("bug")
            return original(artifact)

        monkeypatch.setattr(resolver, "resolve", _resolve)
        results = resolver.resolve_all(artifacts)

        assert results[0].outcome == ResolutionOutcome.FAILED
        assert "bug" in results[0].detail
        assert results[1].outcome == ResolutionOutcome.HASHED

    def test_empty_batch(self, scratch, remote, config):
        assert ChecksumResolver(scratch, remote, config).resolve_all([]) == []

    @pytest.mark.parametrize("workers", [0, 1, 16])
    def test_worker_bounds(self, scratch, remote, config, put_archive, workers):
        put_archive("a/a-1.zip", b"a")
        results = ChecksumResolver(scratch, remote, config, max_workers=workers).resolve_all(
            _scan(scratch, config)
        )
        assert results[0].outcome == ResolutionOutcome.HASHED
