"""Main Typer application.

Entry point: ``distsum`` (configured via pyproject.toml console_scripts).

Commands: fix, save-checksums, reconcile, sidecar-path.
"""

from __future__ import annotations

import json
from contextlib import ExitStack
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape

from distsum.config import settings
from distsum.core.errors import ChecksumError, FormatError
from distsum.core.orchestrator import Orchestrator
from distsum.core.paths import sidecar_path_for
from distsum.log import configure_logging, level_for
from distsum.models.config import FixerConfig
from distsum.stages.base import StageExecutionError
from distsum.storage import RemoteStore
from distsum.storage.local import LocalFileStore
from distsum.storage.remote import HttpObjectStore
from distsum.cli.renderer import RunRenderer

app = typer.Typer(
    name="distsum",
    help="Reconcile dist checksums in a package registry before publishing.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()

# ---------------------------------------------------------------------------
# Shared options
# ---------------------------------------------------------------------------

_BUILD_CONFIG = typer.Option(
    None, "--build-config", "-c", help="Satis-style build config (JSON) for the URL host."
)
_TEMP_ROOT = typer.Option(None, "--temp-root", help="Scratch directory holding the build output.")
_TEMP_PREFIX = typer.Option(None, "--temp-prefix", "-t", help="Build's temporary prefix inside the scratch directory.")
_FIX_CHECKSUMS = typer.Option(
    None,
    "--fix-checksums/--no-fix-checksums",
    help="Recover placeholder checksums from the published copies.",
)
_REMOTE_DIR = typer.Option(None, "--remote-dir", help="Directory mirroring the published dist/ tree.")
_REMOTE_URL = typer.Option(None, "--remote-url", help="Base URL the dist/ tree is published under.")
_WORKERS = typer.Option(None, "--workers", "-w", min=1, help="Worker pool size for hashing.")
_VERBOSE = typer.Option(0, "--verbose", "-v", count=True, help="-v for verbose, -vv for debug output.")
_DRY_RUN = typer.Option(False, "--dry-run", help="Report changes without saving the registry.")


def _load_build_config(path: Path | None) -> dict[str, Any]:
    if path is None:
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise FormatError(f"Cannot load build config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise FormatError(f"Build config {path} must be a JSON object")
    return data


def _fixer_config(
    build_config: Path | None, temp_prefix: str | None, fix_checksums: bool | None
) -> FixerConfig:
    return FixerConfig.from_build_config(
        _load_build_config(build_config),
        temp_prefix=temp_prefix if temp_prefix is not None else settings.temp_prefix,
        fix_checksums=fix_checksums if fix_checksums is not None else settings.fix_checksums,
        archive_extensions=settings.archive_extensions,
    )


def _remote_store(
    stack: ExitStack, remote_dir: Path | None, remote_url: str | None
) -> RemoteStore | None:
    if remote_dir is not None:
        return LocalFileStore(remote_dir)
    url = remote_url or settings.remote_base_url
    if url:
        return stack.enter_context(
            HttpObjectStore(url, timeout=settings.remote_timeout_seconds)
        )
    return None


def _orchestrator(
    stack: ExitStack,
    *,
    build_config: Path | None,
    temp_root: Path | None,
    temp_prefix: str | None,
    fix_checksums: bool | None,
    remote_dir: Path | None,
    remote_url: str | None,
    workers: int | None,
) -> Orchestrator:
    config = _fixer_config(build_config, temp_prefix, fix_checksums)
    local = LocalFileStore(temp_root or settings.temp_root)
    remote = _remote_store(stack, remote_dir, remote_url)
    run_settings = settings.model_copy(update={"max_workers": workers}) if workers else settings
    return Orchestrator(config, local, remote, settings=run_settings)


def _fail(exc: Exception) -> typer.Exit:
    console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    return typer.Exit(code=1)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command(name="fix", help="Save checksums, then fix the registry's dist shasums.")
def fix_cmd(
    registry: Path = typer.Argument(..., help="Registry document (packages.json) to fix."),
    build_config: Path = _BUILD_CONFIG,
    temp_root: Path = _TEMP_ROOT,
    temp_prefix: str = _TEMP_PREFIX,
    fix_checksums: bool | None = _FIX_CHECKSUMS,
    remote_dir: Path = _REMOTE_DIR,
    remote_url: str = _REMOTE_URL,
    workers: int = _WORKERS,
    dry_run: bool = _DRY_RUN,
    verbose: int = _VERBOSE,
) -> None:
    """Run both checksum stages and save the registry if it changed."""
    configure_logging(level_for(verbose, settings.log_level))
    renderer = RunRenderer(console=console)
    with ExitStack() as stack:
        try:
            orchestrator = _orchestrator(
                stack,
                build_config=build_config,
                temp_root=temp_root,
                temp_prefix=temp_prefix,
                fix_checksums=fix_checksums,
                remote_dir=remote_dir,
                remote_url=remote_url,
                workers=workers,
            )
            summary = orchestrator.run(registry, dry_run=dry_run)
        except (ChecksumError, StageExecutionError) as exc:
            raise _fail(exc)

    renderer.print_resolutions(summary.resolutions)
    if summary.report is not None:
        renderer.print_report(summary.report)
    if summary.saved:
        console.print(f"[green]Saved {escape(str(registry))}[/green]")


@app.command(name="save-checksums", help="Write sidecar checksums for the build's archives.")
def save_checksums_cmd(
    build_config: Path = _BUILD_CONFIG,
    temp_root: Path = _TEMP_ROOT,
    temp_prefix: str = _TEMP_PREFIX,
    fix_checksums: bool | None = _FIX_CHECKSUMS,
    remote_dir: Path = _REMOTE_DIR,
    remote_url: str = _REMOTE_URL,
    workers: int = _WORKERS,
    verbose: int = _VERBOSE,
) -> None:
    """Scan the temp namespace and write one sidecar per archive."""
    configure_logging(level_for(verbose, settings.log_level))
    with ExitStack() as stack:
        try:
            orchestrator = _orchestrator(
                stack,
                build_config=build_config,
                temp_root=temp_root,
                temp_prefix=temp_prefix,
                fix_checksums=fix_checksums,
                remote_dir=remote_dir,
                remote_url=remote_url,
                workers=workers,
            )
            results = orchestrator.save_checksums()
        except (ChecksumError, StageExecutionError) as exc:
            raise _fail(exc)

    RunRenderer(console=console).print_resolutions(results)


@app.command(name="reconcile", help="Fix dist shasums from existing sidecar checksums.")
def reconcile_cmd(
    registry: Path = typer.Argument(..., help="Registry document (packages.json) to fix."),
    build_config: Path = _BUILD_CONFIG,
    temp_root: Path = _TEMP_ROOT,
    temp_prefix: str = _TEMP_PREFIX,
    dry_run: bool = _DRY_RUN,
    show_all: bool = typer.Option(False, "--all", help="List every version record."),
    verbose: int = _VERBOSE,
) -> None:
    """Reconcile a registry file against sidecars from an earlier run."""
    configure_logging(level_for(verbose, settings.log_level))
    with ExitStack() as stack:
        try:
            orchestrator = _orchestrator(
                stack,
                build_config=build_config,
                temp_root=temp_root,
                temp_prefix=temp_prefix,
                fix_checksums=False,
                remote_dir=None,
                remote_url=None,
                workers=None,
            )
            summary = orchestrator.reconcile_file(registry, dry_run=dry_run)
        except (ChecksumError, StageExecutionError) as exc:
            raise _fail(exc)

    if summary.report is not None:
        RunRenderer(console=console).print_report(summary.report, show_all=show_all)
    if summary.saved:
        console.print(f"[green]Saved {escape(str(registry))}[/green]")


@app.command(name="sidecar-path", help="Print the sidecar checksum path for an archive.")
def sidecar_path_cmd(
    relative_path: str = typer.Argument(..., help="Archive path relative to the temp prefix."),
    temp_prefix: str = _TEMP_PREFIX,
) -> None:
    prefix = temp_prefix if temp_prefix is not None else settings.temp_prefix
    typer.echo(sidecar_path_for(relative_path, prefix))


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
