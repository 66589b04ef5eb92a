"""CLI entry point for depscope."""

from __future__ import annotations

import enum
import json
from pathlib import Path
from typing import Annotated

import typer

from depscope.analyzer import Analyzer, fingerprint
from depscope.discovery import discover_files, discover_manifests
from depscope.languages import LANGUAGES
from depscope.models import Report, SourceFile
from depscope.toon import encode

_DEFAULT_MAX_FILE_SIZE = 1_000_000  # 1 MB
_CACHE_HEADER = "# depscope fingerprint: "


class OutputFormat(str, enum.Enum):
    JSON = "json"
    TOON = "toon"


def _read_cache(cache: Path, key: str) -> str | None:
    """Return cached output if the cache was written for the same sources."""
    if not cache.is_file():
        return None
    try:
        header, _, body = cache.read_text("utf-8").partition("\n")
    except (OSError, UnicodeDecodeError):
        return None
    if header != f"{_CACHE_HEADER}{key}":
        return None
    return body


def _filter_by_size(
    root: Path, files: list[tuple[Path, str]], max_size_bytes: int
) -> list[tuple[Path, str]]:
    """Filter out files exceeding the size limit.

    Args:
        root: Repository root directory.
        files: List of (rel_path, lang_name) tuples.
        max_size_bytes: Skip files larger than this.

    Returns:
        Filtered list with oversized files removed.
    """
    kept: list[tuple[Path, str]] = []
    for rel_path, lang_name in files:
        try:
            size = (root / rel_path).stat().st_size
        except OSError:
            kept.append((rel_path, lang_name))
            continue
        if size > max_size_bytes:
            typer.echo(
                f"Warning: {rel_path}: skipped (>{max_size_bytes} bytes)", err=True
            )
            continue
        kept.append((rel_path, lang_name))
    return kept


def _read_sources(root: Path, files: list[tuple[Path, str]]) -> list[SourceFile]:
    """Read file bytes; decoding is left to the analyzer."""
    sources: list[SourceFile] = []
    for rel_path, lang_name in files:
        try:
            content = (root / rel_path).read_bytes()
        except OSError as exc:
            typer.echo(f"Warning: failed to read {rel_path}: {exc}", err=True)
            continue
        sources.append(
            SourceFile(path=rel_path.as_posix(), language=lang_name, content=content)
        )
    return sources


def _read_manifests(root: Path, exclude: list[str] | None) -> list[tuple[str, str]]:
    manifests: list[tuple[str, str]] = []
    for rel_path in discover_manifests(root, extra_ignores=exclude):
        try:
            text = (root / rel_path).read_text("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            typer.echo(f"Warning: failed to read {rel_path}: {exc}", err=True)
            continue
        manifests.append((rel_path.as_posix(), text))
    return manifests


def _warn_degraded(report: Report) -> None:
    for fa in report.files:
        if not fa.parsed:
            typer.echo(f"Warning: {fa.path}: not parsed ({fa.error})", err=True)
    for error in report.manifest_errors:
        typer.echo(
            f"Warning: {error.source}: manifest skipped ({error.reason})", err=True
        )


app = typer.Typer(
    name="depscope",
    help="Analyze a repository's dependency graph and report risks.",
    no_args_is_help=False,
)


@app.command()
def main(
    root: Annotated[
        Path,
        typer.Argument(
            help="Repository root directory.",
            exists=True,
            file_okay=False,
            resolve_path=True,
        ),
    ] = Path("."),
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format."),
    ] = OutputFormat.JSON,
    language: Annotated[
        str | None,
        typer.Option(
            "--language",
            "-l",
            help="Restrict to a specific language (e.g., typescript).",
        ),
    ] = None,
    exclude: Annotated[
        list[str] | None,
        typer.Option(
            "--exclude", "-x", help="Gitignore-style pattern to skip (repeatable)."
        ),
    ] = None,
    max_file_size: Annotated[
        int,
        typer.Option(
            "--max-file-size",
            min=1,
            help="Skip files larger than this many bytes (default: 1MB).",
        ),
    ] = _DEFAULT_MAX_FILE_SIZE,
    workers: Annotated[
        int,
        typer.Option(
            "--workers",
            "-w",
            min=1,
            help="Worker processes for import extraction.",
        ),
    ] = 1,
    cache: Annotated[
        Path | None,
        typer.Option(
            "--cache", help="Cache file; reused while the sources are unchanged."
        ),
    ] = None,
) -> None:
    """Analyze a repository and print the dependency report to stdout."""
    if language and language not in LANGUAGES:
        typer.echo(
            f"Error: unsupported language '{language}'. "
            f"Supported: {', '.join(LANGUAGES)}",
            err=True,
        )
        raise typer.Exit(1)

    files = discover_files(root, extra_ignores=exclude, language_filter=language)
    if not files:
        typer.echo("No source files found.", err=True)
        raise typer.Exit(1)

    files = _filter_by_size(root, files, max_file_size)
    if not files:
        typer.echo("No source files found (all exceeded size limit).", err=True)
        raise typer.Exit(1)

    sources = _read_sources(root, files)
    if not sources:
        typer.echo("No files could be read.", err=True)
        raise typer.Exit(1)

    manifests = _read_manifests(root, exclude)
    key = ""
    if cache:
        manifest_sources = [
            SourceFile(path=path, language="manifest", content=text)
            for path, text in manifests
        ]
        key = f"{output_format.value}:{fingerprint([*sources, *manifest_sources])}"
        cached = _read_cache(cache, key)
        if cached is not None:
            typer.echo(cached, nl=False)
            return

    report = Analyzer(max_workers=workers).analyze(sources, manifests)
    _warn_degraded(report)

    if output_format == OutputFormat.TOON:
        output = encode(report, repo_name=root.name)
    else:
        output = json.dumps(report.to_dict(), indent=2)

    if cache:
        cache.write_text(f"{_CACHE_HEADER}{key}\n{output}\n", "utf-8")
    typer.echo(output)
