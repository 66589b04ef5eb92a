"""Parallel per-file extraction."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from concurrent.futures import ProcessPoolExecutor, as_completed

from depscope.extraction import ImportExtractor, analyze_file
from depscope.models import FileAnalysis, SourceFile


def _extract_worker(
    position: int,
    source: SourceFile,
    extractors: Mapping[str, ImportExtractor] | None,
) -> tuple[int, FileAnalysis]:
    """Extract a single file, tagged with its input position.

    Module-level function required for ProcessPoolExecutor pickling.
    """
    return position, analyze_file(source, extractors)


def extract_files_parallel(
    sources: Sequence[SourceFile],
    *,
    max_workers: int | None = None,
    extractors: Mapping[str, ImportExtractor] | None = None,
) -> list[FileAnalysis]:
    """Extract imports from files in parallel using ProcessPoolExecutor.

    Each file depends only on its own content, so workers share nothing.
    Files that fail to decode come back marked unparsed rather than
    raising.

    Args:
        sources: Files to extract.
        max_workers: Maximum number of worker processes.
        extractors: Optional language-to-strategy overrides; must be
            picklable.

    Returns:
        One FileAnalysis per source, in input order.
    """
    if not sources:
        return []
    if max_workers is None:
        max_workers = min(os.cpu_count() or 1, len(sources))

    results: list[FileAnalysis | None] = [None] * len(sources)
    with ProcessPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            executor.submit(_extract_worker, position, source, extractors)
            for position, source in enumerate(sources)
        ]
        for future in as_completed(futures):
            position, analysis = future.result()
            results[position] = analysis

    return [analysis for analysis in results if analysis is not None]
