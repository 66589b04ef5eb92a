"""Analysis pipeline: extraction through recommendations."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from depscope.cycles import find_cycles
from depscope.extraction import ImportExtractor, analyze_file
from depscope.graph import build_graph, rank_files
from depscope.issues import circular_issues, find_missing, find_unused
from depscope.languages import language_for_path
from depscope.manifests import load_manifests
from depscope.metrics import graph_metrics, node_metrics
from depscope.models import FileAnalysis, Report, SourceFile
from depscope.resolution import resolve_file
from depscope.risk import RiskThresholds, assess_risk, generate_recommendations


def fingerprint(sources: Iterable[SourceFile]) -> str:
    """Order-independent hash of each file's path, language and content.

    Suitable as a cache key for a Report built from the same files.
    """
    digest = hashlib.sha256()
    for source in sorted(sources, key=lambda s: s.path):
        content = source.content
        if isinstance(content, str):
            content = content.encode("utf-8", errors="surrogatepass")
        digest.update(source.path.encode("utf-8"))
        digest.update(b"\0")
        digest.update(source.language.encode("utf-8"))
        digest.update(b"\0")
        digest.update(content)
        digest.update(b"\0")
    return digest.hexdigest()


def _prepare(sources: Iterable[SourceFile]) -> list[SourceFile]:
    """Drop repeated paths and fill in missing language tags."""
    unique: dict[str, SourceFile] = {}
    for source in sources:
        if source.path in unique:
            continue
        if not source.language:
            lang = language_for_path(source.path)
            source = replace(source, language=lang.name if lang else "unknown")
        unique[source.path] = source
    return list(unique.values())


@dataclass(frozen=True)
class Analyzer:
    """Configured dependency analyzer.

    Holds configuration only; every call to ``analyze`` builds its report
    from scratch, so one instance can serve concurrent analyses.

    Attributes:
        thresholds: Limits used for risk scoring and recommendations.
        max_workers: Worker processes for extraction; 1 runs inline.
        extractors: Optional language-to-strategy overrides.
    """

    thresholds: RiskThresholds = field(default_factory=RiskThresholds)
    max_workers: int = 1
    extractors: Mapping[str, ImportExtractor] | None = None

    def extract(self, sources: Sequence[SourceFile]) -> list[FileAnalysis]:
        """Extract imports and exports from every file, in input order."""
        if self.max_workers > 1 and len(sources) > 1:
            from depscope.parallel import extract_files_parallel

            return extract_files_parallel(
                sources, max_workers=self.max_workers, extractors=self.extractors
            )
        return [analyze_file(source, self.extractors) for source in sources]

    def analyze(
        self,
        sources: Iterable[SourceFile],
        manifests: Iterable[Any] = (),
    ) -> Report:
        """Analyze a set of files and manifests.

        Never raises for malformed input: undecodable files become
        unparsed nodes, unresolvable imports become missing edges and bad
        manifests are skipped with a recorded reason.

        Args:
            sources: The fetched source files. Later files with an already
                seen path are ignored.
            manifests: Parsed manifest mappings, ManifestDependencySet
                instances, or ``(path, text)`` pairs.

        Returns:
            A fresh Report.
        """
        files = _prepare(sources)
        valid_manifests, manifest_errors = load_manifests(manifests)

        analyses = self.extract(files)
        known_paths = frozenset(source.path for source in files)
        for fa in analyses:
            fa.dependencies = resolve_file(
                fa.path, fa.imports, fa.language, known_paths
            )

        graph = build_graph(analyses)
        cycles = find_cycles(graph)
        nodes = node_metrics(graph, rank_files(graph))
        metrics = graph_metrics(graph, nodes)

        issues = [
            *circular_issues(cycles),
            *find_unused(valid_manifests, analyses),
            *find_missing(analyses, valid_manifests),
        ]
        risk = assess_risk(issues, metrics, self.thresholds)
        recommendations = generate_recommendations(
            issues, metrics, nodes, self.thresholds
        )

        return Report(
            files=analyses,
            graph=graph,
            node_metrics=nodes,
            metrics=metrics,
            cycles=cycles,
            issues=issues,
            risk=risk,
            recommendations=recommendations,
            manifests=valid_manifests,
            manifest_errors=manifest_errors,
            fingerprint=fingerprint(files),
        )


def analyze(
    sources: Iterable[SourceFile],
    manifests: Iterable[Any] = (),
    *,
    thresholds: RiskThresholds | None = None,
) -> Report:
    """Analyze with a default-configured Analyzer."""
    analyzer = Analyzer(thresholds=thresholds or RiskThresholds())
    return analyzer.analyze(sources, manifests)
