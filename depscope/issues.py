"""Unused, missing and circular dependency issues."""

from __future__ import annotations

from collections.abc import Sequence

from depscope.models import (
    Cycle,
    EdgeKind,
    FileAnalysis,
    Issue,
    IssueKind,
    ManifestDependencySet,
    Severity,
)

# Languages whose package manifests we read. Imports from other ecosystems
# (Java packages, Go modules, PHP namespaces) cannot be checked against a
# declaration, so they are never reported missing.
MANIFEST_ECOSYSTEMS: frozenset[str] = frozenset(
    {"javascript", "typescript", "python", "rust"}
)

# Ecosystems whose package names are spelled differently in imports:
# pip folds case and separators, cargo maps "-" to "_".
FOLDED_ECOSYSTEMS: frozenset[str] = frozenset({"python", "rust"})


def _normalize(name: str) -> str:
    """Fold case and separators, so ``PyYAML_x`` matches ``pyyaml-x``."""
    return name.lower().replace("_", "-").replace(".", "-")


def _declared_names(
    manifests: Sequence[ManifestDependencySet],
) -> dict[str, list[str]]:
    """Map each declared name to the manifests declaring it, deduplicated."""
    declared: dict[str, list[str]] = {}
    for manifest in manifests:
        for name in manifest.declared():
            sources = declared.setdefault(name, [])
            if manifest.source not in sources:
                sources.append(manifest.source)
    return declared


def _is_used(
    name: str, analyses: Sequence[FileAnalysis], folded: frozenset[str]
) -> bool:
    if _normalize(name) in folded:
        return True
    prefix = name + "/"
    for fa in analyses:
        for edge in fa.edges_of(EdgeKind.EXTERNAL):
            if edge.target == name:
                return True
            if any(s == name or s.startswith(prefix) for s in edge.specifiers):
                return True
    return False


def find_unused(
    manifests: Sequence[ManifestDependencySet],
    analyses: Sequence[FileAnalysis],
) -> list[Issue]:
    """Report declared dependencies that no file imports.

    A declared name counts as used when an external import equals it,
    starts with ``name/`` (sub-path and scoped imports), or resolves to it
    as a package name. Python and Rust imports also match with case and
    separators folded. A name declared in several manifests is reported
    once.

    Args:
        manifests: Valid manifests.
        analyses: Resolved per-file analyses.

    Returns:
        One low-severity issue per unused name, in declaration order.
    """
    folded = frozenset(
        _normalize(edge.target)
        for fa in analyses
        if fa.language in FOLDED_ECOSYSTEMS
        for edge in fa.edges_of(EdgeKind.EXTERNAL)
    )
    issues: list[Issue] = []
    for name, sources in _declared_names(manifests).items():
        if _is_used(name, analyses, folded):
            continue
        issues.append(
            Issue(
                kind=IssueKind.UNUSED,
                target=name,
                severity=Severity.LOW,
                detail=f"declared in {', '.join(sources)} but never imported",
                locations=list(sources),
            )
        )
    return issues


def find_missing(
    analyses: Sequence[FileAnalysis],
    manifests: Sequence[ManifestDependencySet],
) -> list[Issue]:
    """Report imported external packages that no manifest declares.

    Builtin modules never reach this check: they produce no external edge.

    Args:
        analyses: Resolved per-file analyses.
        manifests: Valid manifests.

    Returns:
        One high-severity issue per package, listing every importing
        ``path:line``, in order of first import.
    """
    declared = _declared_names(manifests)
    folded = {_normalize(name) for name in declared}
    locations: dict[str, list[str]] = {}
    for fa in analyses:
        if fa.language not in MANIFEST_ECOSYSTEMS:
            continue
        for edge in fa.edges_of(EdgeKind.EXTERNAL):
            if edge.target in declared:
                continue
            if fa.language in FOLDED_ECOSYSTEMS and _normalize(edge.target) in folded:
                continue
            locations.setdefault(edge.target, []).append(f"{fa.path}:{edge.line}")

    return [
        Issue(
            kind=IssueKind.MISSING,
            target=name,
            severity=Severity.HIGH,
            detail=f"imported in {len(locs)} place(s) but not declared",
            locations=locs,
        )
        for name, locs in locations.items()
    ]


def circular_issues(cycles: Sequence[Cycle]) -> list[Issue]:
    """Turn detected cycles into issues carrying the cycle severity."""
    return [
        Issue(
            kind=IssueKind.CIRCULAR,
            target=" -> ".join((*cycle.files, cycle.files[0])),
            severity=cycle.severity,
            detail=f"cycle of {cycle.length} file(s)",
            locations=list(cycle.files),
        )
        for cycle in cycles
    ]
