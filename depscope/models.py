"""Core data structures for depscope."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class ImportCategory(enum.Enum):
    """How an import specifier is interpreted."""

    RELATIVE = "relative"
    ABSOLUTE = "absolute"
    BUILTIN = "builtin"
    EXTERNAL = "external"


class EdgeKind(enum.Enum):
    """What a dependency edge points at."""

    INTERNAL = "internal"
    EXTERNAL = "external"
    MISSING = "missing"


class Severity(enum.Enum):
    """Severity of a cycle or issue."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class IssueKind(enum.Enum):
    """The kind of dependency problem an issue describes."""

    UNUSED = "unused"
    MISSING = "missing"
    CIRCULAR = "circular"


class RiskLevel(enum.Enum):
    """Bucketed overall risk."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Priority(enum.Enum):
    """Priority of a recommendation."""

    HIGH = "high"
    MEDIUM = "medium"


@dataclass(frozen=True)
class SourceFile:
    """A fetched source file. Content may be text or undecoded bytes."""

    path: str
    language: str
    content: str | bytes = ""

    @property
    def size(self) -> int:
        if isinstance(self.content, bytes):
            return len(self.content)
        return len(self.content.encode("utf-8", errors="replace"))

    @property
    def line_count(self) -> int:
        if not self.content:
            return 0
        if isinstance(self.content, bytes):
            return self.content.count(b"\n") + 1
        return self.content.count("\n") + 1


@dataclass(frozen=True)
class Import:
    """A single import found in a source file."""

    file: str
    specifier: str
    line: int
    category: ImportCategory
    raw: str = ""


@dataclass(frozen=True)
class Export:
    """An exported symbol. Used for reporting only."""

    name: str
    line: int
    kind: str = "unknown"


@dataclass(frozen=True)
class DependencyEdge:
    """A dependency of one file on another file or an external package."""

    source: str
    target: str
    kind: EdgeKind
    line: int = 0
    specifiers: tuple[str, ...] = ()


@dataclass
class FileAnalysis:
    """Extraction and resolution results for a single file."""

    path: str
    language: str
    imports: list[Import] = field(default_factory=list)
    exports: list[Export] = field(default_factory=list)
    dependencies: list[DependencyEdge] = field(default_factory=list)
    parsed: bool = True
    error: str | None = None
    size: int = 0
    line_count: int = 0

    def edges_of(self, kind: EdgeKind) -> list[DependencyEdge]:
        """Return this file's dependencies of the given kind."""
        return [d for d in self.dependencies if d.kind == kind]


@dataclass(frozen=True)
class DependencyGraph:
    """Directed graph of internal file dependencies.

    Nodes live in an arena addressed by integer index; ``adjacency[i]``
    holds the successor indexes of node ``i``. Built once per analysis
    and never mutated.
    """

    nodes: tuple[str, ...] = ()
    edges: tuple[DependencyEdge, ...] = ()
    adjacency: tuple[tuple[int, ...], ...] = ()
    index: dict[str, int] = field(default_factory=dict)

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)


@dataclass(frozen=True)
class Cycle:
    """A closed path of internal dependencies."""

    files: tuple[str, ...]
    severity: Severity

    @property
    def length(self) -> int:
        return len(self.files)


@dataclass
class NodeMetrics:
    """Coupling metrics for a single file."""

    fan_in: int = 0
    fan_out: int = 0
    instability: float = 0.0
    rank: float = 0.0


@dataclass
class GraphMetrics:
    """Graph-level structural metrics."""

    node_count: int = 0
    edge_count: int = 0
    components: int = 0
    coupling: float = 0.0
    complexity: int = 0
    density: float = 0.0
    stability: float = 1.0


@dataclass
class ManifestDependencySet:
    """Dependencies declared by one package manifest."""

    source: str
    name: str = "unnamed"
    version: str = "0.0.0"
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    peer_dependencies: dict[str, str] = field(default_factory=dict)
    optional_dependencies: dict[str, str] = field(default_factory=dict)
    risk_factors: list[str] = field(default_factory=list)

    def declared(self) -> list[str]:
        """All declared names, production first, without duplicates."""
        names: dict[str, None] = {}
        for section in (
            self.dependencies,
            self.dev_dependencies,
            self.peer_dependencies,
            self.optional_dependencies,
        ):
            names.update(dict.fromkeys(section))
        return list(names)


@dataclass(frozen=True)
class ManifestError:
    """A manifest that was skipped because it could not be read."""

    source: str
    reason: str


@dataclass
class Issue:
    """A dependency problem found during analysis."""

    kind: IssueKind
    target: str
    severity: Severity
    detail: str = ""
    locations: list[str] = field(default_factory=list)


@dataclass
class RiskAssessment:
    """Overall risk score with the factors that produced it."""

    score: int = 0
    level: RiskLevel = RiskLevel.LOW
    factors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Recommendation:
    """A prioritized, human-readable follow-up action."""

    type: str
    priority: Priority
    title: str
    description: str
    action: str


@dataclass
class Report:
    """The complete analysis of one file set, ready for serialization."""

    files: list[FileAnalysis] = field(default_factory=list)
    graph: DependencyGraph = field(default_factory=DependencyGraph)
    node_metrics: dict[str, NodeMetrics] = field(default_factory=dict)
    metrics: GraphMetrics = field(default_factory=GraphMetrics)
    cycles: list[Cycle] = field(default_factory=list)
    issues: list[Issue] = field(default_factory=list)
    risk: RiskAssessment = field(default_factory=RiskAssessment)
    recommendations: list[Recommendation] = field(default_factory=list)
    manifests: list[ManifestDependencySet] = field(default_factory=list)
    manifest_errors: list[ManifestError] = field(default_factory=list)
    fingerprint: str = ""

    def issues_of(self, kind: IssueKind) -> list[Issue]:
        """Return the issues of one kind, in report order."""
        return [i for i in self.issues if i.kind == kind]

    def to_dict(self) -> dict[str, Any]:
        """Convert to plain JSON-serializable data."""
        return {
            "fingerprint": self.fingerprint,
            "files": [_file_to_dict(fa) for fa in self.files],
            "graph": {
                "nodes": [
                    {"id": path, **_node_metrics_to_dict(self.node_metrics.get(path))}
                    for path in self.graph.nodes
                ],
                "edges": [_edge_to_dict(e) for e in self.graph.edges],
            },
            "metrics": {
                "nodeCount": self.metrics.node_count,
                "edgeCount": self.metrics.edge_count,
                "components": self.metrics.components,
                "coupling": self.metrics.coupling,
                "complexity": self.metrics.complexity,
                "density": self.metrics.density,
                "stability": self.metrics.stability,
            },
            "cycles": [
                {
                    "files": list(c.files),
                    "length": c.length,
                    "severity": c.severity.value,
                }
                for c in self.cycles
            ],
            "issues": [
                {
                    "kind": i.kind.value,
                    "target": i.target,
                    "severity": i.severity.value,
                    "detail": i.detail,
                    "locations": list(i.locations),
                }
                for i in self.issues
            ],
            "risk": {
                "score": self.risk.score,
                "level": self.risk.level.value,
                "factors": list(self.risk.factors),
            },
            "recommendations": [
                {
                    "type": r.type,
                    "priority": r.priority.value,
                    "title": r.title,
                    "description": r.description,
                    "action": r.action,
                }
                for r in self.recommendations
            ],
            "manifests": [
                {
                    "source": m.source,
                    "name": m.name,
                    "version": m.version,
                    "dependencies": dict(m.dependencies),
                    "devDependencies": dict(m.dev_dependencies),
                    "peerDependencies": dict(m.peer_dependencies),
                    "optionalDependencies": dict(m.optional_dependencies),
                    "riskFactors": list(m.risk_factors),
                }
                for m in self.manifests
            ],
            "manifestErrors": [
                {"source": e.source, "reason": e.reason} for e in self.manifest_errors
            ],
        }


def _edge_to_dict(edge: DependencyEdge) -> dict[str, Any]:
    return {
        "source": edge.source,
        "target": edge.target,
        "kind": edge.kind.value,
        "line": edge.line,
        "specifiers": list(edge.specifiers),
    }


def _node_metrics_to_dict(metrics: NodeMetrics | None) -> dict[str, Any]:
    metrics = metrics or NodeMetrics()
    return {
        "fanIn": metrics.fan_in,
        "fanOut": metrics.fan_out,
        "instability": metrics.instability,
        "rank": metrics.rank,
    }


def _file_to_dict(fa: FileAnalysis) -> dict[str, Any]:
    return {
        "path": fa.path,
        "language": fa.language,
        "parsed": fa.parsed,
        "error": fa.error,
        "size": fa.size,
        "lines": fa.line_count,
        "imports": [
            {
                "specifier": imp.specifier,
                "raw": imp.raw,
                "line": imp.line,
                "category": imp.category.value,
            }
            for imp in fa.imports
        ],
        "exports": [
            {"name": exp.name, "line": exp.line, "kind": exp.kind}
            for exp in fa.exports
        ],
        "dependencies": [_edge_to_dict(d) for d in fa.dependencies],
    }
