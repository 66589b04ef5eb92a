"""Risk scoring and recommendations."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from depscope.models import (
    GraphMetrics,
    Issue,
    IssueKind,
    NodeMetrics,
    Priority,
    Recommendation,
    RiskAssessment,
    RiskLevel,
)

CIRCULAR_WEIGHT = 10
UNUSED_PENALTY = 15
MISSING_WEIGHT = 20
COUPLING_PENALTY = 20
COMPLEXITY_PENALTY = 15
MAX_SCORE = 100


@dataclass(frozen=True)
class RiskThresholds:
    """Tunable limits for risk scoring and recommendations."""

    unused_count: int = 5
    coupling: float = 10.0
    complexity: int = 20
    recommend_coupling: float = 8.0
    file_fan_out: int = 15


def risk_level(score: int) -> RiskLevel:
    if score < 20:
        return RiskLevel.LOW
    if score < 50:
        return RiskLevel.MEDIUM
    if score < 80:
        return RiskLevel.HIGH
    return RiskLevel.CRITICAL


def _count(issues: Sequence[Issue], kind: IssueKind) -> int:
    return sum(1 for issue in issues if issue.kind == kind)


def assess_risk(
    issues: Sequence[Issue],
    metrics: GraphMetrics,
    thresholds: RiskThresholds | None = None,
) -> RiskAssessment:
    """Score overall dependency risk from issues and graph metrics.

    Circular and missing dependencies add per occurrence, many unused
    dependencies, high coupling and a complex structure each add a flat
    amount. The total is clamped to [0, 100] and bucketed.

    Args:
        issues: All issues found for the report.
        metrics: Graph-level metrics.
        thresholds: Limits to score against; defaults apply when omitted.

    Returns:
        The RiskAssessment with one factor string per triggered condition.
    """
    thresholds = thresholds or RiskThresholds()
    score = 0
    factors: list[str] = []

    circular = _count(issues, IssueKind.CIRCULAR)
    if circular:
        score += circular * CIRCULAR_WEIGHT
        factors.append(f"{circular} circular dependencies")

    unused = _count(issues, IssueKind.UNUSED)
    if unused > thresholds.unused_count:
        score += UNUSED_PENALTY
        factors.append("Many unused dependencies")

    missing = _count(issues, IssueKind.MISSING)
    if missing:
        score += missing * MISSING_WEIGHT
        factors.append("Missing dependencies detected")

    if metrics.coupling > thresholds.coupling:
        score += COUPLING_PENALTY
        factors.append("High coupling detected")

    if metrics.complexity > thresholds.complexity:
        score += COMPLEXITY_PENALTY
        factors.append("Complex dependency structure")

    score = max(0, min(MAX_SCORE, score))
    return RiskAssessment(score=score, level=risk_level(score), factors=factors)


def generate_recommendations(
    issues: Sequence[Issue],
    metrics: GraphMetrics,
    nodes: Mapping[str, NodeMetrics],
    thresholds: RiskThresholds | None = None,
) -> list[Recommendation]:
    """Build the ordered action list for the conditions that triggered.

    Args:
        issues: All issues found for the report.
        metrics: Graph-level metrics.
        nodes: Per-file metrics, used to spot files with high fan-out.
        thresholds: Limits to check against; defaults apply when omitted.

    Returns:
        Recommendations, high-impact fixes first.
    """
    thresholds = thresholds or RiskThresholds()
    recommendations: list[Recommendation] = []

    circular = _count(issues, IssueKind.CIRCULAR)
    if circular:
        recommendations.append(
            Recommendation(
                type="refactor",
                priority=Priority.HIGH,
                title="Resolve Circular Dependencies",
                description=(
                    f"Found {circular} circular dependencies that should be resolved"
                ),
                action=(
                    "Break circular dependencies by introducing interfaces "
                    "or moving shared code"
                ),
            )
        )

    unused = _count(issues, IssueKind.UNUSED)
    if unused:
        recommendations.append(
            Recommendation(
                type="cleanup",
                priority=Priority.MEDIUM,
                title="Remove Unused Dependencies",
                description=f"{unused} unused dependencies can be removed",
                action=(
                    "Remove unused packages to reduce bundle size "
                    "and security risks"
                ),
            )
        )

    missing = _count(issues, IssueKind.MISSING)
    if missing:
        recommendations.append(
            Recommendation(
                type="fix",
                priority=Priority.HIGH,
                title="Add Missing Dependencies",
                description=f"{missing} missing dependencies detected",
                action="Declare the missing packages in the project manifest",
            )
        )

    if metrics.coupling > thresholds.recommend_coupling:
        recommendations.append(
            Recommendation(
                type="architecture",
                priority=Priority.MEDIUM,
                title="Reduce Coupling",
                description=(
                    f"Average fan-out of {metrics.coupling:.1f} between modules"
                ),
                action=(
                    "Consider using dependency injection or interfaces "
                    "to reduce coupling"
                ),
            )
        )

    if metrics.complexity > thresholds.complexity:
        recommendations.append(
            Recommendation(
                type="architecture",
                priority=Priority.MEDIUM,
                title="Simplify Dependency Structure",
                description=(
                    f"Structural complexity of {metrics.complexity} "
                    f"exceeds {thresholds.complexity}"
                ),
                action="Group related modules and remove redundant import paths",
            )
        )

    busy = sorted(
        path for path, m in nodes.items() if m.fan_out > thresholds.file_fan_out
    )
    if busy:
        recommendations.append(
            Recommendation(
                type="refactor",
                priority=Priority.MEDIUM,
                title="Simplify Complex Files",
                description=f"{len(busy)} files have high fan-out: {', '.join(busy)}",
                action="Break down complex files into smaller, focused modules",
            )
        )

    return recommendations
