"""TOON (Token-Oriented Object Notation) encoder for reports."""

from __future__ import annotations

import re

from depscope.models import EdgeKind, NodeMetrics, Report

_NEEDS_QUOTING = re.compile(r'[,:"\\{}\[\]]')
_LOOKS_NUMERIC = re.compile(r"^-?(?:0|[1-9]\d*)(?:\.\d+)?$")
_KEYWORDS = frozenset({"true", "false", "null"})


def encode(report: Report, repo_name: str = "") -> str:
    """Encode a Report into TOON format.

    Args:
        report: The analysis report to encode.
        repo_name: Name shown on the ``repo:`` line.

    Returns:
        TOON-formatted string (no trailing newline).
    """
    parts: list[str] = []

    if repo_name:
        parts.append(f"repo: {_encode_value(repo_name)}")
    parts.append(f"risk: {report.risk.score} {report.risk.level.value}")
    m = report.metrics
    parts.append(
        f"metrics: nodes={m.node_count} edges={m.edge_count} "
        f"components={m.components} coupling={m.coupling:.2f} "
        f"complexity={m.complexity} density={m.density:.4f}"
    )

    file_rows: list[list[str]] = []
    for fa in report.files:
        nm = report.node_metrics.get(fa.path, NodeMetrics())
        file_rows.append(
            [
                fa.path,
                fa.language,
                str(nm.fan_in),
                str(nm.fan_out),
                f"{nm.instability:.4f}",
                f"{nm.rank:.4f}",
                "yes" if fa.parsed else "no",
            ]
        )
    parts.append(
        _format_tabular(
            "files",
            ["path", "language", "fan_in", "fan_out", "instability", "rank", "parsed"],
            file_rows,
        )
    )

    edge_rows = [
        [e.source, e.target, " ".join(e.specifiers)] for e in report.graph.edges
    ]
    parts.append(
        _format_tabular("edges", ["source", "target", "specifiers"], edge_rows)
    )

    external_rows = [
        [fa.path, dep.kind.value, dep.target, str(dep.line)]
        for fa in report.files
        for dep in fa.dependencies
        if dep.kind != EdgeKind.INTERNAL
    ]
    parts.append(
        _format_tabular(
            "external", ["source", "kind", "target", "line"], external_rows
        )
    )

    cycle_rows = [
        [" -> ".join(c.files), str(c.length), c.severity.value] for c in report.cycles
    ]
    parts.append(_format_tabular("cycles", ["files", "length", "severity"], cycle_rows))

    issue_rows = [
        [i.kind.value, i.target, i.severity.value, " ".join(i.locations)]
        for i in report.issues
    ]
    parts.append(
        _format_tabular(
            "issues", ["kind", "target", "severity", "locations"], issue_rows
        )
    )

    rec_rows = [[r.priority.value, r.title, r.action] for r in report.recommendations]
    parts.append(
        _format_tabular("recommendations", ["priority", "title", "action"], rec_rows)
    )

    return "\n".join(parts)


def _format_tabular(
    name: str,
    columns: list[str],
    rows: list[list[str]],
) -> str:
    """Format a tabular array in TOON notation.

    Args:
        name: The array field name.
        columns: Column header names.
        rows: List of row data (each row is list of strings).

    Returns:
        TOON tabular array string.
    """
    header = f"{name}[{len(rows)}]{{{','.join(columns)}}}:"
    lines = [header]
    for row in rows:
        encoded = [_encode_value(cell) for cell in row]
        lines.append(f"  {','.join(encoded)}")
    return "\n".join(lines)


def _encode_value(value: str) -> str:
    """Encode a single value, quoting if necessary per TOON rules."""
    if not value:
        return '""'

    if value != value.strip():
        return _quote(value)

    if any(c in value for c in "\n\r\t"):
        return _quote(value)

    if value.lower() in _KEYWORDS:
        return _quote(value)

    if _LOOKS_NUMERIC.match(value):
        return value

    if _NEEDS_QUOTING.search(value) or value.startswith("-"):
        return _quote(value)

    return value


def _quote(value: str) -> str:
    """Double-quote a string with TOON escape rules."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    escaped = escaped.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    return f'"{escaped}"'
