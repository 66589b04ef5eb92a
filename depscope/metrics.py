"""Coupling and structural complexity metrics."""

from __future__ import annotations

from collections.abc import Mapping

from depscope.models import DependencyGraph, GraphMetrics, NodeMetrics


def instability(fan_in: int, fan_out: int) -> float:
    """Instability in [0, 1); the +1 keeps isolated files at 0."""
    return fan_out / (fan_in + fan_out + 1)


def node_metrics(
    graph: DependencyGraph, ranks: Mapping[str, float] | None = None
) -> dict[str, NodeMetrics]:
    """Compute fan-in, fan-out and instability for every node.

    Args:
        graph: The dependency graph.
        ranks: Optional PageRank scores to attach.

    Returns:
        Mapping of file path to NodeMetrics, in node order.
    """
    fan_in = [0] * graph.node_count
    for successors in graph.adjacency:
        for succ in successors:
            fan_in[succ] += 1

    ranks = ranks or {}
    result: dict[str, NodeMetrics] = {}
    for i, path in enumerate(graph.nodes):
        fan_out = len(graph.adjacency[i])
        result[path] = NodeMetrics(
            fan_in=fan_in[i],
            fan_out=fan_out,
            instability=instability(fan_in[i], fan_out),
            rank=ranks.get(path, 0.0),
        )
    return result


def count_components(graph: DependencyGraph) -> int:
    """Count connected components, treating edges as undirected."""
    neighbours: list[set[int]] = [set() for _ in graph.nodes]
    for src, successors in enumerate(graph.adjacency):
        for tgt in successors:
            neighbours[src].add(tgt)
            neighbours[tgt].add(src)

    seen = [False] * graph.node_count
    components = 0
    for start in range(graph.node_count):
        if seen[start]:
            continue
        components += 1
        seen[start] = True
        pending = [start]
        while pending:
            node = pending.pop()
            for other in neighbours[node]:
                if not seen[other]:
                    seen[other] = True
                    pending.append(other)
    return components


def graph_metrics(
    graph: DependencyGraph, nodes: Mapping[str, NodeMetrics]
) -> GraphMetrics:
    """Compute graph-level coupling, complexity, density and stability.

    Complexity is the graph analog of cyclomatic complexity,
    ``edges - nodes + 2 * components``. Every value is 0 for an empty
    graph except stability, which is 1.

    Args:
        graph: The dependency graph.
        nodes: Per-node metrics from node_metrics.

    Returns:
        The GraphMetrics.
    """
    n = graph.node_count
    e = graph.edge_count
    if n == 0:
        return GraphMetrics()

    components = count_components(graph)
    total_fan_out = sum(m.fan_out for m in nodes.values())
    total_instability = sum(m.instability for m in nodes.values())
    return GraphMetrics(
        node_count=n,
        edge_count=e,
        components=components,
        coupling=total_fan_out / n,
        complexity=max(0, e - n + 2 * components),
        density=e / (n * (n - 1)) if n > 1 else 0.0,
        stability=1 - total_instability / n,
    )
