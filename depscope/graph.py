"""Dependency graph construction and PageRank ranking."""

from __future__ import annotations

from collections.abc import Sequence

import networkx as nx

from depscope.models import DependencyEdge, DependencyGraph, EdgeKind, FileAnalysis


def build_graph(analyses: Sequence[FileAnalysis]) -> DependencyGraph:
    """Build the internal dependency graph from resolved file analyses.

    Nodes are file paths, one per analysis, including files with no
    dependencies and files that failed to parse. An edge from A to B exists
    when A has an internal dependency on B. External and missing
    dependencies stay on the per-file records and are not graph edges.

    Args:
        analyses: Resolved FileAnalysis records, one per input file.

    Returns:
        The immutable DependencyGraph.
    """
    nodes = tuple(fa.path for fa in analyses)
    index = {path: i for i, path in enumerate(nodes)}

    edges: list[DependencyEdge] = []
    adjacency: list[list[int]] = [[] for _ in nodes]
    seen: set[tuple[int, int]] = set()

    for fa in analyses:
        src = index[fa.path]
        for dep in fa.edges_of(EdgeKind.INTERNAL):
            tgt = index.get(dep.target)
            if tgt is None or (src, tgt) in seen:
                continue
            seen.add((src, tgt))
            edges.append(dep)
            adjacency[src].append(tgt)

    return DependencyGraph(
        nodes=nodes,
        edges=tuple(edges),
        adjacency=tuple(tuple(succ) for succ in adjacency),
        index=index,
    )


def to_networkx(graph: DependencyGraph) -> nx.DiGraph:
    """Return a networkx view of the internal dependency graph."""
    g = nx.DiGraph()
    g.add_nodes_from(graph.nodes)
    for edge in graph.edges:
        g.add_edge(edge.source, edge.target, specifiers=list(edge.specifiers))
    return g


def rank_files(graph: DependencyGraph) -> dict[str, float]:
    """Apply PageRank to the graph.

    Files that many others depend on rank higher. With no edges every file
    gets the same rank.

    Args:
        graph: The dependency graph.

    Returns:
        Mapping of file path to rank; ranks sum to 1 for a non-empty graph.
    """
    if graph.node_count == 0:
        return {}
    if graph.edge_count == 0:
        uniform = 1.0 / graph.node_count
        return {path: uniform for path in graph.nodes}
    ranks = nx.pagerank(to_networkx(graph), alpha=0.85)
    return {path: ranks.get(path, 0.0) for path in graph.nodes}
