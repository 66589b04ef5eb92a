"""Circular dependency detection."""

from __future__ import annotations

from depscope.models import Cycle, DependencyGraph, Severity

_UNVISITED = 0
_ON_STACK = 1
_VISITED = 2

HIGH_SEVERITY_LENGTH = 3


def canonical_rotation(files: tuple[str, ...]) -> tuple[str, ...]:
    """Rotate a cycle so it starts at its lexicographically smallest file."""
    if not files:
        return files
    start = files.index(min(files))
    return files[start:] + files[:start]


def cycle_severity(length: int) -> Severity:
    return Severity.HIGH if length > HIGH_SEVERITY_LENGTH else Severity.MEDIUM


def find_cycles(graph: DependencyGraph) -> list[Cycle]:
    """Find cycles among internal edges with a single depth-first pass.

    Each node moves unvisited -> on-stack -> visited exactly once. When the
    search meets an edge into a node that is still on the stack, the path
    from that node to the current one is recorded as a cycle and the search
    carries on from where it was. Cycles that only pass through
    already-finished nodes are not rediscovered, so overlapping cycles may
    be reported once rather than in every combination.

    The traversal is iterative, so deep import chains do not hit the
    interpreter's recursion limit.

    Args:
        graph: The dependency graph.

    Returns:
        Cycles in canonical rotation, without duplicates, sorted by length
        then file ids.
    """
    state = [_UNVISITED] * graph.node_count
    path: list[int] = []
    position: dict[int, int] = {}
    found: dict[tuple[str, ...], Cycle] = {}

    for root in range(graph.node_count):
        if state[root] != _UNVISITED:
            continue
        state[root] = _ON_STACK
        position[root] = 0
        path.append(root)
        stack = [(root, iter(graph.adjacency[root]))]

        while stack:
            node, successors = stack[-1]
            advanced = False
            for succ in successors:
                if state[succ] == _ON_STACK:
                    files = tuple(graph.nodes[i] for i in path[position[succ] :])
                    key = canonical_rotation(files)
                    if key not in found:
                        found[key] = Cycle(
                            files=key, severity=cycle_severity(len(key))
                        )
                elif state[succ] == _UNVISITED:
                    state[succ] = _ON_STACK
                    position[succ] = len(path)
                    path.append(succ)
                    stack.append((succ, iter(graph.adjacency[succ])))
                    advanced = True
                    break
            if not advanced:
                stack.pop()
                path.pop()
                del position[node]
                state[node] = _VISITED

    return sorted(found.values(), key=lambda c: (c.length, c.files))
