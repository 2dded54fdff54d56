# flowcrawl/layout/hierarchy.py
from typing import Dict, Iterable, Set

from flowcrawl.crawler.graph_structures import FlowGraph

UNRESOLVED = -1


def collect_node_ids(graph: FlowGraph) -> Set[str]:
    """Every caller key plus every edge target."""
    ids: Set[str] = set(graph)
    for edges in graph.values():
        ids.update(edge.target for edge in edges)
    return ids


def compute_levels(graph: FlowGraph, all_ids: Iterable[str], verbose: bool = False) -> Dict[str, int]:
    """
    Assigns each node a depth: roots (no callers) sit at 0, everything else at
    one below its deepest caller.

    Relaxation runs at most ``len(all_ids) + 2`` passes. Nodes still unresolved
    afterwards belong to cycles unreachable from any root; they are placed one
    level below the deepest resolved node so the layout stays total.
    """
    ids = sorted(set(all_ids))
    callers: Dict[str, Set[str]] = {node_id: set() for node_id in ids}
    for caller, edges in graph.items():
        for edge in edges:
            # Self edges would keep a recursive root from ever being a root.
            if edge.target == caller or edge.target not in callers:
                continue
            callers[edge.target].add(caller)

    depth: Dict[str, int] = {
        node_id: 0 if not callers[node_id] else UNRESOLVED for node_id in ids
    }

    max_passes = len(ids) + 2
    passes = 0
    while passes < max_passes:
        passes += 1
        changed = False
        for node_id in ids:
            known = [depth[c] for c in callers[node_id] if c in depth and depth[c] != UNRESOLVED]
            if not known:
                continue
            candidate = 1 + max(known)
            if candidate > depth[node_id]:
                depth[node_id] = candidate
                changed = True
        if not changed:
            break

    if verbose:
        print(f"HierarchyLeveler: Relaxation finished after {passes} passes for {len(ids)} nodes.")

    unresolved = [node_id for node_id in ids if depth[node_id] == UNRESOLVED]
    if unresolved:
        resolved = [d for d in depth.values() if d != UNRESOLVED]
        fallback = (max(resolved) if resolved else -1) + 1
        print(
            f"HierarchyLeveler Warning: {len(unresolved)} nodes are only reachable through cycles; "
            f"placing them at depth {fallback}."
        )
        for node_id in unresolved:
            depth[node_id] = fallback
    return depth
