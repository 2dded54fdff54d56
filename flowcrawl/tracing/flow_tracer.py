# flowcrawl/tracing/flow_tracer.py
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from flowcrawl.crawler.graph_structures import FlowGraph, decision_display, split_namespaced
from flowcrawl.layout.hierarchy import collect_node_ids

Edge = Tuple[str, str]


@dataclass
class TraceResult:
    nodes: Set[str] = field(default_factory=set)
    edges: Set[Edge] = field(default_factory=set)
    status: str = ""

    @property
    def found(self) -> bool:
        return bool(self.nodes)


def find_traced_paths(graph: FlowGraph, source: str, sink: str) -> Tuple[Set[str], Set[Edge]]:
    """
    Collects every node and (caller, callee) edge lying on some simple path
    from ``source`` to ``sink``.
    """
    adjacency: Dict[str, List[str]] = {}
    for caller, edges in graph.items():
        targets = adjacency.setdefault(caller, [])
        for edge in edges:
            if edge.target not in targets:
                targets.append(edge.target)

    nodes: Set[str] = set()
    traced_edges: Set[Edge] = set()
    on_path: Set[str] = set()
    path: List[str] = [source]

    def dfs(current: str) -> None:
        if current == sink:
            nodes.update(path)
            traced_edges.update(zip(path, path[1:]))
            return
        on_path.add(current)
        for nxt in adjacency.get(current, []):
            if nxt in on_path:
                continue
            path.append(nxt)
            dfs(nxt)
            path.pop()
        on_path.discard(current)

    dfs(source)
    return nodes, traced_edges


def resolve_node(graph: FlowGraph, text: str) -> Optional[str]:
    """Exact id, then exact bare name, then first id containing ``text``."""
    candidates = sorted(collect_node_ids(graph))
    if text in candidates:
        return text
    for node_id in candidates:
        _path, bare = split_namespaced(node_id)
        if bare == text or decision_display(bare) == text:
            return node_id
    for node_id in candidates:
        if text in node_id:
            return node_id
    return None


def trace_flow(graph: FlowGraph, source_text: str, sink_text: str) -> TraceResult:
    source_text = source_text.strip()
    sink_text = sink_text.strip()
    if not source_text or not sink_text:
        return TraceResult(status="error: :trace flow requires <source> and <sink>")

    source = resolve_node(graph, source_text)
    if source is None:
        return TraceResult(status=f"Trace: Could not find source node '{source_text}'")
    sink = resolve_node(graph, sink_text)
    if sink is None:
        return TraceResult(status=f"Trace: Could not find sink node '{sink_text}'")

    nodes, edges = find_traced_paths(graph, source, sink)
    if not nodes:
        return TraceResult(status=f"Trace: No path found from '{source_text}' to '{sink_text}'")
    return TraceResult(nodes=nodes, edges=edges, status="Trace: Path found and highlighted")
