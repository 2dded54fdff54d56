# flowcrawl/crawler/graph_structures.py
from dataclasses import dataclass
from typing import Dict, List, NewType, Optional, Tuple

# Using NewType for more semantic meaning, though they are still strings at runtime.
NodeID = NewType('NodeID', str) # A function name, a decision id, or "rel/path.py::name" after namespacing

# ASCII Unit Separator. Never appears in source identifiers, so it can split a
# decision node's opaque id from its display text inside a dict key.
DECISION_SEP = "\x1f"
DECISION_PREFIX = "_decision_"
NAMESPACE_SEP = "::"


@dataclass(frozen=True)
class FlowEdge:
    target: str
    label: Optional[str] = None  # "True"/"False"/"Loop"/match pattern; None for a plain call


# Flow Graph: caller (or decision node) -> ordered outgoing edges.
FlowGraph = Dict[str, List[FlowEdge]]

# Bare function name -> 1-indexed line of its last declaration in one file.
LineMap = Dict[str, int]

# Namespaced function id -> (absolute file path, 1-indexed line).
SourceMap = Dict[str, Tuple[str, int]]


def make_decision_id(counter: int, display: str) -> str:
    return f"{DECISION_PREFIX}{counter}{DECISION_SEP}{display}"


def is_decision_id(node_id: str) -> bool:
    """True for bare and namespaced decision node ids."""
    return DECISION_SEP in node_id


def decision_display(node_id: str) -> str:
    """Human readable part of a decision id; plain ids are returned unchanged."""
    if DECISION_SEP not in node_id:
        return node_id
    return node_id.split(DECISION_SEP, 1)[1]


def namespaced(rel_path: str, bare_id: str) -> str:
    return f"{rel_path}{NAMESPACE_SEP}{bare_id}"


def split_namespaced(node_id: str) -> Tuple[Optional[str], str]:
    """
    Splits "rel/path.rs::name" into ("rel/path.rs", "name").

    Only the first separator counts; bare ids give (None, node_id).
    """
    if NAMESPACE_SEP not in node_id:
        return None, node_id
    rel_path, bare_id = node_id.split(NAMESPACE_SEP, 1)
    return rel_path, bare_id


def count_edges(graph: FlowGraph) -> int:
    return sum(len(edges) for edges in graph.values())
