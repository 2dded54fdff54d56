from .graph_structures import (
    DECISION_SEP,
    FlowEdge,
    FlowGraph,
    SourceMap,
    decision_display,
    is_decision_id,
    split_namespaced,
)
from .walker import WalkerConfig, walk_tree
from .router import CrawlerRouter, crawl, is_test_path

__all__ = [
    "DECISION_SEP",
    "FlowEdge",
    "FlowGraph",
    "SourceMap",
    "decision_display",
    "is_decision_id",
    "split_namespaced",
    "WalkerConfig",
    "walk_tree",
    "CrawlerRouter",
    "crawl",
    "is_test_path",
]
