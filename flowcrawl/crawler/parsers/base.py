# flowcrawl/crawler/parsers/base.py
from abc import ABC, abstractmethod
from typing import Any, Optional, Tuple

from tree_sitter_language_pack import get_parser

from ..graph_structures import FlowGraph, LineMap
from ..walker import WalkerConfig, walk_tree


class LanguageParser(ABC):
    """
    Common capability of every language front end.

    Subclasses name a tree-sitter grammar, the file extensions they own and a
    WalkerConfig; the generic walker does the rest. A file the grammar cannot
    parse cleanly yields an empty graph instead of an exception so one broken
    file never aborts a directory crawl.
    """

    language_name: str = ""
    extensions: Tuple[str, ...] = ()

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.ts_parser: Optional[Any] = None
        try:
            self.ts_parser = get_parser(self.language_name)
        except Exception as e:
            print(f"{type(self).__name__} Warning: Failed to initialize tree-sitter '{self.language_name}' parser: {e}.")
            self.ts_parser = None

    @property
    @abstractmethod
    def walker_config(self) -> WalkerConfig:
        ...

    def parse(self, source: str) -> FlowGraph:
        graph, _lines = self.parse_with_lines(source)
        return graph

    def parse_with_lines(self, source: str, suppress_decisions: bool = False) -> Tuple[FlowGraph, LineMap]:
        if not self.ts_parser:
            return {}, {}
        try:
            tree = self.ts_parser.parse(bytes(source, "utf8"))
        except Exception as e:
            print(f"{type(self).__name__} Warning: tree-sitter raised while parsing: {e}")
            return {}, {}

        if tree.root_node.has_error:
            if self.verbose:
                print(f"{type(self).__name__}: Syntax errors reported by tree-sitter, skipping file.")
            return {}, {}

        try:
            return walk_tree(self.walker_config, tree.root_node, source, suppress_decisions)
        except RecursionError:
            print(f"{type(self).__name__} Warning: Syntax tree too deeply nested to walk, skipping file.")
            return {}, {}
