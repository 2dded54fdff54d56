# flowcrawl/crawler/router.py
import fnmatch
import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from .graph_structures import (
    FlowEdge,
    FlowGraph,
    LineMap,
    SourceMap,
    is_decision_id,
    namespaced,
)
from .parsers import LanguageParser, PythonParser, RustParser, TsxParser, TypeScriptParser

# Directories never descended into.
IGNORED_DIRS = {
    ".git", ".hg", ".svn", "__pycache__", ".venv", "venv", ".env", "env",
    "node_modules", "dist", "build", "target", ".next", "coverage",
    ".mypy_cache", ".pytest_cache", ".tox",
}

# Test-only code is kept out of the graph unconditionally.
TEST_DIR_NAMES = {"tests", "test", "__tests__"}
TEST_FILE_PATTERNS = (
    "test_*.py", "*_test.py", "conftest.py",
    "*_test.rs",
    "*.test.ts", "*.test.tsx", "*.spec.ts", "*.spec.tsx",
)


@dataclass
class ParsedFile:
    rel_path: str  # posix-style, relative to the crawl root
    abs_path: str
    graph: FlowGraph
    line_map: LineMap


def is_test_path(rel_path: str) -> bool:
    """True for files under a test directory or named like a test module."""
    parts = PurePosixPath(rel_path.replace(os.sep, "/")).parts
    if any(part in TEST_DIR_NAMES for part in parts[:-1]):
        return True
    name = parts[-1] if parts else ""
    return any(fnmatch.fnmatchcase(name, pattern) for pattern in TEST_FILE_PATTERNS)


class CrawlerRouter:
    """
    Walks a directory, hands each file to the front end owning its extension
    and merges the per-file graphs into one namespaced cross-file graph.
    """

    def __init__(self, verbose: bool = False, extra_ignored_dirs: Optional[Iterable[str]] = None):
        self.verbose = verbose
        self.ignored_dirs: Set[str] = set(IGNORED_DIRS) | set(extra_ignored_dirs or ())
        self.parsers: List[LanguageParser] = [
            RustParser(verbose=verbose),
            PythonParser(verbose=verbose),
            TypeScriptParser(verbose=verbose),
            TsxParser(verbose=verbose),
        ]
        self._by_extension: Dict[str, LanguageParser] = {
            ext: parser for parser in self.parsers for ext in parser.extensions
        }

    @property
    def supported_extensions(self) -> Set[str]:
        return set(self._by_extension)

    def parser_for(self, path: Path) -> Optional[LanguageParser]:
        return self._by_extension.get(Path(path).suffix.lower())

    def is_ignored_dir(self, name: str) -> bool:
        return name in self.ignored_dirs or name in TEST_DIR_NAMES

    # ------------------------------------------------------------ phase 1
    def _iter_source_files(self, root: Path) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
            # Sorted, in place, so os.walk descends deterministically.
            dirnames[:] = sorted(d for d in dirnames if not self.is_ignored_dir(d))
            for filename in sorted(filenames):
                file_path = Path(dirpath) / filename
                if file_path.is_symlink():
                    continue
                yield file_path

    def parse_files(self, root: Path, suppress_decisions: bool = False) -> List[ParsedFile]:
        parsed: List[ParsedFile] = []
        for file_path in self._iter_source_files(root):
            parser = self.parser_for(file_path)
            if parser is None:
                continue
            rel_path = file_path.relative_to(root).as_posix()
            if is_test_path(rel_path):
                continue
            try:
                source = file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                if self.verbose:
                    print(f"CrawlerRouter Warning: Could not read {rel_path}: {e}. Skipping.")
                continue

            graph, line_map = parser.parse_with_lines(source, suppress_decisions)
            if self.verbose:
                print(f"CrawlerRouter: Parsed {rel_path} ({len(graph)} nodes).")
            parsed.append(ParsedFile(rel_path, str(file_path), graph, line_map))
        return parsed

    # ------------------------------------------------------------ phase 2
    @staticmethod
    def build_name_index(parsed_files: Sequence[ParsedFile]) -> Dict[str, List[str]]:
        """Bare declaration name -> relative paths declaring it, in crawl order."""
        index: Dict[str, List[str]] = {}
        for pf in parsed_files:
            for node_id in pf.graph:
                if is_decision_id(node_id):
                    continue
                declaring = index.setdefault(node_id, [])
                if pf.rel_path not in declaring:
                    declaring.append(pf.rel_path)
        return index

    # ------------------------------------------------------------ phase 3
    @staticmethod
    def namespace_graphs(
        parsed_files: Sequence[ParsedFile], name_index: Dict[str, List[str]]
    ) -> Tuple[FlowGraph, SourceMap]:
        merged: FlowGraph = {}
        source_map: SourceMap = {}
        for pf in parsed_files:
            for node_id, edges in pf.graph.items():
                key = namespaced(pf.rel_path, node_id)
                out = merged.setdefault(key, [])
                for edge in edges:
                    if is_decision_id(edge.target):
                        # Decisions are file-local.
                        out.append(FlowEdge(namespaced(pf.rel_path, edge.target), edge.label))
                        continue
                    # Ambiguous names fan out to every declaring file.
                    for declaring_path in name_index.get(edge.target, []):
                        out.append(FlowEdge(namespaced(declaring_path, edge.target), edge.label))

                if not is_decision_id(node_id) and node_id in pf.line_map:
                    source_map[key] = (pf.abs_path, pf.line_map[node_id])
        return merged, source_map

    # ------------------------------------------------------------ phase 4
    @staticmethod
    def drop_dangling_edges(graph: FlowGraph) -> None:
        for node_id, edges in graph.items():
            graph[node_id] = [e for e in edges if is_decision_id(e.target) or e.target in graph]

    @staticmethod
    def prune_empty_decisions(graph: FlowGraph) -> int:
        """
        Removes decision nodes without outgoing edges, and edges into them, until
        nothing changes. Returns the number of nodes removed.
        """
        removed_total = 0
        for _ in range(len(graph) + 1):
            empty = {k for k, edges in graph.items() if is_decision_id(k) and not edges}
            if not empty:
                break
            for node_id in empty:
                del graph[node_id]
            for node_id, edges in graph.items():
                graph[node_id] = [e for e in edges if e.target not in empty]
            removed_total += len(empty)
        # Decision targets that never had a key of their own.
        for node_id, edges in graph.items():
            graph[node_id] = [e for e in edges if e.target in graph]
        return removed_total

    # ------------------------------------------------------------ entry point
    def crawl(self, root: str, suppress_decisions: bool = False) -> Tuple[FlowGraph, SourceMap]:
        """
        Crawls ``root`` and returns (namespaced flow graph, source map).

        A blank, missing or non-directory root yields two empty dicts.
        """
        if not root or not root.strip():
            return {}, {}
        root_path = Path(root).expanduser()
        if not root_path.is_dir():
            if self.verbose:
                print(f"CrawlerRouter: Path not found or not a directory: {root}")
            return {}, {}
        root_path = root_path.resolve()

        parsed_files = self.parse_files(root_path, suppress_decisions)
        name_index = self.build_name_index(parsed_files)
        if self.verbose:
            ambiguous = sorted(name for name, paths in name_index.items() if len(paths) > 1)
            if ambiguous:
                print(f"CrawlerRouter: {len(ambiguous)} names declared in more than one file: {', '.join(ambiguous[:10])}")

        graph, source_map = self.namespace_graphs(parsed_files, name_index)
        self.drop_dangling_edges(graph)
        removed = self.prune_empty_decisions(graph)
        if self.verbose:
            print(f"CrawlerRouter: {len(parsed_files)} files, {len(graph)} nodes, pruned {removed} empty decision nodes.")
        return graph, source_map


def crawl(root: str, suppress_decisions: bool = False, verbose: bool = False) -> Tuple[FlowGraph, SourceMap]:
    return CrawlerRouter(verbose=verbose).crawl(root, suppress_decisions)
