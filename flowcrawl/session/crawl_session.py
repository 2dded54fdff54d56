# flowcrawl/session/crawl_session.py
import queue
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from flowcrawl.crawler.graph_structures import FlowGraph, SourceMap, count_edges, is_decision_id
from flowcrawl.crawler.router import CrawlerRouter, is_test_path
from flowcrawl.layout.hierarchy import collect_node_ids, compute_levels
from flowcrawl.specs.schemas import CrawlRequest, TraceRequest
from flowcrawl.tracing.flow_tracer import TraceResult, trace_flow
from flowcrawl.utils.config_loader import DEFAULT_APP_CONFIG
from flowcrawl.watcher.file_watcher import (
    DEFAULT_DEBOUNCE_SECONDS,
    CrawlDebouncer,
    FileWatcherService,
    WatchEvent,
)


@dataclass
class CrawlOutcome:
    request: CrawlRequest
    graph: FlowGraph = field(default_factory=dict)
    source_map: SourceMap = field(default_factory=dict)
    levels: Dict[str, int] = field(default_factory=dict)
    status: str = ""
    ok: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "root_path": self.request.root_path,
            "suppress_decisions": self.request.suppress_decisions,
            "status": self.status,
            "graph": {
                node_id: [{"target": e.target, "label": e.label} for e in edges]
                for node_id, edges in sorted(self.graph.items())
            },
            "source_map": {
                node_id: {"file": path, "line": line}
                for node_id, (path, line) in sorted(self.source_map.items())
            },
            "levels": dict(sorted(self.levels.items())),
        }


class CrawlSession:
    """
    Owns one crawl pipeline: handles requests, keeps the last result, and holds
    the single file watcher that re-issues the last request after edits.
    """

    def __init__(self, app_config: Optional[Dict[str, Any]] = None):
        self.app_config = app_config if app_config is not None else DEFAULT_APP_CONFIG
        self.verbose = self.app_config.get("general", {}).get("verbose", False)
        crawler_cfg = self.app_config.get("crawler", {})
        watcher_cfg = self.app_config.get("watcher", {})

        self.router = CrawlerRouter(
            verbose=self.verbose,
            extra_ignored_dirs=crawler_cfg.get("extra_ignored_dirs") or (),
        )
        self.watch_enabled: bool = bool(watcher_cfg.get("enabled", False))
        self.debounce_seconds: float = float(watcher_cfg.get("debounce_seconds", DEFAULT_DEBOUNCE_SECONDS))

        self.last_request: Optional[CrawlRequest] = None
        self.last_outcome: Optional[CrawlOutcome] = None
        self.watcher: Optional[FileWatcherService] = None
        self.debouncer: Optional[CrawlDebouncer] = None

    # -------------------------------------------------------------- crawling
    def handle_request(self, request: CrawlRequest) -> CrawlOutcome:
        root_path = request.root_path.strip()

        if not root_path or not Path(root_path).expanduser().is_dir():
            # The watched root, its request and its graph stay current.
            outcome = CrawlOutcome(request=request, status=f"crawl: path not found: {root_path}")
            self._report(outcome)
            return outcome

        self.last_request = request

        graph, source_map = self.router.crawl(root_path, request.suppress_decisions)
        if not graph:
            outcome = CrawlOutcome(
                request=request,
                source_map=source_map,
                status=f"crawl: no functions found in {root_path}",
            )
            self._finish(outcome)
            self._replace_watcher(root_path)
            return outcome

        levels = compute_levels(graph, collect_node_ids(graph), verbose=self.verbose)
        function_count = sum(1 for node_id in graph if not is_decision_id(node_id))
        status = (
            f"Crawled {len(graph)} nodes ({function_count} functions), "
            f"{count_edges(graph)} edges from {root_path}"
        )
        outcome = CrawlOutcome(
            request=request, graph=graph, source_map=source_map, levels=levels, status=status, ok=True
        )
        self._finish(outcome)
        self._replace_watcher(root_path)
        return outcome

    def _finish(self, outcome: CrawlOutcome) -> None:
        self.last_outcome = outcome
        self._report(outcome)

    def _report(self, outcome: CrawlOutcome) -> None:
        if self.verbose or not outcome.ok:
            print(f"CrawlSession: {outcome.status}")

    def trace(self, request: TraceRequest) -> TraceResult:
        if self.last_outcome is None or not self.last_outcome.graph:
            return TraceResult(status="Trace: Nothing crawled yet")
        return trace_flow(self.last_outcome.graph, request.source, request.sink)

    # -------------------------------------------------------------- watching
    def _is_relevant(self, root: Path, path: Path) -> bool:
        try:
            rel = path.resolve().relative_to(root)
        except ValueError:
            return False
        if any(self.router.is_ignored_dir(part) for part in rel.parts[:-1]):
            return False
        return not is_test_path(rel.as_posix())

    def _replace_watcher(self, root_path: str) -> None:
        if not self.watch_enabled:
            return
        self.stop_watching()
        event_queue: "queue.Queue[WatchEvent]" = queue.Queue()
        root = Path(root_path).expanduser().resolve()
        try:
            watcher = FileWatcherService(
                root,
                event_queue,
                self.router.supported_extensions,
                is_relevant=lambda p: self._is_relevant(root, p),
                verbose=self.verbose,
            )
        except ValueError as e:
            print(f"CrawlSession Warning: Not watching {root_path}: {e}")
            return
        watcher.start()
        self.watcher = watcher
        self.debouncer = CrawlDebouncer(event_queue, self.debounce_seconds)

    def stop_watching(self) -> None:
        if self.watcher is not None:
            self.watcher.stop()
        self.watcher = None
        self.debouncer = None

    def tick(self, now: Optional[float] = None) -> Optional[CrawlOutcome]:
        """
        Non-blocking. Re-runs the last request once file events have gone quiet
        for the debounce window; returns the new outcome, else None.
        """
        if self.debouncer is None or self.last_request is None:
            return None
        if not self.debouncer.poll(now):
            return None
        if self.verbose:
            print(f"CrawlSession: Changes detected, re-crawling {self.last_request.root_path}")
        return self.handle_request(self.last_request)
