#!/usr/bin/env python3
"""Crawl a source tree and print or export its leveled flow graph."""

import argparse
import json
import sys
import time
from pathlib import Path

from flowcrawl.crawler.graph_structures import decision_display
from flowcrawl.session.crawl_session import CrawlOutcome, CrawlSession
from flowcrawl.specs.schemas import CrawlRequest, TraceRequest
from flowcrawl.utils.config_loader import load_app_config


def print_outcome(outcome: CrawlOutcome) -> None:
    print(outcome.status)
    by_level = sorted(outcome.graph, key=lambda n: (outcome.levels.get(n, 0), n))
    for node_id in by_level:
        location = outcome.source_map.get(node_id)
        suffix = f"  ({location[0]}:{location[1]})" if location else ""
        print(f"[{outcome.levels.get(node_id, 0)}] {decision_display(node_id)}{suffix}")
        for edge in outcome.graph[node_id]:
            label = f" [{edge.label}]" if edge.label else ""
            print(f"      ->{label} {decision_display(edge.target)}")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Extract a call/control-flow graph from a multi-language source tree"
    )
    parser.add_argument("root", type=str, help="Directory to crawl")
    parser.add_argument(
        "--no-flow", action="store_true", help="Flat call graph without decision nodes"
    )
    parser.add_argument(
        "--config", type=Path, default=None, help="Optional config YAML"
    )
    parser.add_argument("--json", type=Path, default=None, help="Write the result as JSON to this file")
    parser.add_argument(
        "--trace", nargs=2, metavar=("SOURCE", "SINK"), default=None, help="Highlight paths from SOURCE to SINK"
    )
    parser.add_argument("--watch", action="store_true", help="Re-crawl when files change")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    app_config = load_app_config(args.config, verbose=args.verbose)
    if args.verbose:
        app_config["general"]["verbose"] = True
    if args.watch:
        app_config["watcher"]["enabled"] = True
    suppress = args.no_flow or bool(app_config["crawler"].get("suppress_decisions"))

    session = CrawlSession(app_config)
    outcome = session.handle_request(CrawlRequest(root_path=args.root, suppress_decisions=suppress))
    print_outcome(outcome)

    if args.json:
        args.json.write_text(json.dumps(outcome.to_dict(), indent=2), encoding="utf-8")
        print(f"Wrote {args.json}")

    if args.trace:
        result = session.trace(TraceRequest(source=args.trace[0], sink=args.trace[1]))
        print(result.status)
        for caller, callee in sorted(result.edges):
            print(f"  {decision_display(caller)} -> {decision_display(callee)}")

    if args.watch:
        print("Watching for changes. Press Ctrl+C to stop.")
        try:
            while True:
                new_outcome = session.tick()
                if new_outcome is not None:
                    print_outcome(new_outcome)
                time.sleep(0.1)
        except KeyboardInterrupt:
            print("\nKeyboard interrupt received.")
        finally:
            session.stop_watching()

    return 0 if outcome.ok else 1


if __name__ == "__main__":
    sys.exit(main())
