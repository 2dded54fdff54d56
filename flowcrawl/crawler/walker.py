# flowcrawl/crawler/walker.py
"""
Language-agnostic tree-sitter walk producing a FlowGraph with decision nodes.

Each language front end describes its grammar in a WalkerConfig (node kinds and
field names) and hands the parsed root to walk_tree. Nothing in here knows about
a particular language.
"""
from dataclasses import dataclass
from typing import Any, FrozenSet, List, NamedTuple, Optional, Set, Tuple

from .graph_structures import FlowEdge, FlowGraph, LineMap, is_decision_id, make_decision_id

ANON_FUNCTION_NAME = "<anon_fn>"
FLOW_MARKER = "@flow"

TreeSitterNode = Any  # tree_sitter.Node; kept loose so tests can hand in fakes


@dataclass(frozen=True)
class WalkerConfig:
    """
    Describes how to interpret one grammar's AST nodes for flow extraction.

    Optional fields disable the matching feature when left as None / empty.
    """
    # Named functions (e.g. "function_item", "function_definition").
    function_kinds: Tuple[str, ...]
    call_kind: str
    method_receiver_kind: str
    method_name_field: str
    builtins: FrozenSet[str] = frozenset()
    function_name_field: str = "name"

    # Anonymous functions whose name comes from the enclosing binding.
    anon_function_kinds: Tuple[str, ...] = ()
    anon_parent_kinds: Tuple[str, ...] = ()
    anon_parent_name_field: str = "name"

    call_function_field: str = "function"
    # Scoped/path calls such as Rust's `Foo::bar()`.
    path_call_kind: Optional[str] = None
    path_name_field: Optional[str] = None

    # if / elif / else. Field-based else (Rust, TypeScript) or clause children (Python).
    if_kind: Optional[str] = None
    if_condition_field: Optional[str] = None
    if_then_field: Optional[str] = None
    if_else_field: Optional[str] = None
    elif_clause_kind: Optional[str] = None
    elif_condition_field: Optional[str] = None
    elif_body_field: Optional[str] = None
    else_clause_kind: Optional[str] = None
    else_body_field: Optional[str] = None

    # Loops. Only while_kinds carry their condition in the display text.
    for_kinds: Tuple[str, ...] = ()
    while_kinds: Tuple[str, ...] = ()
    loop_kinds: Tuple[str, ...] = ()
    loop_body_field: Optional[str] = None
    while_condition_field: Optional[str] = None

    # match / switch.
    match_kind: Optional[str] = None
    match_value_field: Optional[str] = None
    match_body_field: Optional[str] = None
    match_arm_kinds: Tuple[str, ...] = ()
    match_pattern_kind: Optional[str] = None  # arm child kind holding the pattern
    match_pattern_field: Optional[str] = None  # or an arm field holding it
    default_arm_label: str = "_"

    # Subtrees to skip entirely, e.g. `mod tests { ... }` in Rust.
    test_scope_kind: Optional[str] = None
    test_scope_name_field: str = "name"
    test_scope_names: Tuple[str, ...] = ()

    # `@flow` comments. Wrapper kinds (decorators, export) and attribute kinds
    # sit between the marker comment and the function node.
    comment_kind: Optional[str] = None
    wrapper_kinds: Tuple[str, ...] = ()
    attribute_kinds: Tuple[str, ...] = ()

    label_max_chars: int = 40


class _Scope(NamedTuple):
    node_id: str
    label: Optional[str]
    function: Optional[str]  # nearest enclosing function name


def truncate(text: str, max_chars: int) -> str:
    text = text.strip()
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "…"


def _same_node(a: Optional[TreeSitterNode], b: Optional[TreeSitterNode]) -> bool:
    if a is None or b is None:
        return False
    return (a.type, a.start_byte, a.end_byte) == (b.type, b.start_byte, b.end_byte)


class _FlowWalker:
    def __init__(self, config: WalkerConfig, source: str, suppress_decisions: bool):
        self.config = config
        self.source_bytes = source.encode("utf8")
        self.suppress_decisions = suppress_decisions
        self.graph: FlowGraph = {}
        self.line_map: LineMap = {}
        self.counter = 0
        self.scope_stack: List[_Scope] = []
        self.force_include: Set[str] = set()

    # ------------------------------------------------------------------ helpers
    def text(self, node: Optional[TreeSitterNode]) -> str:
        if node is None:
            return ""
        return self.source_bytes[node.start_byte:node.end_byte].decode("utf8", errors="replace").strip()

    def field_text(self, node: TreeSitterNode, field_name: Optional[str]) -> str:
        if not field_name:
            return ""
        return self.text(node.child_by_field_name(field_name))

    def _entry(self, node_id: str) -> List[FlowEdge]:
        return self.graph.setdefault(node_id, [])

    def _is_test_scope(self, node: TreeSitterNode) -> bool:
        cfg = self.config
        if not cfg.test_scope_kind or node.type != cfg.test_scope_kind:
            return False
        return self.field_text(node, cfg.test_scope_name_field) in cfg.test_scope_names

    def function_name(self, node: TreeSitterNode) -> str:
        cfg = self.config
        if node.type in cfg.function_kinds:
            return self.field_text(node, cfg.function_name_field) or ANON_FUNCTION_NAME
        parent = node.parent
        if parent is not None and parent.type in cfg.anon_parent_kinds:
            return self.field_text(parent, cfg.anon_parent_name_field) or ANON_FUNCTION_NAME
        return ANON_FUNCTION_NAME

    def _is_function(self, node: TreeSitterNode) -> bool:
        return node.type in self.config.function_kinds or node.type in self.config.anon_function_kinds

    # --------------------------------------------------------- @flow pre-scan
    def collect_force_includes(self, root: TreeSitterNode) -> None:
        if not self.config.comment_kind:
            return
        self._scan_for_markers(root)

    def _has_flow_marker(self, node: TreeSitterNode) -> bool:
        cfg = self.config
        anchor = node
        while anchor.parent is not None and anchor.parent.type in cfg.wrapper_kinds:
            anchor = anchor.parent
        prev = anchor.prev_named_sibling
        while prev is not None and prev.type in cfg.attribute_kinds:
            prev = prev.prev_named_sibling
        return prev is not None and prev.type == cfg.comment_kind and FLOW_MARKER in self.text(prev)

    def _scan_for_markers(self, node: TreeSitterNode) -> None:
        if self._is_test_scope(node):
            return
        if self._is_function(node) and self._has_flow_marker(node):
            name = self.function_name(node)
            if name != ANON_FUNCTION_NAME:
                self.force_include.add(name)
        for child in node.children:
            self._scan_for_markers(child)

    # ------------------------------------------------------------------- walk
    def walk_children(self, node: TreeSitterNode) -> None:
        for child in node.children:
            self.walk(child)

    def walk_scoped(self, node: Optional[TreeSitterNode], decision_id: str, label: str) -> None:
        if node is None:
            return
        parent_fn = self.scope_stack[-1].function if self.scope_stack else None
        self.scope_stack.append(_Scope(decision_id, label, parent_fn))
        self.walk(node)
        self.scope_stack.pop()

    def walk(self, node: TreeSitterNode) -> None:
        cfg = self.config
        kind = node.type

        if self._is_test_scope(node):
            return

        if self._is_function(node):
            self._walk_function(node)
            return

        if not self.suppress_decisions:
            if cfg.if_kind and kind == cfg.if_kind:
                self._walk_if(node)
                return
            if kind in cfg.for_kinds or kind in cfg.while_kinds or kind in cfg.loop_kinds:
                self._walk_loop(node)
                return
            if cfg.match_kind and kind == cfg.match_kind:
                self._walk_match(node)
                return

        if kind == cfg.call_kind:
            self._record_call(node)

        self.walk_children(node)

    def _walk_function(self, node: TreeSitterNode) -> None:
        name = self.function_name(node)
        self.line_map[name] = node.start_point[0] + 1
        self.scope_stack.append(_Scope(name, None, name))
        self.walk_children(node)
        self._entry(name)
        self.scope_stack.pop()

    def _open_decision(self, display: str) -> str:
        self.counter += 1
        decision_id = make_decision_id(self.counter, display)
        # Decisions hang off their parent unlabeled, even inside another branch.
        if self.scope_stack:
            self._entry(self.scope_stack[-1].node_id).append(FlowEdge(decision_id))
        return decision_id

    def _walk_if(self, node: TreeSitterNode) -> None:
        cfg = self.config
        cond_node = node.child_by_field_name(cfg.if_condition_field) if cfg.if_condition_field else None
        cond_text = truncate(self.text(cond_node), cfg.label_max_chars)
        decision_id = self._open_decision(f"if {cond_text}" if cond_text else "if")

        # Condition is evaluated in the enclosing scope.
        if cond_node is not None:
            self.walk(cond_node)
        if cfg.if_then_field:
            self.walk_scoped(node.child_by_field_name(cfg.if_then_field), decision_id, "True")
        if cfg.if_else_field:
            self.walk_scoped(node.child_by_field_name(cfg.if_else_field), decision_id, "False")

        if cfg.elif_clause_kind:
            elif_n = 0
            for child in node.children:
                if child.type != cfg.elif_clause_kind:
                    continue
                elif_n += 1
                if cfg.elif_condition_field:
                    elif_cond = child.child_by_field_name(cfg.elif_condition_field)
                    if elif_cond is not None:
                        self.walk(elif_cond)
                label = "Elif" if elif_n == 1 else f"Elif_{elif_n}"
                if cfg.elif_body_field:
                    self.walk_scoped(child.child_by_field_name(cfg.elif_body_field), decision_id, label)

        if cfg.else_clause_kind:
            for child in node.children:
                if child.type == cfg.else_clause_kind:
                    if cfg.else_body_field:
                        self.walk_scoped(child.child_by_field_name(cfg.else_body_field), decision_id, "False")
                    break

        self._entry(decision_id)

    def _walk_loop(self, node: TreeSitterNode) -> None:
        cfg = self.config
        kind = node.type
        if kind in cfg.while_kinds:
            cond_text = truncate(self.field_text(node, cfg.while_condition_field), cfg.label_max_chars)
            display = f"while {cond_text}" if cond_text else "while"
        elif kind in cfg.loop_kinds:
            display = "loop"
        else:
            display = "for"
        decision_id = self._open_decision(display)

        body = node.child_by_field_name(cfg.loop_body_field) if cfg.loop_body_field else None
        for child in node.children:
            if _same_node(child, body):
                self.walk_scoped(child, decision_id, "Loop")
            else:
                # Iterables and conditions run in the enclosing scope.
                self.walk(child)
        self._entry(decision_id)

    def _arm_pattern(self, arm: TreeSitterNode) -> Tuple[str, List[TreeSitterNode]]:
        cfg = self.config
        pattern_nodes: List[TreeSitterNode] = []
        if cfg.match_pattern_field:
            field_node = arm.child_by_field_name(cfg.match_pattern_field)
            if field_node is not None:
                pattern_nodes.append(field_node)
        if cfg.match_pattern_kind:
            pattern_nodes.extend(c for c in arm.children if c.type == cfg.match_pattern_kind)
        texts = [t for t in (self.text(p) for p in pattern_nodes) if t]
        label = ", ".join(texts) if texts else cfg.default_arm_label
        return label, pattern_nodes

    def _walk_match(self, node: TreeSitterNode) -> None:
        cfg = self.config
        value_node = node.child_by_field_name(cfg.match_value_field) if cfg.match_value_field else None
        value_text = truncate(self.text(value_node), cfg.label_max_chars)
        decision_id = self._open_decision(f"match {value_text}" if value_text else "match")

        if value_node is not None:
            self.walk(value_node)

        arms_parent = node
        if cfg.match_body_field:
            body = node.child_by_field_name(cfg.match_body_field)
            if body is not None:
                arms_parent = body
        parent_fn = self.scope_stack[-1].function if self.scope_stack else None
        for arm in arms_parent.children:
            if arm.type not in cfg.match_arm_kinds:
                continue
            label, pattern_nodes = self._arm_pattern(arm)
            self.scope_stack.append(_Scope(decision_id, label, parent_fn))
            for sub in arm.children:
                if any(_same_node(sub, p) for p in pattern_nodes):
                    continue
                self.walk(sub)
            self.scope_stack.pop()
        self._entry(decision_id)

    def _callee_name(self, node: TreeSitterNode) -> str:
        cfg = self.config
        func = node.child_by_field_name(cfg.call_function_field)
        if func is None:
            return ""
        if func.type == cfg.method_receiver_kind:
            return self.field_text(func, cfg.method_name_field) or self.text(func)
        if cfg.path_call_kind and func.type == cfg.path_call_kind:
            return self.field_text(func, cfg.path_name_field or "name") or self.text(func)
        return self.text(func)

    def _record_call(self, node: TreeSitterNode) -> None:
        callee = self._callee_name(node)
        if not callee or not self.scope_stack:
            return
        scope = self.scope_stack[-1]
        if callee in self.config.builtins:
            forced = callee in self.force_include or scope.function in self.force_include
            if not forced:
                return
        self._entry(scope.node_id).append(FlowEdge(callee, scope.label))


def walk_tree(
    config: WalkerConfig,
    root: TreeSitterNode,
    source: str,
    suppress_decisions: bool = False,
) -> Tuple[FlowGraph, LineMap]:
    """
    Walks a parsed syntax tree and returns (flow graph, bare name -> declaration line).

    With suppress_decisions the if/loop/match constructs are walked transparently
    and callees attach straight to the enclosing function.
    """
    walker = _FlowWalker(config, source, suppress_decisions)
    walker.collect_force_includes(root)
    walker.walk(root)
    return walker.graph, walker.line_map


def bare_function_ids(graph: FlowGraph) -> List[str]:
    """Keys of a per-file graph that are real declarations, not decision nodes."""
    return [node_id for node_id in graph if not is_decision_id(node_id)]
