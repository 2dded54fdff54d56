import unittest
from typing import Dict, List, Optional, Sequence

from flowcrawl.crawler.graph_structures import FlowEdge, decision_display, is_decision_id
from flowcrawl.crawler.walker import WalkerConfig, bare_function_ids, truncate, walk_tree


class FakeNode:
    """Just enough of tree_sitter.Node for the walker."""

    def __init__(self, type: str, children: Sequence["FakeNode"] = (), fields: Optional[Dict[str, "FakeNode"]] = None, text: Optional[str] = None):
        self.type = type
        self.children: List[FakeNode] = list(children)
        self.fields = fields or {}
        for child in self.fields.values():
            if child not in self.children:
                self.children.append(child)
        self.leaf_text = text
        self.parent: Optional[FakeNode] = None
        self.start_byte = 0
        self.end_byte = 0
        self.start_point = (0, 0)
        for child in self.children:
            child.parent = self

    def child_by_field_name(self, name: str) -> Optional["FakeNode"]:
        return self.fields.get(name)

    @property
    def prev_named_sibling(self) -> Optional["FakeNode"]:
        if self.parent is None:
            return None
        siblings = self.parent.children
        index = siblings.index(self)
        return siblings[index - 1] if index > 0 else None


def layout(root: FakeNode) -> str:
    """Assigns byte offsets to every node and returns the matching source text."""
    pieces: List[str] = []
    offset = 0

    def place(node: FakeNode) -> None:
        nonlocal offset
        if node.leaf_text is not None:
            node.start_byte = offset
            pieces.append(node.leaf_text)
            offset += len(node.leaf_text)
            node.end_byte = offset
            pieces.append("\n")
            offset += 1
        else:
            node.start_byte = offset
            for child in node.children:
                place(child)
            node.end_byte = offset
        node.start_point = ("".join(pieces)[:node.start_byte].count("\n"), 0)

    place(root)
    return "".join(pieces)


def ident(text: str) -> FakeNode:
    return FakeNode("ident", text=text)


def call(name: str) -> FakeNode:
    return FakeNode("call", fields={"function": ident(name)})


def func(name: str, *body: FakeNode) -> FakeNode:
    return FakeNode("func", fields={"name": ident(name), "body": FakeNode("block", body)})


TOY_CONFIG = WalkerConfig(
    function_kinds=("func",),
    call_kind="call",
    method_receiver_kind="member",
    method_name_field="prop",
    if_kind="cond",
    if_condition_field="test",
    if_then_field="then",
    if_else_field="otherwise",
    builtins=frozenset({"print"}),
    comment_kind="remark",
)


class TestWalker(unittest.TestCase):
    def test_truncate(self):
        self.assertEqual(truncate("  short  ", 40), "short")
        self.assertEqual(truncate("x" * 50, 40), "x" * 40 + "…")

    def test_toy_grammar_needs_only_a_config(self):
        branch = FakeNode(
            "cond",
            fields={
                "test": ident("ok"),
                "then": FakeNode("block", [call("yes")]),
                "otherwise": FakeNode("block", [call("print")]),
            },
        )
        root = FakeNode("program", [func("main", call("helper"), branch)])
        source = layout(root)

        graph, lines = walk_tree(TOY_CONFIG, root, source)

        main_edges = graph["main"]
        self.assertEqual(main_edges[0], FlowEdge("helper", None))
        decision_id = main_edges[1].target
        self.assertTrue(is_decision_id(decision_id))
        self.assertEqual(decision_display(decision_id), "if ok")
        self.assertEqual(graph[decision_id], [FlowEdge("yes", "True")])
        self.assertEqual(lines, {"main": 1})
        self.assertEqual(bare_function_ids(graph), ["main"])

    def test_flow_marker_on_enclosing_function_keeps_builtin_calls(self):
        root = FakeNode("program", [
            FakeNode("remark", text="# @flow"),
            func("main", call("print")),
            func("other", call("print")),
        ])
        source = layout(root)

        graph, _lines = walk_tree(TOY_CONFIG, root, source)

        self.assertEqual(graph["main"], [FlowEdge("print", None)])
        self.assertEqual(graph["other"], [])

    def test_suppressed_decisions_attach_calls_to_function(self):
        branch = FakeNode(
            "cond",
            fields={
                "test": ident("ok"),
                "then": FakeNode("block", [call("yes")]),
                "otherwise": FakeNode("block", [call("no")]),
            },
        )
        root = FakeNode("program", [func("main", branch)])
        source = layout(root)

        graph, _lines = walk_tree(TOY_CONFIG, root, source, suppress_decisions=True)

        self.assertEqual(graph, {"main": [FlowEdge("yes", None), FlowEdge("no", None)]})

    def test_long_condition_is_truncated_in_display(self):
        long_name = "a" * 60
        branch = FakeNode("cond", fields={"test": ident(long_name), "then": FakeNode("block", [call("yes")])})
        root = FakeNode("program", [func("main", branch)])
        source = layout(root)

        graph, _lines = walk_tree(TOY_CONFIG, root, source)

        decision_id = graph["main"][0].target
        self.assertEqual(decision_display(decision_id), "if " + "a" * 40 + "…")

    def test_call_outside_any_function_is_ignored(self):
        root = FakeNode("program", [call("setup"), func("main")])
        source = layout(root)

        graph, _lines = walk_tree(TOY_CONFIG, root, source)

        self.assertEqual(graph, {"main": []})


if __name__ == '__main__':
    unittest.main()
