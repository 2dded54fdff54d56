# flowcrawl/crawler/parsers/rust_parser.py
from ..builtins import RUST_BUILTINS
from ..walker import WalkerConfig
from .base import LanguageParser

RUST_WALKER_CONFIG = WalkerConfig(
    function_kinds=("function_item",),
    anon_function_kinds=("closure_expression",),
    anon_parent_kinds=("let_declaration",),
    anon_parent_name_field="pattern",
    call_kind="call_expression",
    method_receiver_kind="field_expression",
    method_name_field="field",
    path_call_kind="scoped_identifier",
    path_name_field="name",
    if_kind="if_expression",
    if_condition_field="condition",
    if_then_field="consequence",
    if_else_field="alternative",
    for_kinds=("for_expression",),
    while_kinds=("while_expression",),
    loop_kinds=("loop_expression",),
    loop_body_field="body",
    while_condition_field="condition",
    match_kind="match_expression",
    match_value_field="value",
    match_body_field="body",
    match_arm_kinds=("match_arm",),
    match_pattern_kind="match_pattern",
    test_scope_kind="mod_item",
    test_scope_name_field="name",
    test_scope_names=("tests", "test"),
    builtins=RUST_BUILTINS,
    comment_kind="line_comment",
    attribute_kinds=("attribute_item",),
)


class RustParser(LanguageParser):
    language_name = "rust"
    extensions = (".rs",)

    @property
    def walker_config(self) -> WalkerConfig:
        return RUST_WALKER_CONFIG
