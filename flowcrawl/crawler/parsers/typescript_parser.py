# flowcrawl/crawler/parsers/typescript_parser.py
from ..builtins import TYPESCRIPT_BUILTINS
from ..walker import WalkerConfig
from .base import LanguageParser

TYPESCRIPT_WALKER_CONFIG = WalkerConfig(
    function_kinds=("function_declaration", "generator_function_declaration", "method_definition"),
    anon_function_kinds=("arrow_function", "function_expression"),
    anon_parent_kinds=("variable_declarator", "public_field_definition"),
    anon_parent_name_field="name",
    call_kind="call_expression",
    method_receiver_kind="member_expression",
    method_name_field="property",
    if_kind="if_statement",
    if_condition_field="condition",
    if_then_field="consequence",
    if_else_field="alternative",
    for_kinds=("for_statement", "for_in_statement"),
    while_kinds=("while_statement", "do_statement"),
    loop_body_field="body",
    while_condition_field="condition",
    match_kind="switch_statement",
    match_value_field="value",
    match_body_field="body",
    match_arm_kinds=("switch_case", "switch_default"),
    match_pattern_field="value",
    default_arm_label="default",
    builtins=TYPESCRIPT_BUILTINS,
    comment_kind="comment",
    wrapper_kinds=("export_statement",),
)


class TypeScriptParser(LanguageParser):
    language_name = "typescript"
    extensions = (".ts", ".mts", ".cts")

    @property
    def walker_config(self) -> WalkerConfig:
        return TYPESCRIPT_WALKER_CONFIG


class TsxParser(TypeScriptParser):
    """Same walker vocabulary, TSX grammar (JSX elements inside TypeScript)."""
    language_name = "tsx"
    extensions = (".tsx",)
