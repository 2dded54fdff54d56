# flowcrawl/crawler/parsers/python_parser.py
from ..builtins import PYTHON_BUILTINS
from ..walker import WalkerConfig
from .base import LanguageParser

PYTHON_WALKER_CONFIG = WalkerConfig(
    function_kinds=("function_definition",),
    anon_function_kinds=("lambda",),
    anon_parent_kinds=("assignment",),
    anon_parent_name_field="left",
    call_kind="call",
    method_receiver_kind="attribute",
    method_name_field="attribute",
    if_kind="if_statement",
    if_condition_field="condition",
    if_then_field="consequence",
    elif_clause_kind="elif_clause",
    elif_condition_field="condition",
    elif_body_field="consequence",
    else_clause_kind="else_clause",
    else_body_field="body",
    for_kinds=("for_statement",),
    while_kinds=("while_statement",),
    loop_body_field="body",
    while_condition_field="condition",
    match_kind="match_statement",
    match_value_field="subject",
    match_body_field="body",
    match_arm_kinds=("case_clause",),
    match_pattern_kind="case_pattern",
    builtins=PYTHON_BUILTINS,
    comment_kind="comment",
    wrapper_kinds=("decorated_definition",),
)


class PythonParser(LanguageParser):
    language_name = "python"
    extensions = (".py", ".pyi")

    @property
    def walker_config(self) -> WalkerConfig:
        return PYTHON_WALKER_CONFIG
