from .base import LanguageParser
from .python_parser import PythonParser, PYTHON_WALKER_CONFIG
from .rust_parser import RustParser, RUST_WALKER_CONFIG
from .typescript_parser import TypeScriptParser, TsxParser, TYPESCRIPT_WALKER_CONFIG

__all__ = [
    "LanguageParser",
    "PythonParser",
    "RustParser",
    "TypeScriptParser",
    "TsxParser",
    "PYTHON_WALKER_CONFIG",
    "RUST_WALKER_CONFIG",
    "TYPESCRIPT_WALKER_CONFIG",
]
