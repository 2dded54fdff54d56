"""Multi-language call/control-flow graph crawler built on tree-sitter."""

__version__ = "0.1.0"
