"""
Call graph extraction for Python code.

The audit engine consumes an arena CallGraph; this package builds one from
Python sources and renders it for inspection:
- ast_based: AST-based extraction with import-aware call resolution
- formats: text, DOT and JSON output
"""

from .ast_based import (
    MODULE_SYMBOL,
    CallGraphBuilder,
    build_call_graph,
    discover_files,
    extract_call_graph,
)
from .formats import generate_text_output, generate_dot_output, generate_json_output
from ...machinery.callgraph import CallGraph, CallGraphError

__all__ = [
    "MODULE_SYMBOL",
    "CallGraphBuilder",
    "build_call_graph",
    "discover_files",
    "extract_call_graph",
    "CallGraph",
    "CallGraphError",
    "generate_text_output",
    "generate_dot_output",
    "generate_json_output",
]
