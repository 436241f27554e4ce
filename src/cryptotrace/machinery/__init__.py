"""
Core data structures shared by the extractors and the audit engine.

- callgraph: arena call graph (Node, Edge, CallGraph)
"""

from .callgraph import CallGraph, CallGraphError, Edge, Node, build_graph

__all__ = ["CallGraph", "CallGraphError", "Edge", "Node", "build_graph"]
