"""
Call graph output format generators.

This module provides functions to render a call graph in various output
formats: text, DOT (Graphviz), and JSON. Roots and recursive cycles are
computed on the graph's networkx view.
"""

import json
from typing import List

import networkx as nx

from ...machinery.callgraph import CallGraph


def find_roots(call_graph: CallGraph) -> List[str]:
    """Names of the functions nothing in the program calls."""
    view = call_graph.to_networkx()
    return sorted(view.nodes[n]["name"] for n, degree in view.in_degree() if degree == 0)


def find_cycles(call_graph: CallGraph) -> List[List[str]]:
    """Recursive call chains, as lists of function names."""
    view = nx.DiGraph(call_graph.to_networkx())
    cycles = []
    for cycle in nx.simple_cycles(view):
        names = [view.nodes[n]["name"] for n in cycle]
        # Rotate so the smallest name leads; keeps output stable
        start = names.index(min(names))
        cycles.append(names[start:] + names[:start])
    return sorted(cycles)


def generate_text_output(call_graph: CallGraph) -> str:
    """Generate text output for the call graph."""
    output = []
    output.append("Call Graph Analysis")
    output.append("=" * 50)
    output.append("")

    cg_data = call_graph.get()
    modules = call_graph.get_modules()

    output.append(f"Functions ({len(cg_data)}):")
    for func_name in sorted(cg_data.keys()):
        modname = modules.get(func_name, "")
        if modname:
            output.append(f"  - {func_name} (from {modname})")
        else:
            output.append(f"  - {func_name} (unresolved)")
    output.append("")

    output.append("Call Relationships:")
    for caller_name in sorted(cg_data.keys()):
        callees = cg_data.get(caller_name, set())
        if callees:
            output.append(f"  {caller_name} -> {', '.join(sorted(callees))}")
        else:
            output.append(f"  {caller_name} -> (no calls)")

    output.append("")
    output.append("Roots:")
    for name in find_roots(call_graph):
        output.append(f"  - {name}")

    cycles = find_cycles(call_graph)
    if cycles:
        output.append("")
        output.append("Cycles detected:")
        for i, cycle in enumerate(cycles):
            output.append(f"  Cycle {i+1}: {' -> '.join(cycle + cycle[:1])}")

    return "\n".join(output)


def generate_dot_output(call_graph: CallGraph) -> str:
    """Generate DOT format output for the call graph."""
    lines = []
    lines.append("digraph CallGraph {")
    lines.append("    rankdir=TB;")
    lines.append("    node [shape=box, style=filled, fillcolor=lightblue];")
    lines.append("")

    cg_data = call_graph.get()
    modules = call_graph.get_modules()

    for func_name in sorted(cg_data.keys()):
        # Escape special characters for DOT
        safe_name = func_name.replace('"', '\\"')
        style = "" if func_name in modules else ", fillcolor=lightgrey"
        lines.append(f'    "{safe_name}" [label="{safe_name}"{style}];')

    lines.append("")

    for caller_name in sorted(cg_data.keys()):
        for callee_name in sorted(cg_data[caller_name]):
            caller_safe = caller_name.replace('"', '\\"')
            callee_safe = callee_name.replace('"', '\\"')
            lines.append(f'    "{caller_safe}" -> "{callee_safe}";')

    lines.append("}")
    return "\n".join(lines)


def generate_json_output(call_graph: CallGraph) -> str:
    """Generate JSON output for the call graph."""
    data = {
        "functions": [],
        "calls": [],
        "roots": find_roots(call_graph),
        "cycles": find_cycles(call_graph),
    }

    for node in call_graph.nodes():
        data["functions"].append({"name": node.name, "package": node.package})

    for edge in call_graph.edges():
        data["calls"].append({
            "caller": call_graph.node(edge.caller).name,
            "callee": call_graph.node(edge.callee).name,
            "call_site": edge.site,
        })

    return json.dumps(data, indent=2)
