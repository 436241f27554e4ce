"""
CLI functionality for call graph inspection.
"""

import logging
import sys
from pathlib import Path

from cryptotrace.analysis.callgraph import (
    build_call_graph,
    generate_dot_output,
    generate_json_output,
    generate_text_output,
)
from cryptotrace.application.errors import AnalysisError
from .audit import split_patterns

LOG = logging.getLogger(__name__)

FORMAT_GENERATORS = {
    "text": generate_text_output,
    "dot": generate_dot_output,
    "json": generate_json_output,
}


def run_callgraph(args):
    """Build the call graph of a program and print or write it."""
    patterns = split_patterns(args.patterns)
    try:
        call_graph = build_call_graph(args.source, patterns)
    except AnalysisError as e:
        LOG.error("Call graph construction failed: %s", e)
        if args.debug:
            raise
        return 2

    output = FORMAT_GENERATORS[args.format](call_graph)

    if args.output:
        try:
            with open(args.output, "w", encoding="utf-8") as f:
                f.write(output + "\n")
        except OSError as e:
            LOG.error("Cannot write call graph to %s: %s", args.output, e)
            return 2
        print(f"Call graph written to {args.output}")
    else:
        print(output)

    return 0


def add_callgraph_parser(subparsers):
    """Add call graph subcommand to the argument parser."""
    parser = subparsers.add_parser(
        "callgraph", help="Build and print the call graph the audit runs over"
    )

    parser.add_argument("source", type=Path, help="Source code directory to analyze")

    parser.add_argument(
        "--patterns",
        help="Comma-separated glob patterns of the files to include",
    )

    parser.add_argument(
        "--format",
        "-f",
        choices=sorted(FORMAT_GENERATORS),
        default="text",
        help="Output format (default: text)",
    )

    parser.add_argument(
        "--output", "-o", type=Path, help="Output file (default: stdout)"
    )

    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )

    parser.add_argument(
        "--debug", "-d", action="store_true", help="Debug output"
    )
