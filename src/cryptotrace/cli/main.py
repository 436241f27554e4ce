"""Main CLI dispatcher for cryptotrace.

This module provides the main command-line interface for cryptotrace,
dispatching commands to the audit and call graph sub-modules.
"""

import argparse
import logging
import sys

from cryptotrace import __version__
from .audit import add_audit_parser, run_audit
from .callgraph import add_callgraph_parser, run_callgraph


def configure_logging(args):
    level = logging.DEBUG if args.debug else logging.INFO if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def main(argv=None):
    """Main entry point for the cryptotrace CLI.

    Parses command-line arguments and dispatches to the audit or call graph
    sub-commands.

    Returns:
        int: Exit code (0 compliant/success, 1 not compliant, 2 error).
    """
    parser = argparse.ArgumentParser(
        description="cryptotrace - audit a program's cryptographic module usage",
        prog="cryptotrace",
    )

    parser.add_argument("--version", action="version", version=f"cryptotrace {__version__}")

    subparsers = parser.add_subparsers(
        dest="command", help="Available commands", required=True
    )

    add_audit_parser(subparsers)
    add_callgraph_parser(subparsers)

    args = parser.parse_args(argv)
    configure_logging(args)

    if not args.source.is_dir():
        print(f"Error: '{args.source}' is not a directory", file=sys.stderr)
        return 2

    if args.command == "audit":
        return run_audit(args)
    elif args.command == "callgraph":
        return run_callgraph(args)

    parser.print_help()
    return 2


if __name__ == "__main__":
    sys.exit(main())
