"""
Cryptographic usage audit CLI.
"""
import argparse
import logging
import sys
from pathlib import Path

from cryptotrace.application.errors import AnalysisError
from cryptotrace.audit.core.analyzer import CryptoAnalyzer
from cryptotrace.audit.core.config import AuditConfig
from cryptotrace.audit.core.constants import DEFAULT_CALL_TREE_DEPTH
from cryptotrace.audit.core.policy import DEFAULT_POLICY, load_policy
from cryptotrace.audit.formatters import FORMATTERS

LOG = logging.getLogger(__name__)

EXIT_COMPLIANT = 0
EXIT_NOT_COMPLIANT = 1
EXIT_ERROR = 2


def add_audit_parser(subparsers):
    """Add audit subcommand parser."""
    parser = subparsers.add_parser(
        "audit",
        help="Find and classify calls into tracked cryptographic modules"
    )
    parser.add_argument(
        "source",
        type=Path,
        help="Source code directory to analyze"
    )
    parser.add_argument(
        "--patterns",
        help="Build the call graph from files matching these glob patterns "
             "(comma-separated, e.g. 'main.py,app/*.py'; default: all Python files)"
    )
    parser.add_argument(
        "--entry-package",
        help="Top package of the program; main/init only count as roots inside it"
    )
    parser.add_argument(
        "--policy",
        type=Path,
        help="JSON policy file (default: built-in pycryptodome policy)"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file for results (default: stdout)"
    )
    parser.add_argument(
        "--format", "-f",
        choices=sorted(FORMATTERS),
        help="Output format (default: json with --output, text otherwise)"
    )
    parser.add_argument(
        "--unapproved-only",
        action="store_true",
        help="Only report usages that are not approved"
    )
    parser.add_argument(
        "--denoise",
        action="store_true",
        help="Drop usages made from library-internal packages"
    )
    parser.add_argument(
        "--call-tree",
        action="store_true",
        help="Include the call path to every usage (increases computation time)"
    )
    parser.add_argument(
        "--call-tree-depth",
        type=int,
        default=DEFAULT_CALL_TREE_DEPTH,
        help="Maximum depth for call path search (default: %(default)s)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Debug output"
    )


def build_config(args):
    """Translate parsed arguments into an AuditConfig."""
    if args.call_tree_depth < 0:
        raise AnalysisError(f"--call-tree-depth must be non-negative, got {args.call_tree_depth}")
    return AuditConfig(
        call_tree=args.call_tree,
        call_tree_depth=args.call_tree_depth,
        unapproved_only=args.unapproved_only,
        denoise=args.denoise,
    )


def split_patterns(value):
    if not value:
        return None
    return [pattern.strip() for pattern in value.split(",") if pattern.strip()]


def run_audit(args):
    """Run the audit and print or write its report.

    Returns:
        int: 0 when compliant, 1 when not, 2 when the analysis failed
    """
    try:
        policy = load_policy(args.policy) if args.policy else DEFAULT_POLICY
        analyzer = CryptoAnalyzer(policy=policy, config=build_config(args))
        result = analyzer.analyze(
            args.source,
            patterns=split_patterns(args.patterns),
            entry_package=args.entry_package,
        )
    except AnalysisError as e:
        LOG.error("Analysis failed: %s", e)
        if args.debug:
            raise
        return EXIT_ERROR

    fmt = args.format or ("json" if args.output else "text")
    report = FORMATTERS[fmt]
    if args.output:
        try:
            with open(args.output, "w", encoding="utf-8") as f:
                report(result, f, verbose=args.verbose)
        except OSError as e:
            LOG.error("Cannot write results to %s: %s", args.output, e)
            return EXIT_ERROR
        print(f"Results written to {args.output}")
    else:
        report(result, sys.stdout, verbose=args.verbose)

    return EXIT_COMPLIANT if result.compliant else EXIT_NOT_COMPLIANT


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="cryptotrace audit")
    add_audit_parser(parser.add_subparsers(dest="command", required=True))

    args = parser.parse_args()
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
    sys.exit(run_audit(args))
