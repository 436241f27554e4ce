r"""
==============
Text Formatter
==============

This formatter outputs the audit result as plain text.

:Example:

.. code-block:: none

    Source Directory: examples/app
    Patterns: **/*.py

    === Summary ===
    Total Usages: 2
      Approved: 1   Rejected: 1   Must Evaluate: 0   Unknown: 0
    Compliant: No

    === Detected Usages ===
     >> Package: Crypto.Hash.MD5
        Function: new
        Status: rejected
        Called by: app.hashing.legacy_digest
        Package Path: app.hashing
        Call Site: static function call to Crypto.Hash.MD5.new at app/hashing.py:9:11
        Call Path:
          - app.cli.main (cli)
          - app.hashing.legacy_digest (hashing)

"""
import logging
import sys

from .utils import write_output

LOG = logging.getLogger(__name__)


def _output_usage_str(usage, indent=" "):
    bits = [
        f"{indent}>> Package: {usage.package}",
        f"{indent}   Function: {usage.function}",
        f"{indent}   Status: {usage.status.value}",
        f"{indent}   Called by: {usage.caller}",
        f"{indent}   Package Path: {usage.caller_package}",
    ]
    if usage.call_site:
        bits.append(f"{indent}   Call Site: {usage.call_site}")

    if usage.call_path is not None and len(usage.call_path):
        heading = "Call Path:" if usage.call_path.rooted else "Call Path (no root within depth):"
        bits.append(f"{indent}   {heading}")
        bits.extend(f"{indent}     - {node.function} ({node.package})" for node in usage.call_path)
    else:
        bits.append(f"{indent}   Call Path: Not available")
    return "\n".join(bits)


def get_summary(result):
    summary = result.summary
    return "\n".join([
        "=== Summary ===",
        f"Total Usages: {summary.total}",
        f"  Approved: {summary.approved}   Rejected: {summary.rejected}   "
        f"Must Evaluate: {summary.must_evaluate}   Unknown: {summary.unknown}",
        f"Compliant: {'Yes' if summary.compliant else 'No'}",
    ])


def get_results(result):
    if not result.usages:
        return "No tracked cryptographic module usages detected."
    bits = ["=== Detected Usages ==="]
    bits.extend(_output_usage_str(usage) for usage in result.usages)
    return "\n".join(bits)


def report(result, fileobj, verbose=False):
    """Prints the audit result in the text format

    :param result: the AnalysisResult to print
    :param fileobj: The output file object, which may be sys.stdout
    :param verbose: Whether to list every usage after the summary
    """
    bits = [
        f"Source Directory: {result.source_directory}",
        f"Patterns: {', '.join(result.patterns)}",
    ]
    if result.entry_package:
        bits.append(f"Entry Package: {result.entry_package}")
    bits.extend(["", get_summary(result)])

    if verbose:
        bits.extend(["", get_results(result)])

    write_output(fileobj, "\n".join(bits) + "\n")

    if getattr(fileobj, "name", None) not in (None, getattr(sys.stdout, "name", None)):
        LOG.info("Text output written to file: %s", fileobj.name)
