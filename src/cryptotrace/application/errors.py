"""
Error handling for cryptotrace analyses.

This module defines the exception classes for the fatal failures an audit
can hit. Anything raised from here aborts the whole analysis: no partial
result is produced. Expected gaps in the call graph (synthetic or
unresolved callees) and degraded call paths are never reported through
exceptions.
"""


class AnalysisError(Exception):
    """
    Base class for fatal analysis failures.

    Raised when the audit cannot produce a well-formed result. The CLI
    catches this class and turns it into a non-zero exit code.
    """
    pass


class CallGraphBuildError(AnalysisError):
    """
    Exception raised when the program's call graph could not be built.

    Typical causes are an unreadable source file, a file with a syntax
    error, or a source directory with no matching Python files.
    """
    pass


class MalformedGraphError(AnalysisError):
    """
    Exception raised for a call graph that violates its own shape.

    For example an edge that references a node id the graph does not own.
    """
    pass


class PolicyError(AnalysisError):
    """
    Exception raised for an unusable policy table.

    Raised while loading a policy file with an unknown status value or
    without a tracked namespace prefix.
    """
    pass
