"""
Audit Records.

Value types produced by one audit run:
- UsageRecord: one call into a tracked package
- CallPath / CallPathNode: how a usage's caller is reached from a root
- Summary: per-status counts and the compliance verdict
- AnalysisResult: ordered usages, summary and the host's metadata

All of them are frozen. A usage's call path is attached after the scan by
deriving a new record with ``with_call_path``.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Iterator, Optional, Sequence, Tuple

from .constants import Status


@dataclass(frozen=True)
class CallPathNode:
    """One function on a call path."""
    function: str
    package: str
    package_path: str

    def as_dict(self) -> Dict[str, str]:
        return {"function": self.function, "package": self.package, "package_path": self.package_path}


@dataclass(frozen=True)
class CallPath:
    """
    Chain of callers from a root down to a usage's caller, root first.

    ``rooted`` is False when the search ran out of depth before reaching a
    root; the path then holds only the caller itself.
    """
    nodes: Tuple[CallPathNode, ...]
    rooted: bool = True

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[CallPathNode]:
        return iter(self.nodes)

    def as_dict(self) -> Dict[str, Any]:
        return {"rooted": self.rooted, "nodes": [node.as_dict() for node in self.nodes]}


@dataclass(frozen=True)
class UsageRecord:
    """
    A call from program code into a tracked package.

    Attributes:
        package: Tracked package identifier of the callee
        function: Callee's simple function name
        caller: Qualified name of the calling function
        caller_package: Package identifier owning the caller
        call_site: Human-readable description of the call site
        status: Policy status of `package`
        call_path: Path from a root to `caller`, when requested
        caller_id: Id of the caller's node in the analysed graph
    """
    package: str
    function: str
    caller: str
    caller_package: str
    call_site: str
    status: Status
    call_path: Optional[CallPath] = None
    caller_id: int = field(default=-1, compare=False, repr=False)

    def sort_key(self) -> Tuple[str, str, str, str]:
        return (self.package, self.caller, self.function, self.call_site)

    def with_call_path(self, call_path: CallPath) -> "UsageRecord":
        return replace(self, call_path=call_path)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "package": self.package,
            "function": self.function,
            "caller_function": self.caller,
            "call_site": self.call_site,
            "package_path": self.caller_package,
            "status": self.status.value,
            "call_path": self.call_path.as_dict() if self.call_path is not None else None,
        }


@dataclass(frozen=True)
class Summary:
    """Usage counts per status."""
    total: int = 0
    approved: int = 0
    rejected: int = 0
    must_evaluate: int = 0
    unknown: int = 0

    @property
    def compliant(self) -> bool:
        return self.rejected == 0 and self.must_evaluate == 0 and self.unknown == 0

    @classmethod
    def from_usages(cls, usages: Iterable[UsageRecord]) -> "Summary":
        counts = {status: 0 for status in Status}
        total = 0
        for usage in usages:
            counts[usage.status] += 1
            total += 1
        return cls(
            total=total,
            approved=counts[Status.APPROVED],
            rejected=counts[Status.REJECTED],
            must_evaluate=counts[Status.MUST_EVALUATE],
            unknown=counts[Status.UNKNOWN],
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total_usages": self.total,
            "approved_usages": self.approved,
            "rejected_usages": self.rejected,
            "must_evaluate_usages": self.must_evaluate,
            "unknown_usages": self.unknown,
            "compliant": self.compliant,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """
    Outcome of one audit.

    `source_directory`, `patterns` and `entry_package` identify what was
    analysed; the engine passes them through untouched.
    """
    usages: Tuple[UsageRecord, ...]
    summary: Summary
    source_directory: str = ""
    patterns: Sequence[str] = ()
    entry_package: Optional[str] = None

    @property
    def compliant(self) -> bool:
        return self.summary.compliant

    def as_dict(self) -> Dict[str, Any]:
        return {
            "source_directory": self.source_directory,
            "patterns": list(self.patterns),
            "entry_package": self.entry_package,
            "detected_usages": [usage.as_dict() for usage in self.usages],
            "summary": self.summary.as_dict(),
        }
