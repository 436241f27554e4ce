"""
Result Aggregation.

Post-classification filters and the final packaging of an audit:
- filters are predicates over UsageRecords; applying them only removes
  records, so they compose in any order and never change a status
- ``order_usages`` sorts by tracked package, then caller qualified name
  (then callee function and call site, to make the order total)
- ``aggregate`` sorts, summarises and wraps the usages in an AnalysisResult
"""

from typing import Callable, Iterable, List, Optional, Sequence

from .constants import NOISE_PREFIXES, Status
from .records import AnalysisResult, Summary, UsageRecord

UsageFilter = Callable[[UsageRecord], bool]


def exclude_approved(usage: UsageRecord) -> bool:
    """Keep only usages that are not approved."""
    return usage.status is not Status.APPROVED


def caller_package_filter(prefixes: Sequence[str] = NOISE_PREFIXES) -> UsageFilter:
    """
    Build a filter dropping usages whose caller lives in a noisy package.

    A prefix matches the package itself and its subpackages: ``io`` drops
    ``io`` and ``io.text`` but keeps ``iot``.
    """
    prefixes = tuple(prefixes)

    def keep(usage: UsageRecord) -> bool:
        package = usage.caller_package
        return not any(package == prefix or package.startswith(prefix + ".") for prefix in prefixes)

    return keep


def apply_filters(usages: Iterable[UsageRecord], filters: Sequence[UsageFilter]) -> List[UsageRecord]:
    return [usage for usage in usages if all(keep(usage) for keep in filters)]


def order_usages(usages: Iterable[UsageRecord]) -> List[UsageRecord]:
    return sorted(usages, key=UsageRecord.sort_key)


def aggregate(usages: Iterable[UsageRecord], source_directory: str = "",
              patterns: Sequence[str] = (), entry_package: Optional[str] = None) -> AnalysisResult:
    """
    Package usages into an AnalysisResult.

    The summary is computed over exactly the usages given, so it reflects
    whatever filtering happened before.
    """
    ordered = order_usages(usages)
    return AnalysisResult(
        usages=tuple(ordered),
        summary=Summary.from_usages(ordered),
        source_directory=source_directory,
        patterns=tuple(patterns),
        entry_package=entry_package,
    )
