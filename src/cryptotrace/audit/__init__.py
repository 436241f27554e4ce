"""
Cryptographic Usage Audit.

This package finds every call a program makes into a tracked namespace of
cryptographic modules and classifies it against an approval policy.

**Architecture:**
- Core: policy table, call graph scanner, call path finder, aggregation
- Formatters: Output formatters (text, JSON)

**Key Features:**
- Whole-program scan over an arena call graph
- Fail-closed classification: untabulated tracked modules are UNKNOWN
- Shortest call path from a program root to each call site, with a depth
  bound and per-caller memoization
- Unapproved-only and denoise filters
- Compliance verdict over the reported usages

**Usage:**
```python
from cryptotrace.audit import AuditConfig, CryptoAnalyzer

analyzer = CryptoAnalyzer(config=AuditConfig(call_tree=True))
result = analyzer.analyze("path/to/program")
print(result.summary.compliant)
```
"""

from .core.analyzer import CryptoAnalyzer
from .core.config import AuditConfig
from .core.constants import Status
from .core.policy import DEFAULT_POLICY, PolicyTable, load_policy
from .core.records import AnalysisResult, CallPath, CallPathNode, Summary, UsageRecord

__all__ = [
    "CryptoAnalyzer",
    "AuditConfig",
    "Status",
    "DEFAULT_POLICY",
    "PolicyTable",
    "load_policy",
    "AnalysisResult",
    "CallPath",
    "CallPathNode",
    "Summary",
    "UsageRecord",
]
