"""cryptotrace - Cryptographic Module Usage Auditor for Python programs.
"""

__version__ = "0.1.0"

# Import main components for easy access
from .audit import AuditConfig, CryptoAnalyzer, DEFAULT_POLICY, PolicyTable, Status, load_policy
from .machinery.callgraph import CallGraph

__all__ = [
    "AuditConfig",
    "CryptoAnalyzer",
    "DEFAULT_POLICY",
    "PolicyTable",
    "Status",
    "load_policy",
    "CallGraph",
    "__version__",
]
