"""
Audit Constants.

This module defines the constants shared by the audit engine: the policy
statuses, the symbols that make a function a call-path root, and the
default prefixes of the noise filter.

**Statuses:**
- APPROVED: the tracked module may be used
- REJECTED: the tracked module must not be used
- MUST_EVALUATE: usage needs a manual review
- UNKNOWN: the module is under the tracked namespace but has no policy
  entry; treated as non-compliant
"""

import enum


class Status(str, enum.Enum):
    """Approval status of a tracked package."""
    APPROVED = "approved"
    REJECTED = "rejected"
    MUST_EVALUATE = "must_evaluate"
    UNKNOWN = "unknown"

    def __str__(self):
        return self.value


# Statuses a policy table may assign explicitly
TABULATED_STATUSES = (Status.APPROVED, Status.REJECTED, Status.MUST_EVALUATE)

# Statuses that break compliance
NON_COMPLIANT_STATUSES = (Status.REJECTED, Status.MUST_EVALUATE, Status.UNKNOWN)

# Designated program entry function
ENTRY_SYMBOLS = ("main",)

# Initialization functions; module bodies count as initialization code
INIT_SYMBOLS = ("init", "<module>")

# Default maximum number of call hops walked back from a caller
DEFAULT_CALL_TREE_DEPTH = 10

# Caller packages whose calls into the tracked namespace are library
# plumbing rather than program decisions
NOISE_PREFIXES = (
    "Crypto",
    "Cryptodome",
    "cryptography",
    "hashlib",
    "hmac",
    "ssl",
    "secrets",
    "importlib",
    "encodings",
    "logging",
    "io",
    "typing",
    "threading",
    "asyncio",
)
