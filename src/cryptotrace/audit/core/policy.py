"""
Cryptographic Module Policy.

This module provides the policy table the audit classifies calls with. A
policy table maps tracked package identifiers to an approval status and
names the namespace prefix under which every package is tracked, whether it
has an entry or not.

**Classification:**
1. A package with an explicit entry gets that entry's status.
2. A package under the tracked prefix without an entry gets UNKNOWN. This
   default is fail-closed: an untabulated module is never approved.
3. Anything else is not tracked; the scanner never records its calls.

Tables are frozen once built. ``DEFAULT_POLICY`` covers the pycryptodome
``Crypto.`` namespace; ``load_policy`` reads a table from a JSON file of the
form::

    {
        "tracked_prefix": "Crypto.",
        "extends": "default",
        "packages": {"Crypto.Hash.SHA256": "approved"}
    }

``extends`` is optional; with ``"default"`` the file's entries are layered
over ``DEFAULT_POLICY``.
"""

import json
import logging
from types import MappingProxyType
from typing import Mapping, Optional

from ...application.errors import PolicyError
from .constants import Status, TABULATED_STATUSES

LOG = logging.getLogger(__name__)

# Spellings accepted in policy files besides the status values themselves
_STATUS_ALIASES = {
    "must_evaluate_manually": Status.MUST_EVALUATE,
}


def parse_status(value) -> Status:
    """
    Convert a policy file value to a tabulated Status.

    Raises:
        PolicyError: for unknown values and for ``unknown``, which is the
            implicit default and cannot be assigned
    """
    if isinstance(value, Status):
        status = value
    elif not isinstance(value, str):
        raise PolicyError(f"policy status must be a string, got {value!r}")
    else:
        status = _STATUS_ALIASES.get(value)
        if status is None:
            try:
                status = Status(value)
            except ValueError:
                raise PolicyError(f"unknown policy status: {value!r}") from None
    if status not in TABULATED_STATUSES:
        raise PolicyError(f"status {status.value!r} cannot be assigned explicitly")
    return status


class PolicyTable:
    """
    Immutable mapping from tracked package identifier to Status.

    Attributes:
        tracked_prefix: Namespace prefix under which every package is tracked
        entries: Read-only view of the explicit entries
    """

    def __init__(self, tracked_prefix: str, entries: Mapping[str, Status]):
        if not tracked_prefix:
            raise PolicyError("policy table needs a tracked namespace prefix")
        if not isinstance(tracked_prefix, str):
            raise PolicyError(f"tracked namespace prefix must be a string, got {tracked_prefix!r}")
        self.tracked_prefix = tracked_prefix
        table = {package: parse_status(status) for package, status in entries.items()}
        for package in sorted(table):
            if not package.startswith(tracked_prefix):
                LOG.warning("Policy entry %s lies outside the tracked namespace %s",
                            package, tracked_prefix)
        self.entries = MappingProxyType(table)

    def classify(self, package: str) -> Optional[Status]:
        """
        Classify a package identifier.

        Returns:
            The entry's status, UNKNOWN for an untabulated package under the
            tracked prefix, or None when the package is not tracked
        """
        status = self.entries.get(package)
        if status is not None:
            return status
        if package.startswith(self.tracked_prefix):
            return Status.UNKNOWN
        return None

    def is_tracked(self, package: Optional[str]) -> bool:
        return package is not None and self.classify(package) is not None

    def extend(self, entries: Mapping[str, Status]) -> "PolicyTable":
        """Return a new table with `entries` layered over this one."""
        merged = dict(self.entries)
        merged.update(entries)
        return PolicyTable(self.tracked_prefix, merged)

    def __len__(self):
        return len(self.entries)

    def __contains__(self, package):
        return package in self.entries

    def __repr__(self):
        return f"PolicyTable({self.tracked_prefix!r}, {len(self.entries)} entries)"


def _statuses(status, *packages):
    return {package: status for package in packages}


DEFAULT_POLICY = PolicyTable("Crypto.", {
    # Approved modules
    **_statuses(
        Status.APPROVED,
        "Crypto.Cipher.AES",
        "Crypto.Cipher.PKCS1_OAEP",
        "Crypto.Hash.CMAC",
        "Crypto.Hash.HMAC",
        "Crypto.Hash.KMAC128",
        "Crypto.Hash.KMAC256",
        "Crypto.Hash.SHA224",
        "Crypto.Hash.SHA256",
        "Crypto.Hash.SHA384",
        "Crypto.Hash.SHA512",
        "Crypto.Hash.SHA3_224",
        "Crypto.Hash.SHA3_256",
        "Crypto.Hash.SHA3_384",
        "Crypto.Hash.SHA3_512",
        "Crypto.Hash.SHAKE128",
        "Crypto.Hash.SHAKE256",
        "Crypto.Hash.cSHAKE128",
        "Crypto.Hash.cSHAKE256",
        "Crypto.Hash.TupleHash128",
        "Crypto.Hash.TupleHash256",
        "Crypto.PublicKey.RSA",
        "Crypto.Signature.DSS",
        "Crypto.Signature.pkcs1_15",
        "Crypto.Signature.pss",
    ),
    # Must evaluate manually
    **_statuses(
        Status.MUST_EVALUATE,
        "Crypto.Cipher.DES3",
        "Crypto.Hash.SHA1",
        "Crypto.Protocol.DH",
        "Crypto.Protocol.KDF",
        "Crypto.Protocol.SecretSharing",
        "Crypto.PublicKey.DSA",
        "Crypto.PublicKey.ECC",
        "Crypto.Random",
        "Crypto.Signature.eddsa",
    ),
    # Rejected modules
    **_statuses(
        Status.REJECTED,
        "Crypto.Cipher.ARC2",
        "Crypto.Cipher.ARC4",
        "Crypto.Cipher.Blowfish",
        "Crypto.Cipher.CAST",
        "Crypto.Cipher.ChaCha20",
        "Crypto.Cipher.ChaCha20_Poly1305",
        "Crypto.Cipher.DES",
        "Crypto.Cipher.PKCS1_v1_5",
        "Crypto.Cipher.Salsa20",
        "Crypto.Hash.BLAKE2b",
        "Crypto.Hash.BLAKE2s",
        "Crypto.Hash.MD2",
        "Crypto.Hash.MD4",
        "Crypto.Hash.MD5",
        "Crypto.Hash.Poly1305",
        "Crypto.Hash.RIPEMD160",
        "Crypto.Hash.keccak",
    ),
})


def load_policy(path) -> PolicyTable:
    """
    Load a policy table from a JSON file.

    Args:
        path: Path of the policy file

    Returns:
        PolicyTable built from the file

    Raises:
        PolicyError: if the file cannot be read or does not describe a valid
            table
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise PolicyError(f"cannot load policy {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("packages", {}), dict):
        raise PolicyError(f"{path}: expected an object with a 'packages' mapping")

    packages = {name: parse_status(status) for name, status in data.get("packages", {}).items()}
    extends = data.get("extends")
    if extends is None:
        table = PolicyTable(data.get("tracked_prefix", ""), packages)
    elif extends == "default":
        table = DEFAULT_POLICY.extend(packages)
        if "tracked_prefix" in data:
            table = PolicyTable(data["tracked_prefix"], table.entries)
    else:
        raise PolicyError(f"{path}: unknown base policy {extends!r}")

    LOG.info("Loaded policy with %i entries from %s", len(table), path)
    return table
