"""
Audit Configuration.

Plain option values the host hands to the analyzer. Every option has a
default, so ``AuditConfig()`` runs the basic audit: no call paths, no
filtering.

**Options:**
- call_tree: reconstruct a call path for every usage
- call_tree_depth: maximum hops walked back from a caller
- unapproved_only: drop approved usages from the result
- denoise: drop usages whose caller lives in a noise package
- noise_prefixes: packages the denoise filter drops
- entry_symbols / init_symbols: simple names that make a function a root
- root_packages: packages named roots must live in (None for any)
"""

import copy
import logging

from .constants import (
    DEFAULT_CALL_TREE_DEPTH,
    ENTRY_SYMBOLS,
    INIT_SYMBOLS,
    NOISE_PREFIXES,
)

LOG = logging.getLogger(__name__)


class AuditConfig:
    """
    Option store for one analyzer.

    Attributes:
        DEFAULTS: Default value of every known option
    """

    DEFAULTS = {
        "call_tree": False,
        "call_tree_depth": DEFAULT_CALL_TREE_DEPTH,
        "unapproved_only": False,
        "denoise": False,
        "noise_prefixes": NOISE_PREFIXES,
        "entry_symbols": ENTRY_SYMBOLS,
        "init_symbols": INIT_SYMBOLS,
        "root_packages": None,
    }

    def __init__(self, **options):
        self._options = copy.deepcopy(self.DEFAULTS)
        for name, value in options.items():
            self.set_option(name, value)

    def get_option(self, name):
        """
        Get an option value.

        Raises:
            KeyError: for an unknown option name
        """
        if name not in self._options:
            raise KeyError(f"unknown audit option: {name}")
        return self._options[name]

    def set_option(self, name, value):
        """
        Set an option value.

        Raises:
            KeyError: for an unknown option name
            ValueError: for a negative or non-integer call_tree_depth
        """
        if name not in self._options:
            raise KeyError(f"unknown audit option: {name}")
        if name == "call_tree_depth":
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"call_tree_depth must be a non-negative integer, got {value!r}")
        elif name in ("noise_prefixes", "entry_symbols", "init_symbols"):
            value = tuple(value)
        elif name == "root_packages" and value is not None:
            value = tuple(value)
        LOG.debug("audit option %s = %r", name, value)
        self._options[name] = value

    def as_dict(self):
        return dict(self._options)
