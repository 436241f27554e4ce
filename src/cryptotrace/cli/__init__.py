"""
cryptotrace CLI tools.

This package contains command-line tools for cryptotrace:
- audit: Find and classify calls into tracked cryptographic modules
- callgraph: Build and print the call graph the audit runs over
"""

from .main import main

__all__ = ["main"]
