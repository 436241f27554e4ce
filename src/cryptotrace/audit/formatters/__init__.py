"""
cryptotrace Audit Formatters Module

Output formatters for audit results. Each module exposes
``report(result, fileobj, verbose=False)``.
"""

from . import json as json_formatter
from . import text as text_formatter

FORMATTERS = {
    "text": text_formatter.report,
    "json": json_formatter.report,
}

__all__ = [
    "FORMATTERS",
]
