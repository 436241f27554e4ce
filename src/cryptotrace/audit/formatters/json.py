r"""
==============
JSON Formatter
==============

This formatter outputs the audit result in JSON format.

:Example:

.. code-block:: javascript

    {
      "source_directory": "examples/app",
      "patterns": ["**/*.py"],
      "entry_package": null,
      "detected_usages": [
        {
          "package": "Crypto.Hash.MD5",
          "function": "new",
          "caller_function": "app.hashing.legacy_digest",
          "call_site": "static function call to Crypto.Hash.MD5.new at app/hashing.py:9:11",
          "package_path": "app.hashing",
          "status": "rejected",
          "call_path": null
        }
      ],
      "summary": {
        "total_usages": 1,
        "approved_usages": 0,
        "rejected_usages": 1,
        "must_evaluate_usages": 0,
        "unknown_usages": 0,
        "compliant": false
      }
    }

"""
import json
import logging
import sys

from .utils import write_output

LOG = logging.getLogger(__name__)


def report(result, fileobj, verbose=False):
    """Prints the audit result in JSON format

    :param result: the AnalysisResult to print
    :param fileobj: The output file object, which may be sys.stdout
    :param verbose: Unused; JSON output always lists every usage
    """
    write_output(fileobj, json.dumps(result.as_dict(), indent=2) + "\n")

    if getattr(fileobj, "name", None) not in (None, getattr(sys.stdout, "name", None)):
        LOG.info("JSON output written to file: %s", fileobj.name)
