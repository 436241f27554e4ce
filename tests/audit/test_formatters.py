from __future__ import annotations

import io
import json

from cryptotrace.audit import CallPath, CallPathNode, Status, UsageRecord
from cryptotrace.audit.core.aggregator import aggregate
from cryptotrace.audit.formatters import FORMATTERS


def _result(call_path=None):
    usages = [
        UsageRecord("Crypto.Hash.MD5", "new", "app.hashing.legacy", "app.hashing",
                    "static function call to Crypto.Hash.MD5.new at app/hashing.py:9:11",
                    Status.REJECTED, call_path),
        UsageRecord("Crypto.Cipher.AES", "new", "app.box.seal", "app.box", "",
                    Status.APPROVED),
    ]
    return aggregate(usages, source_directory="src", patterns=["**/*.py"])


def _path(rooted=True):
    return CallPath((
        CallPathNode("app.cli.main", "cli", "app.cli"),
        CallPathNode("app.hashing.legacy", "hashing", "app.hashing"),
    ), rooted)


def test_json_report_keys():
    out = io.StringIO()
    FORMATTERS["json"](_result(_path()), out)

    data = json.loads(out.getvalue())
    assert set(data) == {"source_directory", "patterns", "entry_package", "detected_usages", "summary"}
    assert data["summary"] == {
        "total_usages": 2,
        "approved_usages": 1,
        "rejected_usages": 1,
        "must_evaluate_usages": 0,
        "unknown_usages": 0,
        "compliant": False,
    }
    aes, md5 = data["detected_usages"]
    assert md5 == {
        "package": "Crypto.Hash.MD5",
        "function": "new",
        "caller_function": "app.hashing.legacy",
        "call_site": "static function call to Crypto.Hash.MD5.new at app/hashing.py:9:11",
        "package_path": "app.hashing",
        "status": "rejected",
        "call_path": {
            "rooted": True,
            "nodes": [
                {"function": "app.cli.main", "package": "cli", "package_path": "app.cli"},
                {"function": "app.hashing.legacy", "package": "hashing", "package_path": "app.hashing"},
            ],
        },
    }
    assert aes["call_path"] is None


def test_json_report_accepts_binary_stream():
    out = io.BytesIO()
    FORMATTERS["json"](_result(), out)

    assert not out.closed
    assert json.loads(out.getvalue().decode("utf-8"))["patterns"] == ["**/*.py"]


def test_text_summary_only_by_default():
    out = io.StringIO()
    FORMATTERS["text"](_result(), out)

    text = out.getvalue()
    assert "Source Directory: src" in text
    assert "Total Usages: 2" in text
    assert "Compliant: No" in text
    assert "Detected Usages" not in text


def test_text_verbose_lists_usages_and_paths():
    out = io.StringIO()
    FORMATTERS["text"](_result(_path()), out, verbose=True)

    text = out.getvalue()
    assert ">> Package: Crypto.Hash.MD5" in text
    assert "Status: rejected" in text
    assert "Call Path:\n" in text
    assert "- app.cli.main (cli)" in text
    assert "Call Path: Not available" in text


def test_text_marks_unrooted_paths():
    out = io.StringIO()
    FORMATTERS["text"](_result(_path(rooted=False)), out, verbose=True)

    assert "Call Path (no root within depth):" in out.getvalue()


def test_text_empty_result():
    out = io.StringIO()
    FORMATTERS["text"](aggregate([], entry_package="app"), out, verbose=True)

    text = out.getvalue()
    assert "Entry Package: app" in text
    assert "Compliant: Yes" in text
    assert "No tracked cryptographic module usages detected." in text
