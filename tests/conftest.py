from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import textwrap
from typing import Mapping, Optional, Sequence

import pytest

from cryptotrace.audit import AnalysisResult, AuditConfig, CryptoAnalyzer, DEFAULT_POLICY, PolicyTable


def _normalize_code(code: str) -> str:
    # Allow indented triple-quoted snippets in tests.
    code = textwrap.dedent(code)
    # Trim leading blank line to keep expected line numbers stable.
    code = code.lstrip("\n")
    if code and not code.endswith("\n"):
        code += "\n"
    return code


def write_program(root: Path, files: Mapping[str, str]) -> Path:
    for rel_name, code in files.items():
        p = root / rel_name
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(_normalize_code(code), encoding="utf-8")
    return root


@dataclass(frozen=True)
class AuditRun:
    root: Path
    result: AnalysisResult

    @property
    def usages(self):
        return self.result.usages

    @property
    def summary(self):
        return self.result.summary

    def by_package(self, package: str):
        return [u for u in self.usages if u.package == package]

    def one(self, package: Optional[str] = None):
        usages = self.by_package(package) if package is not None else list(self.usages)
        assert len(usages) == 1, usages
        return usages[0]


class Auditor:
    """
    Small harness around CryptoAnalyzer that:
    - writes a program's files into a temporary directory
    - runs the real pipeline (call graph extraction, scan, paths, aggregation)
    - returns the result plus convenience selectors
    """

    def __init__(self, tmp_path: Path):
        self._tmp_path = tmp_path

    def run(
        self,
        files: Mapping[str, str],
        *,
        policy: PolicyTable = DEFAULT_POLICY,
        patterns: Optional[Sequence[str]] = None,
        entry_package: Optional[str] = None,
        **options,
    ) -> AuditRun:
        root = write_program(self._tmp_path / "program", files)
        analyzer = CryptoAnalyzer(policy=policy, config=AuditConfig(**options))
        result = analyzer.analyze(root, patterns=patterns, entry_package=entry_package)
        return AuditRun(root=root, result=result)


@pytest.fixture()
def audit(tmp_path: Path):
    return Auditor(tmp_path).run


@pytest.fixture()
def program(tmp_path: Path):
    def _program(files: Mapping[str, str]) -> Path:
        return write_program(tmp_path / "program", files)

    return _program
