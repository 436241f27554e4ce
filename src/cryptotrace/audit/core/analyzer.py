"""
Cryptographic Usage Analyzer.

Runs the audit pipeline over one program:

1. build (or receive) the program's call graph
2. scan its call sites for calls into tracked packages and classify them
3. apply the optional unapproved-only and denoise filters
4. optionally reconstruct a call path for every remaining usage
5. order the usages and summarise them

Every run starts from fresh state except for the policy table, which is
read-only. A failure to build or validate the call graph aborts the run
with an AnalysisError; nothing partial is returned.
"""

import logging
from typing import List, Optional, Sequence

from ...analysis.callgraph.ast_based import DEFAULT_PATTERNS, build_call_graph
from ...machinery.callgraph import CallGraph
from .aggregator import UsageFilter, aggregate, apply_filters, caller_package_filter, exclude_approved
from .config import AuditConfig
from .paths import CallPathFinder
from .policy import DEFAULT_POLICY, PolicyTable
from .records import AnalysisResult
from .scanner import GraphScanner

LOG = logging.getLogger(__name__)


class CryptoAnalyzer:
    """
    Audits programs against a policy table.

    Attributes:
        policy: Policy table used for classification
        config: Audit options
    """

    def __init__(self, policy: PolicyTable = DEFAULT_POLICY, config: Optional[AuditConfig] = None):
        self.policy = policy
        self.config = config or AuditConfig()

    def filters(self) -> List[UsageFilter]:
        """Post-classification filters selected by the configuration."""
        filters: List[UsageFilter] = []
        if self.config.get_option("unapproved_only"):
            filters.append(exclude_approved)
        if self.config.get_option("denoise"):
            filters.append(caller_package_filter(self.config.get_option("noise_prefixes")))
        return filters

    def analyze(self, source_directory, patterns: Optional[Sequence[str]] = None,
                entry_package: Optional[str] = None) -> AnalysisResult:
        """
        Audit the Python program rooted at `source_directory`.

        Args:
            source_directory: Root directory of the program
            patterns: Glob patterns selecting the files to build the call
                graph from (default: every Python file)
            entry_package: Top package of the program; named roots
                (``main``/``init``) only count inside it

        Raises:
            AnalysisError: if the call graph cannot be built
        """
        LOG.info("Analyzing source directory: %s", source_directory)
        graph = build_call_graph(source_directory, patterns)
        return self.analyze_graph(
            graph,
            source_directory=str(source_directory),
            patterns=tuple(patterns or DEFAULT_PATTERNS),
            entry_package=entry_package,
        )

    def analyze_graph(self, graph: CallGraph, source_directory: str = "",
                      patterns: Sequence[str] = (), entry_package: Optional[str] = None) -> AnalysisResult:
        """
        Audit an already built call graph.

        Raises:
            MalformedGraphError: if the graph is internally inconsistent
        """
        graph.validate()
        LOG.info("Auditing call graph with %i nodes and %i edges", len(graph), graph.edge_count)

        usages = GraphScanner(self.policy).scan(graph)

        filters = self.filters()
        if filters:
            before = len(usages)
            usages = apply_filters(usages, filters)
            LOG.info("Filters kept %i of %i usages", len(usages), before)

        if self.config.get_option("call_tree"):
            root_packages = self.config.get_option("root_packages")
            if root_packages is None and entry_package:
                root_packages = (entry_package,)
            finder = CallPathFinder(
                graph,
                max_depth=self.config.get_option("call_tree_depth"),
                entry_symbols=self.config.get_option("entry_symbols"),
                init_symbols=self.config.get_option("init_symbols"),
                root_packages=root_packages,
            )
            usages = finder.attach(usages)

        result = aggregate(usages, source_directory, patterns, entry_package)
        LOG.info("Audit finished: %i usages, compliant=%s", result.summary.total, result.compliant)
        return result
