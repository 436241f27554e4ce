"""
Call Path Reconstruction.

Explains how a tracked call is reached: starting at the usage's caller, a
breadth-first search walks incoming call edges (callers, then callers of
callers) until it meets a root. The first root found gives the shortest
path, which is returned root first and ends at the caller.

**Roots:**
- functions nothing in the program calls
- entry functions (``main``) and initialization code (``init``, module
  bodies), optionally restricted to the program's own top package(s)

**Bounds:**
The search visits each node at most once, so it terminates on recursive
call chains, and it stops walking after ``max_depth`` hops. When the bound
is hit first, the result degrades to a path holding just the caller, marked
as not rooted. This is never an error.

**Ordering:**
Incoming edges are expanded in a canonical order (caller qualified name,
then node id), so among equally short paths the same one is picked on
every run over the same graph.

Paths are memoized per caller node for the lifetime of the finder. Create
one finder per analysis; it is not safe to share across threads.
"""

import collections
import logging
from typing import Dict, List, Optional, Sequence

from ...machinery.callgraph import CallGraph, Node
from .constants import DEFAULT_CALL_TREE_DEPTH, ENTRY_SYMBOLS, INIT_SYMBOLS
from .records import CallPath, CallPathNode, UsageRecord

LOG = logging.getLogger(__name__)


class CallPathFinder:
    """
    Shortest root-to-caller paths over one call graph.

    Attributes:
        graph: Call graph being searched
        max_depth: Maximum number of call hops walked back from a caller
        root_symbols: Simple names that make a function a root
        root_packages: Packages the named roots must live in; None for any
        searches: Number of searches actually run (cache misses)
    """

    def __init__(self, graph: CallGraph, max_depth: int = DEFAULT_CALL_TREE_DEPTH,
                 entry_symbols: Sequence[str] = ENTRY_SYMBOLS,
                 init_symbols: Sequence[str] = INIT_SYMBOLS,
                 root_packages: Optional[Sequence[str]] = None):
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")
        self.graph = graph
        self.max_depth = max_depth
        self.root_symbols = frozenset(entry_symbols) | frozenset(init_symbols)
        self.root_packages = tuple(root_packages) if root_packages else None
        self.searches = 0
        self._cache: Dict[int, CallPath] = {}

    def is_root(self, node: Node) -> bool:
        if self.graph.in_degree(node) == 0:
            return True
        if node.simple_name not in self.root_symbols:
            return False
        if self.root_packages is None:
            return True
        package = node.package or ""
        return any(package == top or package.startswith(top + ".") for top in self.root_packages)

    def find(self, node: Node) -> CallPath:
        """Return the (memoized) call path ending at `node`."""
        path = self._cache.get(node.id)
        if path is None:
            path = self._search(node)
            self._cache[node.id] = path
        return path

    def _search(self, start: Node) -> CallPath:
        self.searches += 1
        visited = {start.id}
        # Each entry carries the path walked so far, caller first
        queue = collections.deque([(start, (start,))])

        while queue:
            node, walked = queue.popleft()
            if self.is_root(node):
                return self._to_call_path(reversed(walked), rooted=True)
            if len(walked) - 1 >= self.max_depth:
                continue

            for edge in self._incoming(node):
                if edge.caller in visited:
                    continue
                visited.add(edge.caller)
                caller = self.graph.node(edge.caller)
                queue.append((caller, walked + (caller,)))

        LOG.debug("No root within %i hops of %s", self.max_depth, start.name)
        return self._to_call_path([start], rooted=False)

    def _incoming(self, node: Node):
        graph = self.graph
        return sorted(graph.in_edges(node),
                      key=lambda edge: (graph.node(edge.caller).name, edge.caller, edge.id))

    @staticmethod
    def _to_call_path(nodes, rooted: bool) -> CallPath:
        # Functions without package metadata carry nothing worth reporting
        return CallPath(
            tuple(CallPathNode(node.name, node.package_name, node.package)
                  for node in nodes if node.package is not None),
            rooted,
        )

    def attach(self, usages: Sequence[UsageRecord]) -> List[UsageRecord]:
        """
        Attach call paths to `usages`.

        Usages are grouped by caller so each distinct caller is searched
        once; the path is then shared by every usage of the group. Records
        without a caller node id are returned unchanged.
        """
        groups: Dict[int, List[int]] = collections.defaultdict(list)
        for index, usage in enumerate(usages):
            if usage.caller_id >= 0:
                groups[usage.caller_id].append(index)

        result = list(usages)
        for caller_id, indices in groups.items():
            path = self.find(self.graph.node(caller_id))
            for index in indices:
                result[index] = result[index].with_call_path(path)

        LOG.info("Computed call paths for %i distinct callers (%i searches)",
                 len(groups), self.searches)
        return result
