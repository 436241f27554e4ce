"""
Arena call graph.

Functions are stored in a flat table and addressed by stable integer ids.
Edges are static call sites kept in a second table; each node carries
adjacency lists of edge ids in both directions, so walking callers of a
function is as cheap as walking its callees and cycles in the program
(recursion) never turn into reference cycles between Python objects.

Nodes and edges are immutable once created. The audit engine only reads
the graph; the extractors in ``cryptotrace.analysis.callgraph`` build it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Set, Union

import networkx as nx

from ..application.errors import MalformedGraphError


class CallGraphError(MalformedGraphError):
    """Base error for call graph handling issues."""


@dataclass(frozen=True, eq=False)
class Node:
    """
    A function in the call graph.

    Compared by identity: two nodes are the same function only if they are
    the same entry of the same graph.

    Attributes:
        id: Index of the node in its graph's node table
        name: Fully-qualified function name (e.g. ``app.crypto.digest``)
        package: Owning package/module identifier, ``None`` for synthetic or
            unresolved functions
    """
    id: int
    name: str
    package: Optional[str] = None

    @property
    def simple_name(self) -> str:
        """Function name without its qualifying prefix."""
        return self.name.rsplit(".", 1)[-1]

    @property
    def package_name(self) -> str:
        """Last component of the owning package identifier."""
        if not self.package:
            return ""
        return self.package.rsplit(".", 1)[-1]

    def __repr__(self) -> str:
        return f"Node({self.id}, {self.name!r}, {self.package!r})"


@dataclass(frozen=True)
class Edge:
    """A static call site from ``caller`` to ``callee`` (both node ids)."""
    id: int
    caller: int
    callee: int
    site: str = ""


NodeRef = Union[Node, int]


class CallGraph:
    """
    Directed multigraph of functions and call sites.

    Nodes are unique by qualified name; asking for an existing name returns
    the existing node. Several edges may join the same pair of nodes when a
    function calls another from more than one place.
    """

    def __init__(self) -> None:
        self._nodes: List[Node] = []
        self._by_name: Dict[str, int] = {}
        self._edges: List[Edge] = []
        self._out: List[List[int]] = []
        self._in: List[List[int]] = []

    # ------------------------------------------------------------------ utils
    def add_node(self, name: str, package: Optional[str] = None) -> Node:
        """
        Ensure a node exists in the graph and return it.

        Parameters
        ----------
        name:
            Fully-qualified identifier for the function.
        package:
            Optional owning package. A node first seen without a package
            (for instance as an unresolved callee) picks the package up when
            it is later added with one.
        """
        nid = self._by_name.get(name)
        if nid is not None:
            node = self._nodes[nid]
            if node.package is None and package is not None:
                node = Node(nid, name, package)
                self._nodes[nid] = node
            return node

        node = Node(len(self._nodes), name, package)
        self._nodes.append(node)
        self._by_name[name] = node.id
        self._out.append([])
        self._in.append([])
        return node

    def add_edge(self, caller: NodeRef, callee: NodeRef, site: str = "") -> Edge:
        """
        Record a call site from `caller` to `callee`.

        Both ends must already belong to this graph.
        """
        src = self._resolve(caller)
        dst = self._resolve(callee)
        edge = Edge(len(self._edges), src, dst, site)
        self._edges.append(edge)
        self._out[src].append(edge.id)
        self._in[dst].append(edge.id)
        return edge

    def _resolve(self, ref: NodeRef) -> int:
        nid = ref.id if isinstance(ref, Node) else ref
        if not isinstance(nid, int) or not 0 <= nid < len(self._nodes):
            raise CallGraphError(f"unknown node: {ref!r}")
        if isinstance(ref, Node) and self._nodes[nid] is not ref and self._nodes[nid].name != ref.name:
            raise CallGraphError(f"node {ref!r} does not belong to this graph")
        return nid

    # ---------------------------------------------------------------- queries
    def node(self, nid: int) -> Node:
        """Return the node stored under `nid`."""
        return self._nodes[self._resolve(nid)]

    def find(self, name: str) -> Optional[Node]:
        """Look a node up by its qualified name."""
        nid = self._by_name.get(name)
        return None if nid is None else self._nodes[nid]

    def nodes(self) -> Iterator[Node]:
        """Iterate over nodes in id order."""
        return iter(list(self._nodes))

    def edges(self) -> Iterator[Edge]:
        """Iterate over edges in id order."""
        return iter(list(self._edges))

    def out_edges(self, node: NodeRef) -> List[Edge]:
        """Call sites inside `node`, in insertion order."""
        return [self._edges[eid] for eid in self._out[self._resolve(node)]]

    def in_edges(self, node: NodeRef) -> List[Edge]:
        """Call sites targeting `node`, in insertion order."""
        return [self._edges[eid] for eid in self._in[self._resolve(node)]]

    def in_degree(self, node: NodeRef) -> int:
        return len(self._in[self._resolve(node)])

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def get(self) -> Dict[str, Set[str]]:
        """Return a plain caller name -> callee names view of the graph."""
        out: Dict[str, Set[str]] = {node.name: set() for node in self._nodes}
        for edge in self._edges:
            out[self._nodes[edge.caller].name].add(self._nodes[edge.callee].name)
        return out

    def get_modules(self) -> Dict[str, str]:
        """Return the recorded package of every node that has one."""
        return {node.name: node.package for node in self._nodes if node.package is not None}

    # ------------------------------------------------------------ validation
    def validate(self) -> None:
        """
        Check the graph's internal consistency.

        Raises:
            CallGraphError: if an edge references a node outside the table
                or the adjacency lists disagree with the edge table
        """
        count = len(self._nodes)
        for nid, node in enumerate(self._nodes):
            if node.id != nid:
                raise CallGraphError(f"node {node.name!r} stored under id {nid} claims id {node.id}")
        # One set per adjacency list keeps the check linear in nodes + edges
        out_ids = [set(eids) for eids in self._out]
        in_ids = [set(eids) for eids in self._in]
        for edge in self._edges:
            if not (0 <= edge.caller < count and 0 <= edge.callee < count):
                raise CallGraphError(f"edge {edge.id} references an unknown node")
            if edge.id not in out_ids[edge.caller] or edge.id not in in_ids[edge.callee]:
                raise CallGraphError(f"edge {edge.id} is missing from the adjacency lists")

    # ------------------------------------------------------------ compat ops
    def to_networkx(self) -> nx.MultiDiGraph:
        """
        Build a networkx view of the graph.

        Node keys are node ids; ``name`` and ``package`` are node attributes
        and every edge carries its ``site`` descriptor.
        """
        graph = nx.MultiDiGraph()
        for node in self._nodes:
            graph.add_node(node.id, name=node.name, package=node.package)
        for edge in self._edges:
            graph.add_edge(edge.caller, edge.callee, key=edge.id, site=edge.site)
        return graph


def build_graph(nodes: Iterable[tuple], edges: Iterable[tuple]) -> CallGraph:
    """
    Assemble a graph from plain records.

    Args:
        nodes: ``(name, package)`` pairs
        edges: ``(caller_name, callee_name, site)`` triples; the names must
            appear in `nodes`

    Returns:
        CallGraph with the nodes added in the given order

    Raises:
        CallGraphError: if an edge names a function missing from `nodes`
    """
    graph = CallGraph()
    for name, package in nodes:
        graph.add_node(name, package)
    for caller, callee, site in edges:
        src = graph.find(caller)
        dst = graph.find(callee)
        if src is None or dst is None:
            missing = caller if src is None else callee
            raise CallGraphError(f"edge {caller} -> {callee} references unknown function {missing!r}")
        graph.add_edge(src, dst, site)
    return graph
