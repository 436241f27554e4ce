from __future__ import annotations

from cryptotrace.audit import DEFAULT_POLICY, Status
from cryptotrace.audit.core.scanner import GraphScanner
from cryptotrace.machinery.callgraph import CallGraph, build_graph


def _graph():
    return build_graph(
        nodes=[
            ("app.main", "app"),
            ("app.digest", "app"),
            ("Crypto.Hash.MD5.new", "Crypto.Hash.MD5"),
            ("Crypto.Hash.SHA256.new", "Crypto.Hash.SHA256"),
            ("Crypto.Util.Padding.pad", "Crypto.Util.Padding"),
            ("os.urandom", "os"),
            ("print", None),
        ],
        edges=[
            ("app.main", "app.digest", "static function call to app.digest"),
            ("app.main", "print", "dynamic function call to print"),
            ("app.digest", "Crypto.Hash.MD5.new", "call md5"),
            ("app.digest", "Crypto.Hash.SHA256.new", "call sha256"),
            ("app.digest", "Crypto.Util.Padding.pad", "call pad"),
            ("app.digest", "os.urandom", "call urandom"),
        ],
    )


def test_only_tracked_callees_are_recorded():
    usages = GraphScanner(DEFAULT_POLICY).scan(_graph())

    assert sorted((u.package, u.status) for u in usages) == [
        ("Crypto.Hash.MD5", Status.REJECTED),
        ("Crypto.Hash.SHA256", Status.APPROVED),
        ("Crypto.Util.Padding", Status.UNKNOWN),
    ]


def test_usage_fields():
    graph = _graph()
    usages = GraphScanner(DEFAULT_POLICY).scan(graph)
    md5 = [u for u in usages if u.package == "Crypto.Hash.MD5"][0]

    assert md5.function == "new"
    assert md5.caller == "app.digest"
    assert md5.caller_package == "app"
    assert md5.call_site == "call md5"
    assert md5.call_path is None
    assert md5.caller_id == graph.find("app.digest").id


def test_nodes_without_package_are_skipped():
    graph = CallGraph()
    synthetic = graph.add_node("<synthetic>")
    real = graph.add_node("app.run", "app")
    md5 = graph.add_node("Crypto.Hash.MD5.new", "Crypto.Hash.MD5")
    unresolved = graph.add_node("cipher.encrypt")
    graph.add_edge(synthetic, md5, "from synthetic caller")
    graph.add_edge(real, unresolved, "to unresolved callee")
    graph.add_edge(real, md5, "real call")

    usages = GraphScanner(DEFAULT_POLICY).scan(graph)

    assert [u.call_site for u in usages] == ["real call"]


def test_every_call_site_is_a_separate_usage():
    graph = CallGraph()
    caller = graph.add_node("app.run", "app")
    md5 = graph.add_node("Crypto.Hash.MD5.new", "Crypto.Hash.MD5")
    graph.add_edge(caller, md5, "first")
    graph.add_edge(caller, md5, "second")

    usages = GraphScanner(DEFAULT_POLICY).scan(graph)

    assert [u.call_site for u in usages] == ["first", "second"]


def test_empty_graph():
    assert GraphScanner(DEFAULT_POLICY).scan(CallGraph()) == []
