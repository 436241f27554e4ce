from __future__ import annotations

import random

import pytest

from cryptotrace.audit import Status, Summary, UsageRecord
from cryptotrace.audit.core.aggregator import (
    aggregate,
    apply_filters,
    caller_package_filter,
    exclude_approved,
    order_usages,
)


def usage(package, status, caller="app.run", caller_package="app", function="new", site=""):
    return UsageRecord(package, function, caller, caller_package, site, status)


def test_usages_are_ordered_by_package_then_caller():
    usages = [
        usage("Crypto.Hash.SHA256", Status.APPROVED, caller="app.b"),
        usage("Crypto.Cipher.AES", Status.APPROVED, caller="app.z"),
        usage("Crypto.Hash.SHA256", Status.APPROVED, caller="app.a"),
        usage("Crypto.Cipher.AES", Status.APPROVED, caller="app.c"),
    ]

    ordered = order_usages(usages)

    assert [(u.package, u.caller) for u in ordered] == [
        ("Crypto.Cipher.AES", "app.c"),
        ("Crypto.Cipher.AES", "app.z"),
        ("Crypto.Hash.SHA256", "app.a"),
        ("Crypto.Hash.SHA256", "app.b"),
    ]


def test_ordering_does_not_depend_on_input_order():
    usages = [
        usage(f"Crypto.Hash.H{i % 3}", Status.UNKNOWN, caller=f"app.f{i % 4}", site=f"site {i}")
        for i in range(12)
    ]
    rng = random.Random(7)
    shuffled = list(usages)
    rng.shuffle(shuffled)

    assert order_usages(shuffled) == order_usages(usages)


def test_summary_counts_every_status():
    usages = [
        usage("Crypto.Hash.SHA256", Status.APPROVED),
        usage("Crypto.Hash.MD5", Status.REJECTED),
        usage("Crypto.Hash.MD5", Status.REJECTED, caller="app.other"),
        usage("Crypto.Protocol.KDF", Status.MUST_EVALUATE),
        usage("Crypto.Util.Padding", Status.UNKNOWN),
    ]

    summary = aggregate(usages).summary

    assert summary == Summary(total=5, approved=1, rejected=2, must_evaluate=1, unknown=1)
    assert not summary.compliant


def test_empty_result_is_compliant():
    result = aggregate([])

    assert result.usages == ()
    assert result.summary == Summary()
    assert result.compliant


@pytest.mark.parametrize("seed", range(5))
def test_compliance_matches_counts(seed):
    rng = random.Random(seed)
    statuses = list(Status)
    for _ in range(40):
        usages = [usage("Crypto.X", rng.choice(statuses), site=str(i)) for i in range(rng.randint(0, 8))]
        summary = aggregate(usages).summary

        assert summary.total == summary.approved + summary.rejected + summary.must_evaluate + summary.unknown
        assert summary.total == len(usages)
        assert summary.compliant == all(u.status is Status.APPROVED for u in usages)


def test_unapproved_only_recomputes_summary():
    usages = [usage("Crypto.Cipher.AES", Status.APPROVED, site=str(i)) for i in range(3)]
    usages += [usage("Crypto.Hash.MD5", Status.REJECTED, site=str(i)) for i in range(2)]

    result = aggregate(apply_filters(usages, [exclude_approved]))

    assert len(result.usages) == 2
    assert all(u.status is Status.REJECTED for u in result.usages)
    assert result.summary == Summary(total=2, rejected=2)


@pytest.mark.parametrize("caller_package,kept", [
    ("io", False),
    ("io.text", False),
    ("iot", True),
    ("iot.devices", True),
    ("Crypto.Util", False),
    ("app.hashlib", True),
    ("app", True),
])
def test_noise_filter_matches_whole_package_components(caller_package, kept):
    record = usage("Crypto.Hash.MD5", Status.REJECTED, caller_package=caller_package)

    assert bool(apply_filters([record], [caller_package_filter()])) is kept


def test_filters_never_change_status():
    usages = [
        usage("Crypto.Hash.MD5", Status.REJECTED, caller_package="app"),
        usage("Crypto.Hash.MD5", Status.REJECTED, caller_package="logging"),
        usage("Crypto.Hash.SHA256", Status.APPROVED, caller_package="app"),
    ]

    kept = apply_filters(usages, [exclude_approved, caller_package_filter(["logging"])])

    assert kept == [usages[0]]


def test_metadata_passes_through():
    result = aggregate([], source_directory="/src", patterns=["app/**/*.py"], entry_package="app")

    assert result.source_directory == "/src"
    assert result.patterns == ("app/**/*.py",)
    assert result.entry_package == "app"
