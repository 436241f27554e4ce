from __future__ import annotations

import pytest

from cryptotrace.audit import AuditConfig
from cryptotrace.audit.core.constants import DEFAULT_CALL_TREE_DEPTH, NOISE_PREFIXES


def test_defaults():
    config = AuditConfig()

    assert config.get_option("call_tree") is False
    assert config.get_option("call_tree_depth") == DEFAULT_CALL_TREE_DEPTH
    assert config.get_option("unapproved_only") is False
    assert config.get_option("denoise") is False
    assert config.get_option("noise_prefixes") == NOISE_PREFIXES
    assert config.get_option("root_packages") is None


def test_options_are_set_from_keywords():
    config = AuditConfig(call_tree=True, call_tree_depth=0, root_packages=["app"])

    assert config.get_option("call_tree") is True
    assert config.get_option("call_tree_depth") == 0
    assert config.get_option("root_packages") == ("app",)


def test_instances_do_not_share_state():
    first = AuditConfig()
    first.set_option("entry_symbols", ["run"])

    assert AuditConfig().get_option("entry_symbols") == ("main",)


def test_unknown_option():
    with pytest.raises(KeyError):
        AuditConfig(colour=True)
    with pytest.raises(KeyError):
        AuditConfig().get_option("colour")


@pytest.mark.parametrize("depth", [-1, 2.5, "3", True])
def test_invalid_depth(depth):
    with pytest.raises(ValueError):
        AuditConfig(call_tree_depth=depth)


def test_as_dict_is_a_copy():
    config = AuditConfig()
    options = config.as_dict()
    options["denoise"] = True

    assert config.get_option("denoise") is False
