"""Tests for blocking rule compilation."""

from fountainscan.engine.blocking import BlockRule, compile_blocking_rules


def test_bare_entry_produces_bare_and_www_rules():
    rules = compile_blocking_rules(["scam.example"], [])
    assert [r.url_pattern for r in rules] == ["*://scam.example/*", "*://www.scam.example/*"]
    assert [r.id for r in rules] == [1, 2]
    assert all(r.redirect_target == "/blocked.html?url=scam.example" for r in rules)


def test_whitelisted_entry_is_skipped():
    assert compile_blocking_rules(["scam.example"], ["scam.example"]) == []
    assert compile_blocking_rules(["login.scam.example"], ["*.scam.example"]) == []


def test_wildcard_entry_has_no_www_variant():
    rules = compile_blocking_rules(["*.scam.example"])
    assert len(rules) == 1
    assert rules[0].url_pattern == "*://*.scam.example/*"


def test_entries_are_normalized_but_target_keeps_original():
    rules = compile_blocking_rules(["https://www.Scam.Example"])
    assert rules[0].url_pattern == "*://scam.example/*"
    assert rules[0].redirect_target == "/blocked.html?url=https%3A%2F%2Fwww.Scam.Example"


def test_ids_are_stable_and_unique():
    blacklist = [f"scam{i}.example" for i in range(1200)]
    first = compile_blocking_rules(blacklist, ["scam3.example"])
    second = compile_blocking_rules(blacklist, ["scam3.example"])
    assert first == second
    ids = [r.id for r in first]
    assert len(ids) == len(set(ids))
    # Skipping a whitelisted entry does not shift later ids.
    assert [r.id for r in first if r.url_pattern == "*://scam4.example/*"] == [9]


def test_empty_entries_are_ignored():
    assert compile_blocking_rules(["", "  ", "*."]) == []
    assert compile_blocking_rules(None) == []


def test_wire_format():
    rule = BlockRule(id=3, url_pattern="*://scam.example/*", redirect_target="/blocked.html?url=x")
    assert rule.to_dict() == {
        "id": 3,
        "priority": 1,
        "action": {"type": "redirect", "redirect": {"extensionPath": "/blocked.html?url=x"}},
        "condition": {"urlFilter": "*://scam.example/*", "resourceTypes": ["main_frame"]},
    }
