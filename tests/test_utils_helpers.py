from fountainscan.utils.domains import ensure_url, extract_hostname, normalize_list_domain
from fountainscan.utils.lists import dedupe_entries, read_domain_list, write_domain_list


def test_ensure_url_adds_scheme():
    assert ensure_url("example.com") == "https://example.com"


def test_ensure_url_preserves_scheme():
    assert ensure_url("http://example.com") == "http://example.com"


def test_extract_hostname_strips_port_and_lowercases():
    assert extract_hostname("HTTPS://Example.com:8080/test") == "example.com"


def test_extract_hostname_handles_bad_input():
    assert extract_hostname("") == ""
    assert extract_hostname("http://[broken") == ""


def test_normalize_list_domain():
    assert normalize_list_domain("  HTTPS://www.Example.com ") == "example.com"
    assert normalize_list_domain("*.Example.com") == "*.example.com"
    assert normalize_list_domain(None) == ""


def test_dedupe_keeps_first_seen_order():
    assert dedupe_entries(["B.com", "a.com", "b.com", "", "a.com"]) == ["b.com", "a.com"]


def test_domain_list_read_write_roundtrip(tmp_path):
    path = tmp_path / "lists" / "blacklist.txt"
    write_domain_list(path, ["scam.example", "*.bad.example"], title="Blacklist")
    text = path.read_text()
    assert text.startswith("# Blacklist")
    assert read_domain_list(path) == ["scam.example", "*.bad.example"]


def test_read_domain_list_skips_comments(tmp_path):
    path = tmp_path / "whitelist.txt"
    path.write_text("# trusted\n\nGood.example\n  # indented comment\nother.example\ngood.example\n")
    assert read_domain_list(path) == ["good.example", "other.example"]
    assert read_domain_list(tmp_path / "missing.txt") == []
