"""
Unit tests for the remap rule store.
"""
import logging

from playlist_catalog.remap import EMPTY, load_rules, parse_rules


class TestParseRules:
    """Parsing key=value rule text."""

    def test_basic_rules(self):
        rules = parse_rules("chfoo=chbar\nRai1.it = RAI 1\n")
        assert len(rules) == 2
        assert rules.get("chfoo") == "chbar"
        assert rules.get("rai1.it") == "rai 1"

    def test_lookup_is_case_insensitive(self):
        rules = parse_rules("ChFoo=ChBar")
        assert "CHFOO" in rules
        assert rules.get("chFOO") == "chbar"

    def test_comments_and_blank_lines_ignored(self):
        rules = parse_rules("# header\n\n   \nchfoo=chbar\n#chx=chy\n")
        assert rules.rule_count == 1
        assert rules.skipped == 0
        assert "chx" not in rules

    def test_malformed_lines_are_skipped_and_counted(self, caplog):
        """Missing '=', empty key or empty value never abort loading."""
        text = "no-separator\n=value\nkey=\n  =  \nok=fine\n"
        with caplog.at_level(logging.WARNING, logger="playlist_catalog"):
            rules = parse_rules(text)
        assert rules.rule_count == 1
        assert rules.skipped == 4
        assert rules.get("ok") == "fine"
        assert "line 1" in caplog.text

    def test_rules_are_read_only(self):
        rules = parse_rules("a=b")
        assert rules.get("missing") is None
        assert list(rules) == ["a"]


class TestLoadRules:
    """Loading the rule file from disk."""

    def test_missing_file_yields_empty_rules(self, tmp_path):
        rules = load_rules(tmp_path / "link.epg.remapping")
        assert rules is EMPTY
        assert len(rules) == 0

    def test_unreadable_file_yields_empty_rules(self, tmp_path, caplog):
        """A directory in place of the file is an error, not a crash."""
        with caplog.at_level(logging.ERROR, logger="playlist_catalog"):
            rules = load_rules(tmp_path)
        assert len(rules) == 0
        assert "Failed to read remap file" in caplog.text

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "link.epg.remapping"
        path.write_text("# rules\nchfoo=chbar\nbroken\n", encoding="utf-8")
        rules = load_rules(path)
        assert rules.get("chfoo") == "chbar"
        assert rules.skipped == 1
