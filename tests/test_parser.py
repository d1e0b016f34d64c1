"""Tests for fortunedb/parser.py: splitting blobs and measuring entries."""
from __future__ import annotations

import pytest

from fortunedb import (
    CorpusParser, EmptySegments, ParseError, TrimPolicy
)


@pytest.fixture
def parser():
    return CorpusParser()


class TestSplitting:
    def test_hello_test_round_trip(self, parser):
        entries = parser.parse("hello\n%%\ntest\n")
        assert [e.text for e in entries] == ["hello", "test"]
        assert entries[0].length == 5
        assert entries[1].length == 4

    def test_leading_empty_segment_is_kept(self, parser):
        entries = parser.parse("%%a%%")
        assert len(entries) == 2
        assert entries[0].text == ""
        assert entries[0].length == 0
        assert entries[1].text == "a%%"

    def test_k_delimiters_give_k_plus_one_entries(self, parser):
        assert len(parser.parse("a\n%%\nb\n%%\nc")) == 3
        assert len(parser.parse("one\n%%\ntwo\n%%\nthree\n%%\nfour")) == 4

    def test_mid_line_delimiter_is_text(self, parser):
        entries = parser.parse('printf("100%%d")\n%%\nnext\n')
        assert [e.text for e in entries] == ['printf("100%%d")', "next"]

    def test_delimiter_after_crlf_and_cr(self, parser):
        assert [e.text for e in parser.parse("a\r\n%%\r\nb\r%%\rc")] == ["a", "b", "c"]

    def test_single_fortune_without_delimiter(self, parser):
        entries = parser.parse("There is only one fortune.")
        assert len(entries) == 1
        assert entries[0].text == "There is only one fortune."
        assert entries[0].offset == 0

    def test_consecutive_delimiters_keep_empty_entry(self, parser):
        entries = parser.parse("a\n%%\n%%\nb")
        assert [e.text for e in entries] == ["a", "", "b"]

    def test_skip_policy_drops_empty_entries(self):
        parser = CorpusParser(empty_segments=EmptySegments.SKIP)
        entries = parser.parse("a\n%%\n%%\nb")
        assert [e.text for e in entries] == ["a", "b"]

    def test_trailing_delimiter_does_not_open_entry(self, parser):
        assert [e.text for e in parser.parse("a\n%%\nb\n%%\n")] == ["a", "b"]

    def test_offsets_point_into_source(self, parser):
        text = "hello\n%%\ntest\n"
        entries = parser.parse(text)
        assert [e.offset for e in entries] == [0, 9]
        for entry in entries:
            assert text[entry.offset:].startswith(entry.text)

    def test_custom_delimiter(self):
        parser = CorpusParser(delimiter="%")
        entries = parser.parse("123\n%\n456\n%\n789")
        assert [e.text for e in entries] == ["123", "456", "789"]

    def test_empty_delimiter_rejected(self):
        with pytest.raises(ValueError):
            CorpusParser(delimiter="")

    def test_source_is_recorded(self, parser):
        entries = parser.parse("a\n%%\nb", source="zippy")
        assert {e.source for e in entries} == {"zippy"}


class TestTrimming:
    def test_only_one_trailing_newline_removed(self, parser):
        entries = parser.parse("a\n\n%%\nb")
        assert entries[0].text == "a\n"
        assert entries[0].height == 2

    def test_crlf_counts_as_one_terminator(self, parser):
        entries = parser.parse("one\r\ntwo\r\n%%\r\nthree")
        assert entries[0].text == "one\r\ntwo"
        assert entries[0].length == 8
        assert entries[0].width == 3
        assert entries[0].height == 2
        assert entries[1].text == "three"

    def test_leading_and_interior_whitespace_preserved(self, parser):
        entries = parser.parse("  indented\n\ttabbed  \n%%\n\nafter blank")
        assert entries[0].text == "  indented\n\ttabbed  "
        assert entries[1].text == "\nafter blank"
        assert entries[1].height == 2

    def test_no_trim_policy_keeps_terminator(self):
        parser = CorpusParser(trim=TrimPolicy.NONE)
        entries = parser.parse("hello\n%%\ntest\n")
        assert entries[0].text == "hello\n"
        assert entries[0].length == 6
        assert entries[0].width == 5
        assert entries[0].height == 2
        assert entries[1].text == "test\n"


class TestMetrics:
    def test_multiline_metrics(self, parser):
        entries = parser.parse("1\n3\n%%\n4\n6\n%%\n7\n9")
        assert [e.text for e in entries] == ["1\n3", "4\n6", "7\n9"]
        for entry in entries:
            assert (entry.length, entry.width, entry.height) == (3, 1, 2)

    def test_width_is_longest_line(self, parser):
        length, width, height = parser.measure("ab\nabcdef\nabc")
        assert (length, width, height) == (13, 6, 3)

    def test_empty_text(self, parser):
        assert parser.measure("") == (0, 0, 1)

    def test_blank_lines_count_towards_height(self, parser):
        assert parser.measure("a\n\n\nb") == (5, 1, 4)

    def test_metric_invariants_hold(self, parser, fortunes_text):
        for entry in parser.parse(fortunes_text):
            assert entry.length == len(entry.text)
            assert entry.height == 1 + entry.text.count("\n")
            assert entry.width == max(len(line) for line in entry.text.split("\n"))
            assert entry.length >= entry.width >= 0
            assert (entry.width == 0) == (entry.text == "")

    def test_blank_lines_only_entry(self, parser):
        entries = parser.parse("a\n%%\n\n\n%%\nb")
        blank = entries[1]
        assert blank.text == "\n"
        assert (blank.length, blank.width, blank.height) == (1, 0, 2)

    def test_zero_width_means_only_line_breaks(self, parser):
        entries = parser.parse("a\n%%\n\n\n%%\n%%\n\r\n\n%%\nb c")
        for entry in entries:
            has_content = bool(entry.text.replace("\r", "").replace("\n", ""))
            assert (entry.width == 0) == (not has_content)

    def test_unicode_counts_characters(self, parser):
        entries = parser.parse("👌👀 good shit\n%%\n (chorus: ʳᶦᵍʰᵗ ᵗʰᵉʳᵉ) mMMMMᎷМ💯")
        assert entries[0].text == "👌👀 good shit"
        assert entries[0].length == 12
        assert entries[1].text == " (chorus: ʳᶦᵍʰᵗ ᵗʰᵉʳᵉ) mMMMMᎷМ💯"


class TestDecoding:
    def test_utf8_bytes(self, parser):
        entries = parser.parse("héllo\n%%\nwörld\n".encode("utf-8"))
        assert [e.text for e in entries] == ["héllo", "wörld"]

    def test_utf8_bom_stripped(self, parser):
        entries = parser.parse(b"\xef\xbb\xbfhello\n%%\ntest")
        assert entries[0].text == "hello"

    def test_utf16_bytes_with_bom(self, parser):
        entries = parser.parse("a\n%%\nb".encode("utf-16"))
        assert [e.text for e in entries] == ["a", "b"]

    def test_invalid_utf8_is_parse_error(self, parser):
        with pytest.raises(ParseError):
            parser.parse(b"abc\xc3\x28")

    def test_non_text_rejected(self, parser):
        with pytest.raises(TypeError):
            parser.parse(12345)


class TestParseErrors:
    def test_empty_blob(self, parser):
        with pytest.raises(ParseError):
            parser.parse("")

    def test_empty_bytes(self, parser):
        with pytest.raises(ParseError):
            parser.parse(b"")

    def test_only_delimiters(self, parser):
        with pytest.raises(ParseError):
            parser.parse("%%")
        with pytest.raises(ParseError):
            parser.parse("\n%%\n%%\n")

    def test_parse_error_is_value_error(self, parser):
        with pytest.raises(ValueError):
            parser.parse("")
