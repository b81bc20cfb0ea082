"""Tests for dbinfo.decoding.scanner."""

from __future__ import annotations

from dbinfo.decoding.scanner import is_string_literal, scan_string_literal


def test_scan_returns_content_and_end_offset() -> None:
    assert scan_string_literal('name = "invoice"', 7) == ("invoice", 16)


def test_scan_unescapes_common_escapes() -> None:
    content, end = scan_string_literal('"a\\"b\\\\c\\n\\t"', 0)

    assert content == 'a"b\\c\n\t'
    assert end == 13


def test_scan_decodes_unicode_escape() -> None:
    assert scan_string_literal('"\\u0041x"', 0) == ("Ax", 9)


def test_scan_keeps_unknown_escape_character() -> None:
    assert scan_string_literal('"\\q"', 0) == ("q", 4)


def test_scan_returns_none_when_not_at_quote() -> None:
    assert scan_string_literal("abc", 0) is None
    assert scan_string_literal('"abc"', 10) is None
    assert scan_string_literal('"abc"', -1) is None


def test_scan_returns_none_when_unterminated() -> None:
    assert scan_string_literal('"abc', 0) is None
    assert scan_string_literal('"abc\\', 0) is None
    assert scan_string_literal('"abc\\"', 0) is None


def test_is_string_literal_requires_whole_text() -> None:
    assert is_string_literal('"x"')
    assert not is_string_literal('"x" + "y"')
    assert not is_string_literal("x")


def test_scan_text_block_strips_incidental_indentation() -> None:
    text = '"""\n    SELECT *\n      FROM t\n    """'

    assert scan_string_literal(text, 0) == ("SELECT *\n  FROM t\n", len(text))
    assert is_string_literal(text)


def test_scan_text_block_closing_on_content_line() -> None:
    text = '"""\n  a \\\n  b\\t"""'

    assert scan_string_literal(text, 0) == ("a b\t", len(text))


def test_three_quotes_without_line_break_are_an_empty_string() -> None:
    assert scan_string_literal('""" x"""', 0) == ("", 2)


def test_scan_returns_none_for_unterminated_text_block() -> None:
    assert scan_string_literal('"""\n  abc ""', 0) is None
