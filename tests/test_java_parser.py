"""Tests for dbinfo.parsing.java_parser."""

from __future__ import annotations

from pathlib import Path

from dbinfo.parsing.java_parser import JavaParser, first_error_line


def test_parse_file_returns_tree_and_source(tmp_path: Path) -> None:
    path = tmp_path / "A.java"
    path.write_text("class A { }\n", encoding="utf-8")

    tree, source = JavaParser().parse_file(path)

    assert source == b"class A { }\n"
    assert tree.root_node.type == "program"
    assert first_error_line(tree) is None


def test_parse_source_accepts_text() -> None:
    tree, source = JavaParser().parse_source('class A { String s = "café"; }')

    assert source == 'class A { String s = "café"; }'.encode("utf-8")
    assert not tree.root_node.has_error


def test_first_error_line_points_at_broken_statement() -> None:
    tree, _ = JavaParser().parse_source("class A {\n  int x = ;\n}\n")

    assert tree.root_node.has_error
    assert first_error_line(tree) == 2
