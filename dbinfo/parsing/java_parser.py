"""
Java 소스 파서 모듈.

tree-sitter-java 문법으로 .java 파일을 구문 트리로 바꾼다.

tree-sitter는 문법 오류가 있어도 ERROR/MISSING 노드를 끼워 넣은 트리를 돌려주므로
오래된 코드베이스나 일부가 깨진 파일도 끝까지 분석할 수 있다.
클래스패스나 컴파일 없이 소스 텍스트만으로 동작한다.

사용 예:
    parser = JavaParser()
    tree, source = parser.parse_file(Path("Invoice.java"))
    if tree.root_node.has_error:
        print(first_error_line(tree))
"""

from pathlib import Path

import tree_sitter_java as tsjava
from tree_sitter import Language, Node, Parser, Tree

JAVA_LANGUAGE = Language(tsjava.language())


class JavaParser:
    """
    .java 소스를 (Tree, bytes) 쌍으로 파싱한다.

    노드 텍스트는 start_byte/end_byte로 원본 바이트에서 잘라내므로
    트리와 원본을 항상 함께 돌려준다.
    """

    def __init__(self):
        self.parser = Parser(JAVA_LANGUAGE)

    def parse_file(self, file_path: Path) -> tuple[Tree, bytes]:
        """
        Raises:
            OSError: 파일을 읽을 수 없는 경우
        """
        return self.parse_source(file_path.read_bytes())

    def parse_source(self, source: bytes | str) -> tuple[Tree, bytes]:
        """인메모리 소스를 파싱한다. str은 UTF-8로 인코딩한다."""
        if isinstance(source, str):
            source = source.encode("utf-8")
        return self.parser.parse(source), source


def first_error_line(tree: Tree) -> int | None:
    """첫 번째 ERROR/MISSING 노드의 줄 번호(1부터). 오류가 없으면 None."""
    node = _first_error(tree.root_node)
    return node.start_point[0] + 1 if node is not None else None


def _first_error(node: Node) -> Node | None:
    if node.is_error or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = _first_error(child)
        if found is not None:
            return found
    return None
