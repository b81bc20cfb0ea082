"""
어노테이션 및 수정자 추출 모듈.

tree-sitter AST 선언 노드의 modifiers에서 다음을 추출하는 헬퍼 함수들:
- 어노테이션 (이름 + 속성 원문)
- 수정자 키워드 (public, static, transient 등)

tree-sitter AST 구조 (Java):
    field_declaration
    ├── modifiers
    │   ├── marker_annotation      (@Id 처럼 인수 없는 어노테이션)
    │   ├── annotation             (@Column(name = "x") 처럼 인수 있는 어노테이션)
    │   │   ├── name (identifier / scoped_identifier)
    │   │   └── arguments (annotation_argument_list)
    │   │       ├── element_value_pair (key, value)
    │   │       └── ...
    │   └── "private", "static" 등의 키워드 노드
    ├── type
    └── declarator (variable_declarator)

속성값은 디코딩하지 않고 소스 원문 그대로 저장한다.
디코딩은 분류 단계에서 decoding.annotation_values가 담당한다.
"""

from __future__ import annotations

from typing import Callable

from tree_sitter import Node

from dbinfo.models import Annotation

_ANNOTATION_TYPES = ("marker_annotation", "annotation")
_COMMENT_TYPES = ("line_comment", "block_comment")


def node_text(node: Node, source: bytes) -> str:
    """노드가 차지하는 원본 소스 텍스트."""
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def find_modifiers(node: Node) -> Node | None:
    for child in node.children:
        if child.type == "modifiers":
            return child
    return None


def extract_annotations(
    node: Node,
    source: bytes,
    resolve: Callable[[str], str | None] | None = None,
) -> list[Annotation]:
    """
    선언 노드의 modifiers에서 어노테이션을 선언 순서대로 추출한다.

    Args:
        node: 클래스/메서드/필드 선언 노드
        source: 원본 소스 바이트
        resolve: 어노테이션 이름 → FQN 해석 함수 (import 기반). 없으면 FQN은 None

    Returns:
        Annotation 리스트. 예: @Column(name = "amount", nullable = false)
        → Annotation(name="Column", attributes={"name": '"amount"', "nullable": "false"})
    """
    modifiers = find_modifiers(node)
    if modifiers is None:
        return []

    annotations: list[Annotation] = []
    for mod_child in modifiers.children:
        if mod_child.type not in _ANNOTATION_TYPES:
            continue
        name_node = mod_child.child_by_field_name("name")
        if name_node is None:
            continue
        name = node_text(name_node, source)
        annotations.append(Annotation(
            name=name,
            qualified_name=resolve(name) if resolve else None,
            attributes=_extract_attributes(mod_child, source),
        ))
    return annotations


def _extract_attributes(annotation_node: Node, source: bytes) -> dict[str, str]:
    """
    annotation_argument_list에서 key → 값 원문 매핑을 만든다.

    @Table("invoice") 처럼 이름 없는 단일 인수는 "value" 키로 저장한다.
    """
    arguments = annotation_node.child_by_field_name("arguments")
    if arguments is None:
        return {}

    attributes: dict[str, str] = {}
    for arg in arguments.named_children:
        if arg.type in _COMMENT_TYPES:
            continue
        if arg.type == "element_value_pair":
            key_node = arg.child_by_field_name("key")
            value_node = arg.child_by_field_name("value")
            if key_node is None or value_node is None:
                continue
            attributes[node_text(key_node, source)] = node_text(value_node, source)
        else:
            attributes["value"] = node_text(arg, source)
    return attributes


def extract_modifiers(node: Node, source: bytes) -> list[str]:
    """
    선언 노드의 modifiers에서 수정자 키워드만 추출한다 (어노테이션, 주석 제외).

    Returns:
        수정자 키워드 리스트 (예: ["private", "static", "final"])
    """
    modifiers = find_modifiers(node)
    if modifiers is None:
        return []
    return [
        node_text(child, source)
        for child in modifiers.children
        if child.type not in _ANNOTATION_TYPES and child.type not in _COMMENT_TYPES
    ]
