"""
멤버 수집 모듈.

JPA 매핑 대상이 되는 멤버(필드 또는 프로퍼티 접근자)를 결정한다.
엔티티 추출기와 관계 추출기가 함께 사용한다.

접근 모드 결정 (타입 전체 단위):
- PROPERTY: 매핑 어노테이션(@Id, @Column, @OneToMany 등)이 붙은
  접근자(getter)가 하나라도 있는 경우
- FIELD: 그 외 (기본값)

접근자 조건:
- 파라미터 0개, 반환 타입이 void가 아님
- "get" + 1글자 이상, 또는
- "is" + 1글자 이상이면서 반환 타입이 boolean/Boolean
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from dbinfo.classify.markers import MAPPING_MARKERS, RELATION_KINDS, AnnotationMatcher
from dbinfo.models import Annotatable, MethodElement, TypeElement, TypeRef

AccessMode = Literal["FIELD", "PROPERTY"]

_BOOLEAN_TYPES = {"boolean", "Boolean", "java.lang.Boolean"}
_NOISE_NAMES = {"serialVersionUID", "LOG", "LOGGER"}


@dataclass(frozen=True)
class Member:
    """
    매핑 후보 멤버 하나.

    FIELD 모드에서는 필드, PROPERTY 모드에서는 접근자 메서드를 감싼다.
    name은 프로퍼티 이름 (getAmount → amount).
    """

    name: str
    declared_type: TypeRef | None
    modifiers: tuple[str, ...]
    element: Annotatable


def is_boolean_type(type_ref: TypeRef | None) -> bool:
    if type_ref is None:
        return False
    return type_ref.name in _BOOLEAN_TYPES or type_ref.best_name in _BOOLEAN_TYPES


def is_accessor(method: MethodElement) -> bool:
    """메서드가 getter 규칙을 따르는 접근자인지 판별한다."""
    if method.parameters:
        return False
    if method.return_type is None or method.return_type.name == "void":
        return False
    name = method.name
    if name.startswith("get") and len(name) > 3:
        return True
    if name.startswith("is") and len(name) > 2:
        return is_boolean_type(method.return_type)
    return False


def property_name(accessor_name: str) -> str:
    """
    접근자 이름에서 프로퍼티 이름을 만든다.

    "get"/"is" 접두사를 떼고 첫 글자를 소문자로 바꾼다.
    남는 글자가 없으면 접근자 이름을 그대로 반환한다.

    예: getAmount → amount, isActive → active, get → get
    """
    for prefix in ("get", "is"):
        if accessor_name.startswith(prefix):
            rest = accessor_name[len(prefix):]
            if not rest:
                return accessor_name
            return rest[0].lower() + rest[1:]
    return accessor_name


def detect_access_mode(type_el: TypeElement, matcher: AnnotationMatcher) -> AccessMode:
    """매핑 어노테이션이 붙은 접근자가 있으면 PROPERTY, 없으면 FIELD."""
    for method in type_el.methods:
        if is_accessor(method) and method.has_any(MAPPING_MARKERS, matcher):
            return "PROPERTY"
    return "FIELD"


def collect_members(type_el: TypeElement, mode: AccessMode) -> list[Member]:
    """접근 모드에 따라 선언 순서대로 멤버 목록을 만든다."""
    if mode == "PROPERTY":
        return [
            Member(
                name=property_name(method.name),
                declared_type=method.return_type,
                modifiers=tuple(method.modifiers),
                element=method,
            )
            for method in type_el.methods
            if is_accessor(method)
        ]
    return [
        Member(
            name=field.name,
            declared_type=field.declared_type,
            modifiers=tuple(field.modifiers),
            element=field,
        )
        for field in type_el.fields
    ]


def is_logger_type(type_ref: TypeRef | None) -> bool:
    if type_ref is None:
        return False
    simple = type_ref.simple_name
    return simple.endswith("Logger") or simple == "Log"


def is_noise(member: Member, matcher: AnnotationMatcher) -> bool:
    """
    엔티티 필드 목록에서 제외할 멤버인지 판별한다.

    제외 대상:
    - serialVersionUID, LOG, LOGGER
    - 전부 대문자이고 '_'를 포함하는 이름 (상수)
    - 로거 타입 (…Logger, Log)
    - @Transient, static/transient 수정자
    - 관계 어노테이션이 붙은 멤버 (관계 레코드로 따로 보고됨)
    """
    name = member.name
    if name in _NOISE_NAMES:
        return True
    if "_" in name and name.isupper():
        return True
    if is_logger_type(member.declared_type):
        return True
    if "static" in member.modifiers or "transient" in member.modifiers:
        return True
    if member.element.has_annotation("Transient", matcher):
        return True
    return member.element.has_any(RELATION_KINDS, matcher)
