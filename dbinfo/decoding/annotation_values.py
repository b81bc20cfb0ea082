"""
어노테이션 속성값 디코더 모듈.

소스 모델은 어노테이션 속성값을 구조화된 값이 아니라 소스 코드 원문 그대로
넘겨준다. 예: '"invoice"', 'false', '{CascadeType.PERSIST, CascadeType.MERGE}',
'Invoice.class', '{@JoinColumn(name = "a"), @JoinColumn(name = "b")}'

이 모듈은 기대하는 타입을 미리 알지 못한 채, 텍스트의 문법만 보고
타입이 있는 값(AnnotationValue)으로 복원한다.

디코딩 규칙 (적용 순서):
1. 문자열 리터럴 하나로 이루어진 텍스트 → StringValue
2. true/false (대소문자 무시) → BoolValue
3. 정수 리터럴 → IntValue (0으로 시작하면 8진수)
4. ".class"로 끝남 → ClassLiteral
5. { ... }로 감싸짐 → ArrayValue (최상위 콤마 기준 분할 후 재귀 디코딩)
6. @로 시작 → NestedAnnotation
7. 그 외 → EnumConstant (해석 불가 텍스트도 여기로 떨어진다)

디코딩은 순수 함수이며 실패하지 않는다. 모든 입력은 정확히 하나의 값으로 매핑된다.
"""

from __future__ import annotations

import re
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from dbinfo.decoding.scanner import is_string_literal, scan_string_literal

# 정수 리터럴: 부호, 밑줄 구분자, long 접미사(L) 허용
_INT_RE = re.compile(r"[+-]?\d(?:_*\d)*[lL]?")
# 0으로 시작하는 여러 자리 정수는 8진수 (08, 09는 Java 정수가 아니다)
_OCTAL_RE = re.compile(r"0[0-7]+")
# 중첩 어노테이션 본문의 "key = value" 한 쌍
_PAIR_RE = re.compile(r"([A-Za-z_$][\w$]*)\s*=(?!=)\s*(.*)", re.DOTALL)
_CLASS_SUFFIX = ".class"


class StringValue(BaseModel):
    kind: Literal["string"] = "string"
    value: str


class BoolValue(BaseModel):
    kind: Literal["bool"] = "bool"
    value: bool


class IntValue(BaseModel):
    kind: Literal["int"] = "int"
    value: int


class EnumConstant(BaseModel):
    """enum 상수 또는 해석할 수 없는 불투명 토큰 (예: "FetchType.LAZY")."""

    kind: Literal["enum"] = "enum"
    token: str


class ClassLiteral(BaseModel):
    """클래스 리터럴. type_name은 ".class"를 뗀 이름 (예: "Invoice")."""

    kind: Literal["class"] = "class"
    type_name: str


class ArrayValue(BaseModel):
    kind: Literal["array"] = "array"
    items: list[AnnotationValue] = []


class NestedAnnotation(BaseModel):
    """
    속성값 안에 인라인으로 들어간 어노테이션 (예: @JoinColumn(name = "x")).

    text는 인라인 원문 전체, attributes는 최상위 key=value 쌍의 원문 값이다.
    """

    kind: Literal["annotation"] = "annotation"
    type_name: str
    text: str
    attributes: dict[str, str] = {}

    def string_attribute(self, key: str) -> str | None:
        """인라인 원문에서 key = "..." 형태의 문자열 속성을 찾는다."""
        return find_named_string(self.text, key)


AnnotationValue = Annotated[
    Union[StringValue, BoolValue, IntValue, EnumConstant, ClassLiteral, ArrayValue, NestedAnnotation],
    Field(discriminator="kind"),
]

ArrayValue.model_rebuild()


def decode_value(text: str | None) -> AnnotationValue:
    """
    속성값 원문 하나를 AnnotationValue로 디코딩한다.

    Args:
        text: 어노테이션 속성값의 소스 원문

    Returns:
        디코딩된 값. 어떤 규칙에도 맞지 않으면 원문 토큰을 담은 EnumConstant
    """
    raw = (text or "").strip()

    # 규칙 1: 문자열 리터럴
    if raw.startswith('"') and is_string_literal(raw):
        scanned = scan_string_literal(raw, 0)
        if scanned is not None:
            return StringValue(value=scanned[0])

    # 규칙 2: 불리언
    lowered = raw.lower()
    if lowered == "true" or lowered == "false":
        return BoolValue(value=lowered == "true")

    # 규칙 3: 정수
    if _INT_RE.fullmatch(raw):
        number = raw.rstrip("lL").replace("_", "")
        digits = number.lstrip("+-")
        if len(digits) == 1 or not digits.startswith("0"):
            return IntValue(value=int(number))
        if _OCTAL_RE.fullmatch(digits):
            return IntValue(value=int(number, 8))

    # 규칙 4: 클래스 리터럴
    if raw.endswith(_CLASS_SUFFIX):
        return ClassLiteral(type_name=raw[: -len(_CLASS_SUFFIX)].strip())

    # 규칙 5: 배열 (중첩 중괄호는 깊이 카운터로 처리)
    if raw.startswith("{") and raw.endswith("}"):
        body = raw[1:-1].strip()
        items = [decode_value(part) for part in split_top_level(body) if part]
        return ArrayValue(items=items)

    # 규칙 6: 중첩 어노테이션
    if raw.startswith("@"):
        return _decode_nested(raw)

    # 규칙 7: enum 상수 / 불투명 토큰
    return EnumConstant(token=raw)


def split_top_level(body: str) -> list[str]:
    """
    배열 본문을 깊이 0의 콤마 기준으로 분할한다.

    { } 와 ( ) 깊이를 함께 센다. 따라서
    "@JoinColumn(name = \"a\", referencedColumnName = \"id\"), @JoinColumn(name = \"b\")"
    처럼 중첩 어노테이션 내부의 콤마에서는 나뉘지 않는다.
    문자열/문자 리터럴 안의 콤마와 괄호도 무시한다.

    Returns:
        앞뒤 공백을 제거한 조각 리스트 (빈 본문이면 [""])
    """
    parts: list[str] = []
    depth = 0
    start = 0
    i = 0
    while i < len(body):
        c = body[i]
        if c == '"':
            scanned = scan_string_literal(body, i)
            if scanned is not None:
                i = scanned[1]
                continue
        elif c == "'":
            end = _char_literal_end(body, i)
            if end is not None:
                i = end
                continue
        elif c in "{(":
            depth += 1
        elif c in "})":
            depth -= 1
        elif c == "," and depth == 0:
            parts.append(body[start:i].strip())
            start = i + 1
        i += 1
    parts.append(body[start:].strip())
    return parts


def find_named_string(text: str, key: str) -> str | None:
    """
    인라인 텍스트에서 `key = "..."`를 찾아 문자열 값을 반환한다.

    키의 순서나 다른 키의 존재 여부와 무관하게 동작한다.
    key는 식별자 경계에서만 매칭된다 (name은 tableName에 매칭되지 않음).
    """
    pattern = re.compile(r"(?<![\w$])" + re.escape(key) + r"\s*=(?!=)\s*")
    for match in pattern.finditer(text):
        scanned = scan_string_literal(text, match.end())
        if scanned is not None:
            return scanned[0]
    return None


# ── 값 변환 헬퍼 ──────────────────────────────────────────


def as_text(value: AnnotationValue | None) -> str | None:
    """값을 문자열로 본다. 문자열/enum 토큰/클래스 리터럴만 해당하고 나머지는 None."""
    if isinstance(value, StringValue):
        return value.value
    if isinstance(value, EnumConstant):
        return value.token
    if isinstance(value, ClassLiteral):
        return value.type_name
    return None


def as_string(value: AnnotationValue | None) -> str | None:
    """문자열 리터럴인 경우에만 값을 반환한다."""
    return value.value if isinstance(value, StringValue) else None


def as_bool(value: AnnotationValue | None) -> bool | None:
    return value.value if isinstance(value, BoolValue) else None


def as_int(value: AnnotationValue | None) -> int | None:
    return value.value if isinstance(value, IntValue) else None


def as_text_list(value: AnnotationValue | None) -> list[str] | None:
    """
    값을 문자열 리스트로 본다.

    배열이면 각 원소의 텍스트, 단일 값이면 원소 하나짜리 리스트.
    텍스트로 볼 수 없는 원소는 건너뛴다.
    """
    if value is None:
        return None
    if isinstance(value, ArrayValue):
        texts = [as_text(item) for item in value.items]
        return [t for t in texts if t is not None]
    text = as_text(value)
    return [text] if text is not None else None


def as_nested_list(value: AnnotationValue | None) -> list[NestedAnnotation] | None:
    """중첩 어노테이션 배열을 리스트로 본다. 단일 중첩 어노테이션은 원소 하나짜리 리스트."""
    if value is None:
        return None
    if isinstance(value, ArrayValue):
        return [item for item in value.items if isinstance(item, NestedAnnotation)]
    if isinstance(value, NestedAnnotation):
        return [value]
    return None


def _decode_nested(raw: str) -> NestedAnnotation:
    """@Name(...) 원문을 NestedAnnotation으로 변환한다."""
    paren = raw.find("(")
    if paren < 0:
        return NestedAnnotation(type_name=raw[1:].strip(), text=raw)

    type_name = raw[1:paren].strip()
    end = raw.rfind(")")
    body = raw[paren + 1:end] if end > paren else raw[paren + 1:]

    attributes: dict[str, str] = {}
    for part in split_top_level(body):
        if not part:
            continue
        match = _PAIR_RE.match(part)
        if match:
            attributes[match.group(1)] = match.group(2).strip()
        else:
            # @Foo("x") 처럼 이름 없는 단일 인수
            attributes.setdefault("value", part)
    return NestedAnnotation(type_name=type_name, text=raw, attributes=attributes)


def _char_literal_end(text: str, start: int) -> int | None:
    """'x' 또는 '\\x' 문자 리터럴의 끝 다음 위치. 형식이 아니면 None."""
    i = start + 1
    if i < len(text) and text[i] == "\\":
        i += 2
    else:
        i += 1
    if i < len(text) and text[i] == "'":
        return i + 1
    return None
