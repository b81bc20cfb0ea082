"""
JSON 인코더 모듈.

레코드(pydantic 모델)를 공백 없는 compact JSON 문자열로 직렬화한다.
외부 JSON 라이브러리를 사용하지 않고 직접 문자열을 조립한다.

규칙:
- 모델 필드는 선언 순서대로, JSON 키는 alias(camelCase)를 사용
- None → null (없는 속성도 키는 항상 출력)
- 문자열은 백슬래시, 따옴표, U+0020 미만 제어 문자만 이스케이프
- 리스트는 저장된 순서 그대로
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel


def encode(value: Any) -> str:
    """값을 compact JSON 문자열로 변환한다."""
    out: list[str] = []
    _encode_into(value, out)
    return "".join(out)


# U+0020 미만 제어 문자 → JSON 이스케이프 (없는 문자는 \u00XX)
_CONTROL_ESCAPES = {"\n": "\\n", "\t": "\\t", "\r": "\\r", "\b": "\\b", "\f": "\\f"}


def escape(text: str) -> str:
    """백슬래시와 따옴표, 그리고 제어 문자를 이스케이프한다."""
    out: list[str] = []
    for c in text:
        if c == "\\":
            out.append("\\\\")
        elif c == '"':
            out.append('\\"')
        elif c < " ":
            out.append(_CONTROL_ESCAPES.get(c) or f"\\u{ord(c):04x}")
        else:
            out.append(c)
    return "".join(out)


def _encode_into(value: Any, out: list[str]) -> None:
    # bool은 int의 하위 타입이므로 int보다 먼저 검사한다
    if value is None:
        out.append("null")
    elif isinstance(value, bool):
        out.append("true" if value else "false")
    elif isinstance(value, int):
        out.append(str(value))
    elif isinstance(value, str):
        out.append('"' + escape(value) + '"')
    elif isinstance(value, BaseModel):
        fields = type(value).model_fields
        _encode_object(((info.alias or name, getattr(value, name)) for name, info in fields.items()), out)
    elif isinstance(value, Mapping):
        _encode_object(((str(k), v) for k, v in value.items()), out)
    elif isinstance(value, (list, tuple)):
        out.append("[")
        for i, item in enumerate(value):
            if i > 0:
                out.append(",")
            _encode_into(item, out)
        out.append("]")
    else:
        raise TypeError(f"Cannot encode value of type {type(value).__name__}")


def _encode_object(items, out: list[str]) -> None:
    out.append("{")
    for i, (key, item) in enumerate(items):
        if i > 0:
            out.append(",")
        out.append('"' + escape(key) + '":')
        _encode_into(item, out)
    out.append("}")
