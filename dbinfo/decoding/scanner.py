"""
문자열 리터럴 스캐너 모듈.

어노테이션 속성값의 원문 텍스트에서 따옴표로 감싼 문자열 토큰을 인식하고,
이스케이프를 해제한 내용을 돌려준다.
Java 텍스트 블록(삼중 따옴표로 감싼 여러 줄 문자열)도 문자열 리터럴로 인식한다.

디코더(annotation_values.py)와 JSON 리포매터가 공통으로 사용한다.

사용 예:
    scan_string_literal('name = "invoice"', 7)
    # → ("invoice", 16)
"""

from __future__ import annotations

# 한 글자 이스케이프 → 실제 문자 매핑 (Java 문자열 리터럴 기준)
_SIMPLE_ESCAPES = {
    '"': '"',
    "'": "'",
    "\\": "\\",
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "s": " ",
    "\n": "",  # 텍스트 블록의 줄 잇기
}

_TEXT_BLOCK_DELIMITER = '"""'


def scan_string_literal(text: str, start: int) -> tuple[str, int] | None:
    """
    start 위치에서 시작하는 문자열 리터럴을 읽는다.

    따옴표(")로 시작하지 않거나, 닫는 따옴표 없이 텍스트가 끝나면
    None을 반환한다. 어떤 입력에도 예외를 던지지 않는다.

    Args:
        text: 스캔할 전체 텍스트
        start: 여는 따옴표가 있어야 할 위치

    Returns:
        (이스케이프 해제된 내용, 닫는 따옴표 다음 위치) 튜플 또는 None
    """
    if start < 0 or start >= len(text) or text[start] != '"':
        return None

    if text.startswith(_TEXT_BLOCK_DELIMITER, start):
        body_start = _text_block_body_start(text, start + len(_TEXT_BLOCK_DELIMITER))
        if body_start is not None:
            return _scan_text_block(text, body_start)

    chars: list[str] = []
    i = start + 1
    while i < len(text):
        c = text[i]
        if c == '"':
            return "".join(chars), i + 1
        if c == "\\":
            escaped = _read_escape(text, i)
            # 백슬래시 뒤에 문자가 없으면 미종결 문자열
            if escaped is None:
                return None
            chars.append(escaped[0])
            i = escaped[1]
            continue
        chars.append(c)
        i += 1

    # 닫는 따옴표를 만나지 못함
    return None


def is_string_literal(text: str) -> bool:
    """텍스트 전체가 정확히 하나의 문자열 리터럴인지 확인한다."""
    result = scan_string_literal(text, 0)
    return result is not None and result[1] == len(text)


def _read_escape(text: str, i: int) -> tuple[str, int] | None:
    """text[i]의 백슬래시에서 시작하는 이스케이프를 (문자, 다음 위치)로 읽는다."""
    if i + 1 >= len(text):
        return None
    nxt = text[i + 1]
    if nxt == "u":
        decoded = _decode_unicode_escape(text, i + 2)
        if decoded is not None:
            return decoded, i + 6
    if nxt == "\r":
        # \r\n 줄 잇기
        return "", (i + 3 if text.startswith("\n", i + 2) else i + 2)
    return _SIMPLE_ESCAPES.get(nxt, nxt), i + 2


def _text_block_body_start(text: str, pos: int) -> int | None:
    """여는 삼중 따옴표 뒤에 공백과 줄바꿈만 있으면 본문 시작 위치, 아니면 None."""
    while pos < len(text) and text[pos] in " \t\f":
        pos += 1
    if text.startswith("\r\n", pos):
        return pos + 2
    if pos < len(text) and text[pos] in "\r\n":
        return pos + 1
    return None


def _scan_text_block(text: str, body_start: int) -> tuple[str, int] | None:
    """텍스트 블록 본문을 닫는 삼중 따옴표까지 읽는다. 공통 들여쓰기를 걷어낸 뒤 이스케이프를 푼다."""
    i = body_start
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text.startswith(_TEXT_BLOCK_DELIMITER, i):
            body = _strip_incidental_indent(text[body_start:i])
            return _unescape(body), i + len(_TEXT_BLOCK_DELIMITER)
        i += 1
    return None


def _strip_incidental_indent(body: str) -> str:
    """
    모든 줄의 공통 들여쓰기와 줄 끝 공백을 제거한다.

    공백뿐인 줄은 들여쓰기 계산에서 빠지지만, 닫는 구분자가 놓인 마지막 줄은 항상 포함된다.
    """
    lines = body.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    significant = [line for line in lines[:-1] if line.strip()] + [lines[-1]]
    indent = min(len(line) - len(line.lstrip(" \t")) for line in significant)
    return "\n".join(line[indent:].rstrip(" \t") for line in lines)


def _unescape(body: str) -> str:
    chars: list[str] = []
    i = 0
    while i < len(body):
        if body[i] == "\\":
            escaped = _read_escape(body, i)
            if escaped is None:
                chars.append("\\")
                break
            chars.append(escaped[0])
            i = escaped[1]
            continue
        chars.append(body[i])
        i += 1
    return "".join(chars)


def _decode_unicode_escape(text: str, pos: int) -> str | None:
    """\\uXXXX 형태의 16진수 4자리를 문자로 변환한다. 형식이 틀리면 None."""
    digits = text[pos:pos + 4]
    if len(digits) != 4:
        return None
    try:
        return chr(int(digits, 16))
    except ValueError:
        return None
