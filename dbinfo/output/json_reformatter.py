"""
JSON 리포매터 모듈.

compact JSON을 한 번의 순회로 들여쓰기된 텍스트로 바꾼다.
상태는 함수 지역 변수에만 있으므로 순수 함수(text → text)이다.

포맷 규칙:
- { [ 뒤: 줄바꿈 + 한 단계 깊은 들여쓰기
- } ] 앞: 줄바꿈 + 한 단계 얕은 들여쓰기
- , 뒤: 줄바꿈 + 현재 들여쓰기
- : 뒤: 공백 한 칸
- 문자열 밖의 기존 공백 문자는 버린다
- 문자열 안의 내용은 구조 문자라도 건드리지 않는다

예:
    reformat('{"a":[1,2]}')
    # {
    #   "a": [
    #     1,
    #     2
    #   ]
    # }
"""

from __future__ import annotations

from dbinfo.decoding.scanner import scan_string_literal

INDENT = "  "


def reformat(text: str) -> str:
    """
    compact JSON 텍스트를 들여쓰기된 텍스트로 변환한다.

    Args:
        text: 유효한 JSON 텍스트

    Returns:
        들여쓰기된 JSON 텍스트. 빈 입력은 그대로 반환
    """
    if not text or not text.strip():
        return text

    out: list[str] = []
    depth = 0
    i = 0
    length = len(text)
    while i < length:
        c = text[i]
        if c == '"':
            # 문자열 토큰은 이스케이프를 고려하여 통째로 복사
            scanned = scan_string_literal(text, i)
            if scanned is None:
                # 닫히지 않은 문자열: 나머지를 그대로 붙인다
                out.append(text[i:])
                break
            end = scanned[1]
            out.append(text[i:end])
            i = end
            continue

        if c in "{[":
            depth += 1
            out.append(c + "\n" + INDENT * depth)
        elif c in "}]":
            depth = max(0, depth - 1)
            out.append("\n" + INDENT * depth + c)
        elif c == ",":
            out.append(",\n" + INDENT * depth)
        elif c == ":":
            out.append(": ")
        elif not c.isspace():
            out.append(c)
        i += 1

    return "".join(out)
