"""
예외 정의 모듈.

속성값 형식 불일치(DecodeDegradation)나 타입 해석 실패(UnresolvedReference)는
예외가 아니다. 각각 null/불투명 값, 또는 가장 나은 이름으로 대체된다.

예외로 전파되는 것은 다음 두 가지뿐이다:
- RecordBuildError: 레코드 생성 중 예상치 못한 내부 불일치 (결함으로 간주, 실행 중단)
- SerializationError: 결과 파일을 쓸 수 없음 (치명적, 재시도 없음)
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator


class DbInfoError(RuntimeError):
    """dbinfo 파이프라인 예외의 공통 부모."""


class RecordBuildError(DbInfoError):
    """레코드를 만들다 실패한 요소를 식별하여 알린다."""

    def __init__(self, element: str, reason: str):
        super().__init__(f"Failed to build record for {element}: {reason}")
        self.element = element
        self.reason = reason


class SerializationError(DbInfoError):
    """출력 파일 쓰기 실패."""


@contextmanager
def building(element: str) -> Iterator[None]:
    """
    블록 안에서 발생한 예외를 RecordBuildError로 감싼다.

    사용 예:
        with building("com.example.Invoice"):
            record = build(...)
    """
    try:
        yield
    except DbInfoError:
        raise
    except Exception as exc:
        raise RecordBuildError(element, str(exc)) from exc
