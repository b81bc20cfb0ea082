"""
결과 문서 작성 모듈.

레코드 문서를 인코딩 → 리포맷한 뒤 출력 디렉토리에 JSON 파일로 쓴다.
모든 텍스트를 메모리에서 완성한 다음에 파일 쓰기를 시작한다.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping

from pydantic import BaseModel

from dbinfo.errors import SerializationError
from dbinfo.output.json_encoder import encode
from dbinfo.output.json_reformatter import reformat

logger = logging.getLogger(__name__)


def render(document: BaseModel) -> str:
    """문서 모델을 들여쓰기된 JSON 텍스트로 변환한다."""
    return reformat(encode(document))


def write_documents(out_dir: Path, documents: Mapping[str, BaseModel]) -> list[Path]:
    """
    문서들을 out_dir 아래에 파일명별로 쓴다.

    Args:
        out_dir: 출력 디렉토리 (없으면 생성)
        documents: 파일명 → 문서 모델 (예: {"entities.json": EntitiesDocument(...)})

    Returns:
        작성된 파일 경로 리스트

    Raises:
        SerializationError: 디렉토리 생성 또는 파일 쓰기 실패
    """
    rendered = {name: render(doc) for name, doc in documents.items()}

    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise SerializationError(f"Cannot create output directory {out_dir}: {exc}") from exc

    written: list[Path] = []
    for name, text in rendered.items():
        path = out_dir / name
        try:
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise SerializationError(f"Cannot write {path}: {exc}") from exc
        logger.info("%s written: %s", name, path.resolve())
        written.append(path)
    return written
