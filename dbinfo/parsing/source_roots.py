"""
소스 루트 탐색 모듈.

저장소 루트에서 Java 소스 루트(src/main/java, src/java)를 찾는다.
루트 바로 아래에 없으면 제한된 깊이까지 내려가며 멀티 모듈 프로젝트의
하위 모듈 소스 루트를 모은다.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator

logger = logging.getLogger(__name__)

SOURCE_ROOT_CANDIDATES = (Path("src", "main", "java"), Path("src", "java"))

# 탐색하지 않는 디렉토리 (빌드 산출물, VCS 메타데이터)
_SKIP_DIRS = {".git", ".idea", ".gradle", "build", "target", "node_modules", "out"}


def discover_source_roots(repo: Path, max_depth: int = 4) -> list[Path]:
    """
    Java 소스 루트 디렉토리 목록을 반환한다.

    Args:
        repo: 저장소 루트
        max_depth: 하위 탐색 최대 깊이 (repo 자신이 0)

    Returns:
        중복이 제거된 소스 루트 리스트 (발견 순서 유지). 없으면 빈 리스트
    """
    roots = [repo / candidate for candidate in SOURCE_ROOT_CANDIDATES if (repo / candidate).is_dir()]
    if not roots:
        roots = list(_walk_for_roots(repo, max_depth))

    unique: list[Path] = []
    seen: set[Path] = set()
    for root in roots:
        key = root.resolve()
        if key in seen:
            continue
        seen.add(key)
        unique.append(root)

    logger.debug("Source roots under %s: %s", repo, [str(r) for r in unique])
    return unique


def _walk_for_roots(repo: Path, max_depth: int) -> Iterator[Path]:
    """경로가 후보 접미사로 끝나는 디렉토리를 깊이 제한 내에서 찾는다."""
    base_depth = len(repo.parts)
    for dirpath, dirnames, _ in os.walk(repo):
        current = Path(dirpath)
        depth = len(current.parts) - base_depth
        if any(current.parts[-len(c.parts):] == c.parts for c in SOURCE_ROOT_CANDIDATES):
            yield current
            # 소스 루트 아래에서는 더 내려가지 않는다
            dirnames.clear()
            continue
        if depth >= max_depth:
            dirnames.clear()
            continue
        dirnames[:] = sorted(d for d in dirnames if d not in _SKIP_DIRS)


def iter_java_files(roots: Iterable[Path]) -> Iterator[Path]:
    """소스 루트들 아래의 .java 파일을 루트 순서, 경로 정렬 순서로 나열한다."""
    for root in roots:
        yield from sorted(root.rglob("*.java"))
