"""
마커 어노테이션 테이블 모듈.

분류기가 인식하는 어노테이션(@Entity, @Column, @Transactional 등)을
정규화된 이름(FQN) 테이블로 관리한다.

매칭 전략 (우선순위):
1. 어노테이션의 FQN이 테이블에 있으면 매칭
2. 작성된 이름 그대로가 테이블에 있으면 매칭 (예: @javax.persistence.Entity)
3. 접미사 폴백 (suffix_fallback=True이고 FQN을 해석하지 못했을 때만):
   작성된 이름이 마커와 같거나 ".마커"로 끝나면 매칭

3번은 import 해석이 실패한 경우를 위한 대체 수단이다.
"Column"이 "JoinColumn"에 매칭되지 않도록 '.' 경계에서만 비교한다.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping

if TYPE_CHECKING:
    from dbinfo.models import Annotation

_PERSISTENCE_PACKAGES = ("javax.persistence.", "jakarta.persistence.")

ENTITY_KINDS = ("Entity", "Embeddable", "MappedSuperclass")
RELATION_KINDS = ("OneToOne", "OneToMany", "ManyToOne", "ManyToMany")
# 이 중 하나가 접근자(getter)에 붙어 있으면 PROPERTY 접근 모드
MAPPING_MARKERS = ("Id", "EmbeddedId", "Column") + RELATION_KINDS
ID_MARKERS = ("Id", "EmbeddedId")


def _persistence(name: str) -> tuple[str, ...]:
    return tuple(pkg + name for pkg in _PERSISTENCE_PACKAGES)


DEFAULT_MARKERS: dict[str, tuple[str, ...]] = {
    "Entity": _persistence("Entity"),
    "Embeddable": _persistence("Embeddable"),
    "MappedSuperclass": _persistence("MappedSuperclass"),
    "Table": _persistence("Table"),
    "Id": _persistence("Id"),
    "EmbeddedId": _persistence("EmbeddedId"),
    "Column": _persistence("Column"),
    "Transient": _persistence("Transient") + ("org.springframework.data.annotation.Transient",),
    "OneToOne": _persistence("OneToOne"),
    "OneToMany": _persistence("OneToMany"),
    "ManyToOne": _persistence("ManyToOne"),
    "ManyToMany": _persistence("ManyToMany"),
    "JoinColumn": _persistence("JoinColumn"),
    "JoinTable": _persistence("JoinTable"),
    "Repository": ("org.springframework.stereotype.Repository",),
    "Transactional": (
        "org.springframework.transaction.annotation.Transactional",
        "javax.transaction.Transactional",
        "jakarta.transaction.Transactional",
    ),
}

# 호출 지점 분류: 선언 타입의 패키지 접두사 → 종류 (먼저 매칭된 것이 우선)
DEFAULT_CALL_PREFIXES: dict[str, tuple[str, ...]] = {
    "JPA": _PERSISTENCE_PACKAGES,
    "Hibernate": ("org.hibernate.",),
    "SpringJDBC": ("org.springframework.jdbc.core.",),
    "JDBC": ("java.sql.",),
}

REPOSITORY_TOKEN = "Repository"


class AnnotationMatcher:
    """
    어노테이션이 특정 마커에 해당하는지 판별한다.

    분류기의 모든 "이 요소에 @X가 붙어 있는가?" 질문은 이 클래스를 거친다.
    """

    def __init__(
        self,
        markers: Mapping[str, tuple[str, ...]] | None = None,
        suffix_fallback: bool = True,
    ):
        table = DEFAULT_MARKERS if markers is None else markers
        self.markers: dict[str, frozenset[str]] = {k: frozenset(v) for k, v in table.items()}
        self.suffix_fallback = suffix_fallback

    def matches(self, annotation: Annotation, marker: str) -> bool:
        """
        annotation이 marker에 해당하면 True.

        Args:
            annotation: 소스 모델의 어노테이션
            marker: 마커 이름 (예: "Column")
        """
        known = self.markers.get(marker, frozenset())
        if annotation.qualified_name and annotation.qualified_name in known:
            return True
        if annotation.name in known:
            return True
        # 해석된 FQN이 테이블에 없으면 다른 라이브러리의 동명 어노테이션이다
        if not self.suffix_fallback or annotation.qualified_name:
            return False
        name = annotation.name
        return name == marker or name.endswith("." + marker)


DEFAULT_MATCHER = AnnotationMatcher()
