"""
JPA 관계 추출 모듈.

@Entity 클래스의 관계 어노테이션(@OneToOne, @OneToMany, @ManyToOne, @ManyToMany)이
붙은 멤버마다 RelationRecord 하나를 만든다.

대상 엔티티 해석 (먼저 성공한 것 사용):
1. 관계 어노테이션의 targetEntity 클래스 리터럴
2. 멤버 선언 타입의 첫 번째 제네릭 인수 (List<LineItem> → LineItem)
3. 멤버 선언 타입 자체

소유 측(owningSide)은 mappedBy가 없거나 공백일 때 true.
cascade/fetch/optional/orphanRemoval은 속성이 없으면 기본값을 채우지 않고 null로 둔다.
"""

from __future__ import annotations

import logging
from typing import Sequence

from dbinfo.classify.entities import CLASS_KINDS, is_excluded_type
from dbinfo.classify.markers import DEFAULT_MATCHER, RELATION_KINDS, AnnotationMatcher
from dbinfo.classify.members import Member, collect_members, detect_access_mode
from dbinfo.decoding.annotation_values import (
    AnnotationValue,
    ClassLiteral,
    as_bool,
    as_nested_list,
    as_string,
    as_text,
    as_text_list,
)
from dbinfo.errors import building
from dbinfo.models import (
    Annotation,
    JoinColumnRecord,
    JoinTableRecord,
    RelationRecord,
    SourceModel,
    TypeElement,
)

logger = logging.getLogger(__name__)


class RelationshipExtractor:
    """관계 레코드 추출기."""

    def __init__(
        self,
        matcher: AnnotationMatcher | None = None,
        excluded_type_suffixes: Sequence[str] = (),
    ):
        self.matcher = matcher or DEFAULT_MATCHER
        self.excluded_type_suffixes = tuple(excluded_type_suffixes)

    def extract(self, model: SourceModel) -> list[RelationRecord]:
        records: list[RelationRecord] = []
        for type_el in model.types:
            if type_el.kind not in CLASS_KINDS:
                continue
            # 관계는 @Entity에서만 추출한다 (@Embeddable, @MappedSuperclass 제외)
            if not type_el.has_annotation("Entity", self.matcher):
                continue
            if is_excluded_type(type_el, self.excluded_type_suffixes):
                continue

            mode = detect_access_mode(type_el, self.matcher)
            for member in collect_members(type_el, mode):
                if "static" in member.modifiers:
                    continue
                kind = member.element.first_marker(RELATION_KINDS, self.matcher)
                if kind is None:
                    continue
                with building(f"{type_el.qualified_name}#{member.name}"):
                    records.append(self._build_relation(type_el, member, kind))

        logger.info("JPA relationships detected: %d", len(records))
        return records

    def _build_relation(self, type_el: TypeElement, member: Member, kind: str) -> RelationRecord:
        element = member.element

        def attr(key: str) -> AnnotationValue | None:
            return element.annotation_value(kind, key, self.matcher)

        mapped_by = as_string(attr("mappedBy"))
        return RelationRecord(
            source=type_el.qualified_name,
            kind=kind,
            target=self.resolve_target(member, attr("targetEntity")),
            owning_side=mapped_by is None or not mapped_by.strip(),
            mapped_by=mapped_by,
            cascade=as_text_list(attr("cascade")),
            fetch=as_text(attr("fetch")),
            optional=as_bool(attr("optional")),
            orphan_removal=as_bool(attr("orphanRemoval")),
            join_column=self._join_column(element.find_annotation("JoinColumn", self.matcher)),
            join_table=self._join_table(element.find_annotation("JoinTable", self.matcher)),
        )

    @staticmethod
    def resolve_target(member: Member, target_entity: AnnotationValue | None) -> str | None:
        """대상 엔티티 타입 이름을 결정한다. 아무것도 알 수 없으면 None."""
        if isinstance(target_entity, ClassLiteral) and target_entity.type_name:
            return target_entity.type_name
        declared = member.declared_type
        if declared is None:
            return None
        if declared.arguments:
            return declared.arguments[0].best_name
        return declared.best_name

    @staticmethod
    def _join_column(annotation: Annotation | None) -> JoinColumnRecord | None:
        if annotation is None:
            return None
        return JoinColumnRecord(
            name=as_text(annotation.value("name")),
            referenced_column_name=as_text(annotation.value("referencedColumnName")),
        )

    def _join_table(self, annotation: Annotation | None) -> JoinTableRecord | None:
        if annotation is None:
            return None
        return JoinTableRecord(
            name=as_text(annotation.value("name")),
            join_columns=self._join_column_list(annotation.value("joinColumns")),
            inverse_join_columns=self._join_column_list(annotation.value("inverseJoinColumns")),
        )

    @staticmethod
    def _join_column_list(value: AnnotationValue | None) -> list[JoinColumnRecord] | None:
        """
        joinColumns 배열의 각 @JoinColumn에서 name/referencedColumnName을 읽는다.

        속성이 없으면 None, 단일 @JoinColumn이면 원소 하나짜리 리스트.
        """
        nested = as_nested_list(value)
        if nested is None:
            return None
        return [
            JoinColumnRecord(
                name=item.string_attribute("name"),
                referenced_column_name=item.string_attribute("referencedColumnName"),
            )
            for item in nested
        ]
