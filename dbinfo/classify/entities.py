"""
JPA 엔티티 추출 모듈.

소스 모델에서 @Entity / @Embeddable / @MappedSuperclass 클래스를 찾아
EntityRecord로 변환한다.

출력 예 (entities.json):
    {"name": "com.example.Invoice", "kind": "Entity", "table": "invoice", "idField": "id",
     "fields": [{"name": "amount", "type": "java.math.BigDecimal", "column": null,
                 "nullable": false, "length": null, "unique": null}]}
"""

from __future__ import annotations

import logging
from typing import Sequence

from dbinfo.classify.markers import DEFAULT_MATCHER, ENTITY_KINDS, ID_MARKERS, AnnotationMatcher
from dbinfo.classify.members import Member, collect_members, detect_access_mode, is_noise
from dbinfo.decoding.annotation_values import as_bool, as_int, as_text
from dbinfo.errors import building
from dbinfo.models import EntityRecord, FieldRecord, SourceModel, TypeElement

logger = logging.getLogger(__name__)

# 엔티티가 될 수 있는 타입 종류
CLASS_KINDS = ("class", "record")


def is_excluded_type(type_el: TypeElement, excluded_suffixes: Sequence[str]) -> bool:
    """단순 이름이 제외 접미사(예: "DTO")로 끝나는 타입인지 확인한다."""
    return any(type_el.simple_name.endswith(suffix) for suffix in excluded_suffixes if suffix)


class EntityExtractor:
    """
    엔티티 레코드 추출기.

    Args:
        matcher: 마커 어노테이션 판별기
        include_id_in_fields: True면 식별자 멤버도 fields에 포함한다
        excluded_type_suffixes: 이 접미사로 끝나는 클래스는 건너뛴다
    """

    def __init__(
        self,
        matcher: AnnotationMatcher | None = None,
        include_id_in_fields: bool = True,
        excluded_type_suffixes: Sequence[str] = (),
    ):
        self.matcher = matcher or DEFAULT_MATCHER
        self.include_id_in_fields = include_id_in_fields
        self.excluded_type_suffixes = tuple(excluded_type_suffixes)

    def extract(self, model: SourceModel) -> list[EntityRecord]:
        """모델의 열거 순서대로 엔티티 레코드를 만든다. 어노테이션이 없는 타입은 건너뛴다."""
        records: list[EntityRecord] = []
        for type_el in model.types:
            if type_el.kind not in CLASS_KINDS:
                continue
            kind = self.entity_kind(type_el)
            if kind is None:
                continue
            if is_excluded_type(type_el, self.excluded_type_suffixes):
                logger.debug("Skipping excluded type %s", type_el.qualified_name)
                continue
            with building(type_el.qualified_name):
                records.append(self._build_entity(type_el, kind))

        logger.info("JPA entities detected: %d", len(records))
        return records

    def entity_kind(self, type_el: TypeElement) -> str | None:
        """Entity > Embeddable > MappedSuperclass 우선순위로 종류를 판별한다."""
        return type_el.first_marker(ENTITY_KINDS, self.matcher)

    def _build_entity(self, type_el: TypeElement, kind: str) -> EntityRecord:
        mode = detect_access_mode(type_el, self.matcher)
        members = collect_members(type_el, mode)

        # 식별자: @Id 또는 @EmbeddedId가 붙은 첫 번째 멤버
        id_member = next((m for m in members if m.element.has_any(ID_MARKERS, self.matcher)), None)
        id_field = id_member.name if id_member else None

        fields: list[FieldRecord] = []
        for member in members:
            if is_noise(member, self.matcher):
                continue
            if member is id_member and not self.include_id_in_fields:
                continue
            fields.append(self._build_field(member))

        logger.debug("%s: %s access, %d fields", type_el.qualified_name, mode, len(fields))
        return EntityRecord(
            name=type_el.qualified_name,
            kind=kind,
            table=as_text(type_el.annotation_value("Table", "name", self.matcher)),
            id_field=id_field,
            fields=fields,
        )

    def _build_field(self, member: Member) -> FieldRecord:
        """@Column 속성을 읽어 FieldRecord를 만든다. 형식이 맞지 않는 속성은 null."""
        element = member.element
        return FieldRecord(
            name=member.name,
            java_type=member.declared_type.best_name if member.declared_type else None,
            column=as_text(element.annotation_value("Column", "name", self.matcher)),
            nullable=as_bool(element.annotation_value("Column", "nullable", self.matcher)),
            length=as_int(element.annotation_value("Column", "length", self.matcher)),
            unique=as_bool(element.annotation_value("Column", "unique", self.matcher)),
        )
