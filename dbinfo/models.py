"""
데이터 모델 모듈.

두 종류의 모델을 정의한다.

1. 소스 모델 (입력): tree-sitter AST에서 추출한 Java 타입/필드/메서드의 읽기 전용 스냅샷.
   어노테이션 속성값은 디코딩되지 않은 소스 원문 그대로 보관한다.
2. 레코드 (출력): 분류기가 만드는 엔티티/관계/DB 상호작용 레코드.
   JSON 키는 camelCase (alias)로 직렬화된다.

데이터 흐름:
    Java 소스 →[파싱]→ SourceModel →[분류]→ 레코드 →[인코딩]→ JSON
"""

from __future__ import annotations

from typing import Iterable, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from dbinfo.classify.markers import DEFAULT_MATCHER, AnnotationMatcher
from dbinfo.decoding.annotation_values import AnnotationValue, decode_value

# ── 소스 모델 ──────────────────────────────────────────────


class TypeRef(BaseModel):
    """
    타입 참조.

    name은 소스에 작성된 이름(제네릭 인수 제외, 예: "List"),
    qualified_name은 해석된 FQN (예: "java.util.List"). 해석 실패 시 None.
    arguments는 제네릭 타입 인수 (예: List<Invoice> → [Invoice]).
    """

    name: str
    qualified_name: str | None = None
    arguments: list[TypeRef] = []

    @property
    def best_name(self) -> str:
        """해석된 FQN이 있으면 FQN, 없으면 작성된 이름."""
        return self.qualified_name or self.name

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]


class Annotation(BaseModel):
    """
    어노테이션 인스턴스 하나.

    attributes는 속성 키 → 값 원문 매핑이다 (예: {"name": '"invoice"'}).
    이름 없는 단일 인수(@Table("x"))는 "value" 키로 저장된다.
    """

    name: str                              # 작성된 이름 (예: "Column" 또는 "javax.persistence.Column")
    qualified_name: str | None = None      # import로 해석된 FQN
    attributes: dict[str, str] = {}

    def value(self, key: str) -> AnnotationValue | None:
        """속성 원문을 디코딩한다. 속성이 없으면 None."""
        raw = self.attributes.get(key)
        if raw is None:
            return None
        return decode_value(raw)


class CallExpression(BaseModel):
    """메서드 본문 안의 메서드 호출 하나."""

    declaring_type: str | None = None      # 호출 대상 메서드를 선언한 타입 (해석 실패 시 None)
    member: str                            # 호출된 메서드명
    first_argument: str | None = None      # 첫 번째 인수가 리터럴이면 그 원문


class Annotatable(BaseModel):
    """
    어노테이션을 가질 수 있는 프로그램 요소의 공통 기능.

    타입/필드/메서드가 모두 이 클래스를 상속하므로
    "@X가 붙어 있는가?" 판단 로직은 여기 한 곳에만 존재한다.
    """

    annotations: list[Annotation] = []

    def find_annotation(self, marker: str, matcher: AnnotationMatcher | None = None) -> Annotation | None:
        """marker에 해당하는 첫 번째 어노테이션을 반환한다."""
        matcher = matcher or DEFAULT_MATCHER
        for annotation in self.annotations:
            if matcher.matches(annotation, marker):
                return annotation
        return None

    def has_annotation(self, marker: str, matcher: AnnotationMatcher | None = None) -> bool:
        return self.find_annotation(marker, matcher) is not None

    def has_any(self, markers: Iterable[str], matcher: AnnotationMatcher | None = None) -> bool:
        return any(self.has_annotation(m, matcher) for m in markers)

    def first_marker(self, markers: Iterable[str], matcher: AnnotationMatcher | None = None) -> str | None:
        """markers를 우선순위 순으로 검사하여 처음 붙어 있는 마커 이름을 반환한다."""
        for marker in markers:
            if self.has_annotation(marker, matcher):
                return marker
        return None

    def annotation_value(
        self,
        marker: str,
        key: str,
        matcher: AnnotationMatcher | None = None,
    ) -> AnnotationValue | None:
        """
        marker 어노테이션의 key 속성을 디코딩하여 반환한다.

        같은 마커가 여러 개 붙어 있으면 key를 가진 첫 번째 것을 사용한다.
        """
        matcher = matcher or DEFAULT_MATCHER
        for annotation in self.annotations:
            if matcher.matches(annotation, marker) and key in annotation.attributes:
                return annotation.value(key)
        return None


class FieldElement(Annotatable):
    name: str
    declared_type: TypeRef | None = None
    modifiers: list[str] = []


class Parameter(BaseModel):
    name: str
    declared_type: TypeRef | None = None


class MethodElement(Annotatable):
    name: str
    return_type: TypeRef | None = None     # 생성자는 None, void 메서드는 name="void"
    parameters: list[Parameter] = []
    modifiers: list[str] = []
    calls: list[CallExpression] = []
    has_body: bool = False


class TypeElement(Annotatable):
    """클래스/인터페이스/enum/record/어노테이션 타입 선언."""

    kind: Literal["class", "interface", "enum", "record", "annotation"]
    qualified_name: str
    simple_name: str
    package_name: str | None = None
    modifiers: list[str] = []
    super_class: TypeRef | None = None
    super_interfaces: list[TypeRef] = []
    fields: list[FieldElement] = []
    methods: list[MethodElement] = []
    file_path: str | None = None


class SourceModel(BaseModel):
    """분석 대상 코드베이스 전체의 스냅샷. types는 열거 순서를 유지한다."""

    types: list[TypeElement] = []


# ── 레코드 (출력) ──────────────────────────────────────────


class Record(BaseModel):
    """출력 레코드 공통 설정: 파이썬 필드는 snake_case, JSON 키는 camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FieldRecord(Record):
    name: str
    java_type: str | None = Field(default=None, alias="type")
    column: str | None = None
    nullable: bool | None = None
    length: int | None = None
    unique: bool | None = None


class EntityRecord(Record):
    name: str
    kind: Literal["Entity", "Embeddable", "MappedSuperclass"]
    table: str | None = None
    id_field: str | None = None
    fields: list[FieldRecord] = []


class JoinColumnRecord(Record):
    name: str | None = None
    referenced_column_name: str | None = None


class JoinTableRecord(Record):
    name: str | None = None
    join_columns: list[JoinColumnRecord] | None = None
    inverse_join_columns: list[JoinColumnRecord] | None = None


class RelationRecord(Record):
    source: str
    kind: Literal["OneToOne", "OneToMany", "ManyToOne", "ManyToMany"]
    target: str | None = None
    owning_side: bool
    mapped_by: str | None = None
    cascade: list[str] | None = None
    fetch: str | None = None
    optional: bool | None = None
    orphan_removal: bool | None = None
    join_column: JoinColumnRecord | None = None
    join_table: JoinTableRecord | None = None

    @model_validator(mode="after")
    def _check_owning_side(self) -> RelationRecord:
        # owningSide ⇔ mappedBy가 없거나 공백
        expected = self.mapped_by is None or not self.mapped_by.strip()
        if self.owning_side != expected:
            raise ValueError(
                f"owningSide={self.owning_side} contradicts mappedBy={self.mapped_by!r}"
            )
        return self


class RepositoryRecord(Record):
    name: str
    kind: Literal["interface", "class"]
    extends_types: list[str] = Field(default_factory=list, alias="extends")


class InteractionRecord(Record):
    site: str                              # "타입FQN#메서드명"
    kind: Literal["JPA", "Hibernate", "SpringJDBC", "JDBC", "RepoCall"]
    api: str
    method: str
    declaring_type: str
    sql_literal: str | None = None
    notes: str | None = None


class EntitiesDocument(Record):
    entities: list[EntityRecord] = []


class RelationshipsDocument(Record):
    relationships: list[RelationRecord] = []


class DbInteractions(Record):
    repositories: list[RepositoryRecord] = []
    transactional_sites: list[str] = []
    interactions: list[InteractionRecord] = []
