"""
DB 상호작용 추출 모듈.

세 가지를 수집한다:
1. 리포지토리: 이름에 "Repository"가 들어간 타입을 상속/구현하거나 @Repository가 붙은 타입.
   호출되는 멤버가 없어도 목록에 포함된다.
2. 트랜잭션 지점: @Transactional이 붙은 타입("타입FQN")과 메서드("타입FQN#메서드").
   사전순 정렬, 중복 제거.
3. 호출 지점: 메서드 본문의 호출을 선언 타입의 패키지 접두사로 분류한다.
   JPA > Hibernate > SpringJDBC > JDBC 순서로 먼저 매칭된 종류를 사용하고,
   매칭되지 않지만 선언 타입 이름이 "Repository"로 끝나면 RepoCall로 분류한다.
"""

from __future__ import annotations

import logging
from typing import Mapping

from dbinfo.classify.markers import (
    DEFAULT_CALL_PREFIXES,
    DEFAULT_MATCHER,
    REPOSITORY_TOKEN,
    AnnotationMatcher,
)
from dbinfo.decoding.annotation_values import as_string, decode_value
from dbinfo.errors import building
from dbinfo.models import (
    CallExpression,
    DbInteractions,
    InteractionRecord,
    RepositoryRecord,
    SourceModel,
    TypeElement,
)

logger = logging.getLogger(__name__)


class DbInteractionExtractor:
    """
    리포지토리/트랜잭션 지점/DB API 호출 추출기.

    Args:
        matcher: 마커 어노테이션 판별기
        call_prefixes: 종류 → 패키지 접두사 목록 (삽입 순서가 우선순위)
    """

    def __init__(
        self,
        matcher: AnnotationMatcher | None = None,
        call_prefixes: Mapping[str, tuple[str, ...]] | None = None,
    ):
        self.matcher = matcher or DEFAULT_MATCHER
        self.call_prefixes = dict(DEFAULT_CALL_PREFIXES if call_prefixes is None else call_prefixes)

    def extract(self, model: SourceModel) -> DbInteractions:
        repositories: list[RepositoryRecord] = []
        for type_el in model.types:
            with building(type_el.qualified_name):
                repository = self.repository_of(type_el)
            if repository is not None:
                repositories.append(repository)

        result = DbInteractions(
            repositories=repositories,
            transactional_sites=self.transactional_sites(model),
            interactions=self.interactions(model),
        )
        logger.info(
            "Repositories: %d | Transactional sites: %d | Interactions: %d",
            len(result.repositories),
            len(result.transactional_sites),
            len(result.interactions),
        )
        return result

    def repository_of(self, type_el: TypeElement) -> RepositoryRecord | None:
        """타입이 리포지토리면 RepositoryRecord, 아니면 None."""
        supertypes = ([type_el.super_class] if type_el.super_class else []) + type_el.super_interfaces
        extends = [ref.best_name for ref in supertypes]

        extends_repository = any(REPOSITORY_TOKEN in name for name in extends)
        if not extends_repository and not type_el.has_annotation("Repository", self.matcher):
            return None

        return RepositoryRecord(
            name=type_el.qualified_name,
            kind="interface" if type_el.kind == "interface" else "class",
            extends_types=extends,
        )

    def transactional_sites(self, model: SourceModel) -> list[str]:
        sites: set[str] = set()
        for type_el in model.types:
            if type_el.has_annotation("Transactional", self.matcher):
                sites.add(type_el.qualified_name)
            for method in type_el.methods:
                if method.has_annotation("Transactional", self.matcher):
                    sites.add(f"{type_el.qualified_name}#{method.name}")
        return sorted(sites)

    def interactions(self, model: SourceModel) -> list[InteractionRecord]:
        records: list[InteractionRecord] = []
        for type_el in model.types:
            for method in type_el.methods:
                if not method.has_body:
                    continue
                site = f"{type_el.qualified_name}#{method.name}"
                for call in method.calls:
                    with building(site):
                        record = self.classify_call(site, call)
                    if record is not None:
                        records.append(record)
        return records

    def classify_kind(self, declaring_type: str | None) -> str | None:
        """선언 타입 FQN의 패키지 접두사로 호출 종류를 판별한다."""
        if not declaring_type:
            return None
        for kind, prefixes in self.call_prefixes.items():
            if declaring_type.startswith(tuple(prefixes)):
                return kind
        return None

    def classify_call(self, site: str, call: CallExpression) -> InteractionRecord | None:
        """
        호출 하나를 분류한다.

        선언 타입을 알 수 없거나 DB 관련 호출이 아니면 None.
        """
        declaring = call.declaring_type
        if not declaring:
            return None

        kind = self.classify_kind(declaring)
        if kind is None:
            # 리포지토리 인터페이스/클래스 직접 호출
            if declaring.rsplit(".", 1)[-1].endswith(REPOSITORY_TOKEN):
                return InteractionRecord(
                    site=site,
                    kind="RepoCall",
                    api=declaring,
                    method=call.member,
                    declaring_type=declaring,
                )
            return None

        sql = as_string(decode_value(call.first_argument)) if call.first_argument else None
        return InteractionRecord(
            site=site,
            kind=kind,
            api=declaring,
            method=call.member,
            declaring_type=declaring,
            sql_literal=sql,
        )
