"""
파이프라인 실행 모듈.

세 단계를 순서대로 실행한다 (단일 스레드, 동기):
    1. 수집: 소스 루트 탐색 → .java 파싱 → SourceModel
    2. 분류: 엔티티 / 관계 / DB 상호작용 레코드
    3. 직렬화: entities.json, relationships.json, db_interactions.json

사용 예:
    runner = DbInfoRunner(Settings(java_project_path=Path("../shop")))
    written = runner.run()
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel

from dbinfo.classify.entities import EntityExtractor
from dbinfo.classify.interactions import DbInteractionExtractor
from dbinfo.classify.markers import AnnotationMatcher
from dbinfo.classify.relationships import RelationshipExtractor
from dbinfo.config import Settings
from dbinfo.models import EntitiesDocument, RelationshipsDocument, SourceModel
from dbinfo.output.writer import write_documents
from dbinfo.parsing.model_builder import SourceModelBuilder
from dbinfo.parsing.source_roots import discover_source_roots, iter_java_files

logger = logging.getLogger(__name__)

ENTITIES_FILE = "entities.json"
RELATIONSHIPS_FILE = "relationships.json"
INTERACTIONS_FILE = "db_interactions.json"


class DbInfoRunner:
    """설정에 따라 수집 → 분류 → 직렬화를 실행한다."""

    def __init__(self, settings: Settings | None = None, builder: SourceModelBuilder | None = None):
        self.settings = settings or Settings()
        self.builder = builder or SourceModelBuilder()
        self.matcher = AnnotationMatcher(suffix_fallback=self.settings.annotation_suffix_fallback)

    def collect(self) -> SourceModel | None:
        """
        소스 루트 아래의 모든 .java 파일로 SourceModel을 만든다.

        Returns:
            SourceModel. 소스 루트를 찾지 못하면 None
        """
        repo = self.settings.java_project_path
        roots = discover_source_roots(repo, self.settings.source_scan_depth)
        if not roots:
            logger.error("No Java source roots (src/main/java, src/java) found under %s", repo)
            return None

        files = list(iter_java_files(roots))
        logger.info("Java files: %d (from %d source roots)", len(files), len(roots))
        return self.builder.build_from_files(files)

    def classify(self, model: SourceModel) -> dict[str, BaseModel]:
        """SourceModel을 분류하여 파일명 → 문서 매핑을 만든다."""
        suffixes = self.settings.excluded_type_suffixes
        entities = EntityExtractor(
            self.matcher,
            include_id_in_fields=self.settings.include_id_in_fields,
            excluded_type_suffixes=suffixes,
        ).extract(model)
        relationships = RelationshipExtractor(self.matcher, excluded_type_suffixes=suffixes).extract(model)
        interactions = DbInteractionExtractor(self.matcher).extract(model)

        return {
            ENTITIES_FILE: EntitiesDocument(entities=entities),
            RELATIONSHIPS_FILE: RelationshipsDocument(relationships=relationships),
            INTERACTIONS_FILE: interactions,
        }

    def run(self) -> list[Path]:
        """
        전체 파이프라인을 실행하고 작성된 파일 경로를 반환한다.

        소스 루트가 없으면 아무 파일도 쓰지 않고 빈 리스트를 반환한다.

        Raises:
            RecordBuildError: 레코드 생성 중 내부 불일치
            SerializationError: 출력 파일을 쓸 수 없음
        """
        model = self.collect()
        if model is None:
            return []
        documents = self.classify(model)
        return write_documents(self.settings.output_dir, documents)
