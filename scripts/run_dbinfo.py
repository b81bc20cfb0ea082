"""DB 메타데이터 추출 실행 스크립트.

Java 저장소 수집 → 분류 → JSON 직렬화 전체 과정을 실행한다.

사용법:
    1. .env에 DBINFO_JAVA_PROJECT_PATH (분석 대상 저장소 경로)를 설정하고
    2. 터미널에서: python scripts/run_dbinfo.py
"""

import sys
from collections import Counter
from pathlib import Path

# 프로젝트 루트를 sys.path에 추가
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from rich.console import Console

from dbinfo.config import Settings
from dbinfo.log import configure_logging
from dbinfo.output.writer import write_documents
from dbinfo.runner import ENTITIES_FILE, INTERACTIONS_FILE, RELATIONSHIPS_FILE, DbInfoRunner

console = Console()


def main() -> int:
    settings = Settings()
    configure_logging(settings.verbose, settings.log_file)
    console.rule("[bold blue]JPA 메타데이터 추출")
    console.print(f"  분석 대상: {settings.java_project_path.resolve()}")

    runner = DbInfoRunner(settings)

    # 1. 소스 수집
    console.print("\n[1/3] Java 소스를 파싱합니다...")
    model = runner.collect()
    if model is None:
        console.print("[red]Java 소스 루트(src/main/java, src/java)를 찾지 못했습니다.[/red]")
        return 1
    console.print(f"  타입 수: [green]{len(model.types)}[/green]")

    # 2. 분류
    console.print("\n[2/3] 엔티티 / 관계 / DB 호출을 분류합니다...")
    documents = runner.classify(model)
    interactions = documents[INTERACTIONS_FILE]
    console.print(f"  엔티티: [green]{len(documents[ENTITIES_FILE].entities)}[/green]")
    console.print(f"  관계: [green]{len(documents[RELATIONSHIPS_FILE].relationships)}[/green]")
    console.print(f"  리포지토리: [green]{len(interactions.repositories)}[/green]")
    console.print(f"  트랜잭션 지점: [green]{len(interactions.transactional_sites)}[/green]")
    console.print(f"  DB 호출: [green]{len(interactions.interactions)}[/green]")

    # 호출 종류별 통계
    for kind, count in Counter(i.kind for i in interactions.interactions).most_common():
        console.print(f"    {kind:12}: {count}")

    # 3. 직렬화
    console.print("\n[3/3] JSON 파일을 씁니다...")
    for path in write_documents(settings.output_dir, documents):
        console.print(f"  {path}")

    console.rule("[bold green]추출 완료")
    return 0


if __name__ == "__main__":
    sys.exit(main())
