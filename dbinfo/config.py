"""
설정 관리 모듈.

pydantic-settings를 사용하여 .env 파일과 환경변수에서 설정을 로드한다.

사용 예:
    settings = Settings()
    print(settings.java_project_path)
"""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    애플리케이션 전역 설정.

    .env 파일 또는 환경변수에서 값을 읽어온다.
    필드명을 대문자로 변환하고 DBINFO_ 접두사를 붙인 환경변수와 매칭된다.
    예: java_project_path → DBINFO_JAVA_PROJECT_PATH
    """

    # 분석 대상 Java 저장소의 루트 디렉토리
    java_project_path: Path = Path(".")

    # 결과 JSON 출력 디렉토리
    output_dir: Path = Path("out/db-info")

    # 소스 루트(src/main/java 등) 탐색 깊이
    source_scan_depth: int = 4

    # 분류 설정
    include_id_in_fields: bool = True                  # @Id 멤버도 fields에 포함
    excluded_type_suffixes: list[str] = []             # 예: ["DTO", "Dto"]
    annotation_suffix_fallback: bool = True            # FQN을 해석하지 못하면 이름 접미사로 매칭

    # 로깅
    verbose: bool = False                              # DEBUG 레벨 출력
    log_file: Path | None = None                       # 지정하면 파일에도 기록

    # pydantic-settings 설정: .env 파일 경로, 인코딩, 환경변수 접두사
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "DBINFO_"}
