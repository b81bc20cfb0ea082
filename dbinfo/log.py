"""로깅 설정 모듈. 모듈 로거는 logging.getLogger(__name__)으로 "dbinfo" 계층 아래에 만든다."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "dbinfo"


def configure_logging(verbose: bool = False, log_file: Path | None = None) -> logging.Logger:
    """
    "dbinfo" 로거에 콘솔 핸들러(와 선택적으로 파일 핸들러)를 설치한다.

    여러 번 호출해도 핸들러가 중복되지 않는다.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter("[%(name)s] %(levelname)s %(message)s"))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(file_handler)
    return logger
