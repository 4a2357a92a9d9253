"""
로깅 모듈.

[ 역할 ]
    seasonal_backtest 최상위 로거에 핸들러를 붙인다.
    ingestion / data / backtest 하위 로거("seasonal_backtest.<영역>")의 기록은
    모두 이 로거로 전달되므로 진입점에서 한 번만 호출하면 된다.

[ 핸들러 ]
    파일:  {log_dir}/{name}_{YYYYMMDD}.log, UTF-8. log_dir=None이면 만들지 않음
           (테스트, 일회성 실행)
    콘솔:  stdout. console=False면 만들지 않음
    이미 핸들러가 있으면 레벨만 갱신하고 중복 등록하지 않는다.

[ 기록 내용 ]
    INFO   데이터셋 로드 (레코드/종목/건너뛴 행 수), 매니페스트 파트, 백테스트 실행 요약
    DEBUG  건너뛴 행 하나하나, 메타데이터 로드 건수
    WARN   데이터가 없는 종목 조회

[ 호출하는 곳 ]
    - run_backtest.py (config.yaml의 log_level / log_dir)
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def log_file_path(log_dir: str | Path, name: str = "seasonal_backtest") -> Path:
    """오늘 날짜의 로그 파일 경로."""
    return Path(log_dir) / f"{name}_{datetime.now():%Y%m%d}.log"


def setup_logger(
    name: str = "seasonal_backtest",
    level: str = "INFO",
    log_dir: str | Path | None = "logs",
    console: bool = True,
) -> logging.Logger:
    """최상위 로거 설정. 재호출 시 레벨만 바꾸고 핸들러는 그대로 둔다."""
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = []

    if log_dir is not None:
        path = log_file_path(log_dir, name)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    if console:
        handlers.append(logging.StreamHandler(sys.stdout))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
