"""
종목 메타데이터 CSV 파서 (Metadata Resolver).

[ 역할 ]
    참조 테이블 `code,name[,market[,industry[,weight]]]`을 읽어
    종목 코드 → 이름 / SymbolMetadata 매핑을 만든다.
    가격 파일에 함께 들어 있던 종목명(inline name)과 병합할 때는 참조 테이블이 우선.

[ 헤더 처리 ]
    첫 줄의 첫 컬럼이 코드 컬럼 라벨(股票代碼 / code)이면 헤더로 보고 건너뜀.
    그 외에는 첫 줄도 데이터로 처리.

[ 호출하는 곳 ]
    - backtest/batch.py::run_batch() (종목별 결과에 메타데이터 부착)
    - run_backtest.py (--names 옵션)
"""

import logging
from pathlib import Path
from typing import Optional

from seasonal_backtest.core.data_provider import SymbolMetadata
from seasonal_backtest.ingestion.csv_text import split_csv_line

logger = logging.getLogger("seasonal_backtest.ingestion")

CODE_HEADER_LABELS = ("股票代碼", "code")


def _data_lines(text: str) -> list[str]:
    if not text or not text.strip():
        return []
    lines = [line.rstrip("\r") for line in text.strip().split("\n")]
    # 첫 컬럼만 검사
    first_field = split_csv_line(lines[0])[0].lower()
    if first_field in CODE_HEADER_LABELS:
        return lines[1:]
    return lines


def _optional(parts: list[str], idx: int) -> Optional[str]:
    if idx < len(parts) and parts[idx]:
        return parts[idx]
    return None


def resolve_metadata(text: str) -> dict[str, SymbolMetadata]:
    """참조 테이블 → {code: SymbolMetadata}. 빈 테이블이면 빈 dict."""
    metadata: dict[str, SymbolMetadata] = {}
    for line in _data_lines(text):
        parts = split_csv_line(line)
        if len(parts) < 2:
            continue
        code = parts[0]
        if not code:
            continue

        # 비중 컬럼: 값이 있으면 지수 비중 종목, 컬럼 자체가 없으면 알 수 없음(None)
        is_weighted = bool(parts[4]) if len(parts) > 4 else None
        metadata[code] = SymbolMetadata(
            display_name=parts[1],
            market=_optional(parts, 2),
            industry=_optional(parts, 3),
            is_index_weighted=is_weighted,
        )

    logger.debug(f"메타데이터 {len(metadata)}개 종목 로드")
    return metadata


def resolve_names(text: str) -> dict[str, str]:
    """참조 테이블 → {code: name}."""
    return {code: meta.display_name for code, meta in resolve_metadata(text).items()}


def load_metadata_file(path: str | Path, encoding: str = "utf-8") -> dict[str, SymbolMetadata]:
    """메타데이터 CSV 파일 로드. BOM이 있으면 제거."""
    text = Path(path).read_text(encoding=encoding)
    return resolve_metadata(text.lstrip("\ufeff"))


def merge_metadata(
    reference: dict[str, SymbolMetadata],
    inline_names: dict[str, str],
) -> dict[str, SymbolMetadata]:
    """참조 테이블과 가격 파일 종목명을 병합.

    참조 테이블 항목이 있으면 그대로 사용하고 (이름이 비어 있을 때만 inline 이름으로 보충),
    참조 테이블에 없는 종목만 inline 이름으로 새 항목을 만든다.
    """
    merged = dict(reference)
    for code, name in inline_names.items():
        meta = merged.get(code)
        if meta is None:
            merged[code] = SymbolMetadata(display_name=name)
        elif not meta.display_name and name:
            merged[code] = SymbolMetadata(
                display_name=name,
                market=meta.market,
                industry=meta.industry,
                is_index_weighted=meta.is_index_weighted,
            )
    return merged
