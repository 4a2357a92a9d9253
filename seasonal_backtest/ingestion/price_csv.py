"""
가격 CSV 파서 (Ingestor).

[ 역할 ]
    컬럼 구성이 제각각인 CSV 텍스트를 PriceRecord 목록으로 변환.
    잘못된 행은 예외 없이 건너뛰며, 건너뛴 사유는 ParseResult.skipped로 제공.

[ 컬럼 레이아웃 감지 순서 ]
    1. 첫 줄(헤더)을 소문자로 바꿔 키워드 매칭 (영문/중문)
         code  ← stock, id, 代碼, 代號, code
         name  ← name, 名稱, 股票名稱
         date  ← date, 日期, 時間, time
         open/high/low/close ← open/開盤, high/最高, low/最低, close/收盤
    2. date/open/close 중 하나라도 못 찾으면 첫 데이터 행의 모양으로 추정
         5컬럼                  → [date, open, high, low, close] (코드/이름 없음)
         7컬럼 이상, 0번이 날짜  → [date, code, name, open, high, low, close, ...]
         7컬럼 이상, 그 외       → [code, date, ?, open, high, low, close, ...]
    3. 코드 컬럼을 여전히 못 찾았고 6컬럼 이상이면 날짜 옆 컬럼을 코드로 간주

[ 출력 ]
    전체 데이터를 날짜 오름차순으로 재정렬 (종목별 그룹은 유지되지 않음).
    종목별로 다루려면 data/market_data.py 또는 backtest/batch.py에서 다시 그룹핑.

[ 호출하는 곳 ]
    - data/market_data.py::MarketDataset.from_text()
    - scripts/verify_data.py (건너뛴 행 진단)
"""

import logging
from collections import Counter
from dataclasses import dataclass, field, replace
from typing import Optional

from seasonal_backtest.core.data_provider import PriceRecord
from seasonal_backtest.ingestion.csv_text import (
    looks_like_date,
    parse_date,
    parse_number,
    split_csv_line,
    strip_time,
)

logger = logging.getLogger("seasonal_backtest.ingestion")

UNKNOWN_SYMBOL = "Unknown"

# 헤더 키워드 (부분 문자열 매칭, 먼저 매칭된 컬럼 사용)
HEADER_KEYWORDS: dict[str, tuple[str, ...]] = {
    "code": ("stock", "id", "代碼", "代號", "code"),
    "name": ("name", "名稱", "股票名稱"),
    "date": ("date", "日期", "時間", "time"),
    "open": ("open", "開盤"),
    "high": ("high", "最高"),
    "low": ("low", "最低"),
    "close": ("close", "收盤"),
}

# 건너뛴 행 사유
SKIP_TOO_FEW_COLUMNS = "too_few_columns"
SKIP_BAD_DATE = "bad_date"
SKIP_BAD_NUMBER = "bad_number"
SKIP_UNRESOLVED_LAYOUT = "unresolved_layout"


@dataclass(frozen=True)
class ColumnLayout:
    """감지된 컬럼 인덱스. None이면 해당 컬럼 없음."""
    code: Optional[int] = None
    name: Optional[int] = None
    date: Optional[int] = None
    open: Optional[int] = None
    high: Optional[int] = None
    low: Optional[int] = None
    close: Optional[int] = None
    detected_by: str = "header"  # header / five_column / date_first / code_first

    @property
    def is_resolved(self) -> bool:
        """날짜/시가/종가 컬럼을 모두 찾았는지."""
        return None not in (self.date, self.open, self.close)

    @property
    def required_length(self) -> int:
        """행이 가져야 할 최소 필드 수."""
        indices = [i for i in (self.date, self.open, self.high, self.low, self.close) if i is not None]
        return max(indices) + 1 if indices else 0


@dataclass(frozen=True)
class SkippedRow:
    """파싱하지 못한 행. line_number는 1부터 시작하는 원본 줄 번호."""
    line_number: int
    reason: str
    text: str


@dataclass
class ParseResult:
    """parse_prices_with_diagnostics()의 반환값."""
    records: list[PriceRecord] = field(default_factory=list)
    layout: ColumnLayout = field(default_factory=ColumnLayout)
    skipped: list[SkippedRow] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    def skip_counts(self) -> dict[str, int]:
        """사유별 건너뛴 행 수."""
        return dict(Counter(row.reason for row in self.skipped))


def _find_column(header: list[str], keywords: tuple[str, ...]) -> Optional[int]:
    for idx, col in enumerate(header):
        if any(k in col for k in keywords):
            return idx
    return None


def detect_layout(lines: list[str]) -> ColumnLayout:
    """헤더 키워드 → 위치 기반 추정 순으로 컬럼 레이아웃 결정."""
    header = split_csv_line(lines[0].lower())
    layout = ColumnLayout(**{
        key: _find_column(header, keywords) for key, keywords in HEADER_KEYWORDS.items()
    })

    sample = split_csv_line(lines[1]) if len(lines) > 1 else split_csv_line(lines[0])

    # ─── 위치 기반 추정 ───────────────────────────────────────────────────
    if not layout.is_resolved:
        if len(sample) == 5:
            layout = ColumnLayout(
                code=None, name=None,
                date=0, open=1, high=2, low=3, close=4,
                detected_by="five_column",
            )
        elif len(sample) >= 7:
            if looks_like_date(sample[0]):
                layout = ColumnLayout(
                    date=0, code=1, name=2, open=3, high=4, low=5, close=6,
                    detected_by="date_first",
                )
            else:
                # 2번 컬럼은 의미 불명. 이름 컬럼은 헤더에서 찾은 값을 유지
                layout = replace(
                    layout,
                    code=0, date=1, open=3, high=4, low=5, close=6,
                    detected_by="code_first",
                )

    # ─── 코드 컬럼 보정: 날짜 옆 컬럼 ─────────────────────────────────────
    if layout.code is None and len(sample) >= 6:
        layout = replace(layout, code=1 if layout.date == 0 else 0)

    return layout


def _first_line_is_data(line: str, layout: ColumnLayout) -> bool:
    """헤더 없는 파일인지 판단: 첫 줄의 날짜 컬럼이 날짜로 파싱되면 데이터 행."""
    if layout.date is None:
        return False
    row = split_csv_line(line)
    if len(row) < layout.required_length:
        return False
    try:
        parse_date(row[layout.date])
    except ValueError:
        return False
    return True


def _field(row: list[str], idx: Optional[int]) -> str:
    if idx is None or idx >= len(row):
        return ""
    return row[idx]


def _parse_row(row: list[str], layout: ColumnLayout) -> PriceRecord:
    """필드 목록 → PriceRecord. 날짜/숫자 오류 시 ValueError (사유는 args[0])."""
    date_text = strip_time(row[layout.date])
    try:
        trading_date = parse_date(date_text)
    except ValueError:
        raise ValueError(SKIP_BAD_DATE) from None

    try:
        open_ = parse_number(row[layout.open])
        close = parse_number(row[layout.close])
        # 고가/저가 컬럼이 없으면 종가로 대체
        high = parse_number(row[layout.high]) if layout.high is not None else close
        low = parse_number(row[layout.low]) if layout.low is not None else close
    except ValueError:
        raise ValueError(SKIP_BAD_NUMBER) from None

    code = _field(row, layout.code) or UNKNOWN_SYMBOL
    name = _field(row, layout.name) or None

    return PriceRecord(
        symbol_code=code,
        display_name=name,
        trading_date=trading_date,
        trading_date_text=date_text,
        open=open_,
        high=high,
        low=low,
        close=close,
    )


def parse_prices_with_diagnostics(text: str) -> ParseResult:
    """CSV 텍스트 파싱 + 건너뛴 행 진단. 어떤 입력에도 예외를 던지지 않는다."""
    lines = [line.rstrip("\r") for line in text.strip().split("\n")] if text else []
    if not lines or not lines[0].strip():
        return ParseResult()

    layout = detect_layout(lines)
    result = ParseResult(layout=layout)

    start = 0 if _first_line_is_data(lines[0], layout) else 1

    for line_number, line in enumerate(lines[start:], start=start + 1):
        if not line.strip():
            continue

        if not layout.is_resolved:
            result.skipped.append(SkippedRow(line_number, SKIP_UNRESOLVED_LAYOUT, line))
            continue

        row = split_csv_line(line)
        if len(row) < layout.required_length:
            result.skipped.append(SkippedRow(line_number, SKIP_TOO_FEW_COLUMNS, line))
            continue

        try:
            record = _parse_row(row, layout)
        except ValueError as e:
            result.skipped.append(SkippedRow(line_number, str(e), line))
            logger.debug(f"{line_number}행 건너뜀 ({e}): {line[:80]}")
            continue

        result.records.append(record)

    # 전체 데이터 날짜 오름차순 (같은 날짜는 원래 순서 유지)
    result.records.sort(key=lambda r: r.trading_date)

    if result.skipped:
        logger.info(
            f"가격 CSV 파싱: 레코드 {len(result.records)}건, "
            f"건너뛴 행 {result.skipped_count}건 {result.skip_counts()}"
        )
    else:
        logger.debug(f"가격 CSV 파싱: 레코드 {len(result.records)}건 (레이아웃: {layout.detected_by})")
    return result


def parse_prices(text: str) -> list[PriceRecord]:
    """CSV 텍스트 → 날짜순 PriceRecord 목록. 잘못된 행은 조용히 제외."""
    return parse_prices_with_diagnostics(text).records
