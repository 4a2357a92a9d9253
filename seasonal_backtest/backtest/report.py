"""
백테스트 결과 표 변환 모듈.

[ 역할 ]
    거래 목록 / 종목별 요약을 pandas DataFrame으로 변환하고
    정렬(랭킹), 필터링, CSV 저장을 담당. 화면 출력과 파일 내보내기의 공통 입력.

[ 정렬 기준 ]
    symbol_code, display_name, win_rate_pct(기본), total_return_pct,
    avg_profit_pct, trade_count

[ 호출하는 곳 ]
    - run_backtest.py (배치 결과 출력, --export)
"""

from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from seasonal_backtest.backtest.batch import SymbolSummary
from seasonal_backtest.data.trades import Trade

SORT_FIELDS = (
    "symbol_code",
    "display_name",
    "win_rate_pct",
    "total_return_pct",
    "avg_profit_pct",
    "trade_count",
)

TRADE_COLUMNS = [
    "year", "entry_date", "entry_price", "exit_date", "exit_price",
    "profit_pct", "profit_abs", "is_win", "holding_days", "stopped_out",
]

SUMMARY_COLUMNS = [
    "symbol_code", "display_name", "market", "industry", "is_index_weighted",
    "trade_count", "wins", "losses", "win_rate_pct", "avg_profit_pct",
    "total_return_pct", "best_trade_pct", "worst_trade_pct", "sharpe_ratio",
]


def trades_to_frame(trades: Sequence[Trade]) -> pd.DataFrame:
    """거래 목록 → DataFrame (연도 순)."""
    rows = [t.to_dict() for t in trades]
    return pd.DataFrame(rows, columns=TRADE_COLUMNS)


def summaries_to_frame(summaries: Sequence[SymbolSummary]) -> pd.DataFrame:
    """종목별 요약 → DataFrame (입력 순서 유지)."""
    rows = [s.to_dict() for s in summaries]
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def rank_summaries(
    frame: pd.DataFrame,
    sort_by: str = "win_rate_pct",
    descending: bool = True,
) -> pd.DataFrame:
    """정렬 기준으로 순위표 생성. 동률이면 원래 순서 유지.

    Raises:
        ValueError: 지원하지 않는 정렬 기준
    """
    if sort_by not in SORT_FIELDS:
        raise ValueError(f"알 수 없는 정렬 기준: '{sort_by}'. 사용 가능: {', '.join(SORT_FIELDS)}")

    if sort_by in ("symbol_code", "display_name"):
        key = frame[sort_by].fillna("").astype(str)
        order = key.sort_values(ascending=not descending, kind="mergesort").index
    else:
        order = frame[sort_by].sort_values(ascending=not descending, kind="mergesort").index
    return frame.loc[order].reset_index(drop=True)


def filter_summaries(
    frame: pd.DataFrame,
    search: Optional[str] = None,
    min_win_rate: float = 0.0,
    market: Optional[str] = None,
    industry: Optional[str] = None,
    index_weighted_only: bool = False,
) -> pd.DataFrame:
    """조건에 맞는 종목만 남김.

    Args:
        search: 종목 코드 또는 종목명 부분 일치 (대소문자 무시)
        min_win_rate: 최소 승률 (%), 0이면 필터 없음
        market: 시장 일치
        industry: 업종 일치
        index_weighted_only: 지수 비중 종목만
    """
    mask = pd.Series(True, index=frame.index)

    if search:
        term = search.lower()
        codes = frame["symbol_code"].fillna("").astype(str).str.lower()
        names = frame["display_name"].fillna("").astype(str).str.lower()
        mask &= codes.str.contains(term, regex=False) | names.str.contains(term, regex=False)

    if min_win_rate > 0:
        mask &= frame["win_rate_pct"] >= min_win_rate

    if market:
        mask &= frame["market"] == market

    if industry:
        mask &= frame["industry"] == industry

    if index_weighted_only:
        mask &= frame["is_index_weighted"].eq(True)

    return frame[mask].reset_index(drop=True)


def export_csv(frame: pd.DataFrame, path: str | Path) -> Path:
    """DataFrame을 CSV로 저장 (엑셀 호환 UTF-8 BOM)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(path, index=False, encoding="utf-8-sig")
    return path
