"""
시즌 매매 시뮬레이터.

[ 역할 ]
    한 종목의 일봉 데이터 + StrategyConfig → 연도별 거래(Trade) 목록.
    순수 함수. 같은 입력이면 항상 같은 결과.

[ 연도별 시뮬레이션 (anchor_year 이상인 연도, 오름차순) ]
    1. 매수: 해당 연도 entry_month의 첫 거래일 종가. 없으면 그 해는 거래 없음
    2. 매도 연도: exit_month >= entry_month면 같은 해, 아니면 다음 해
    3. 보유 구간: 매수일 ~ 매도 연도 exit_month 말일
    4. 손절 (stop_loss_pct > 0): 보유 구간을 날짜순으로 보며
       저가 <= 매수가 × (1 - stop_loss_pct/100)인 첫 날에 그 손절가로 청산.
       예정된 매도보다 우선
    5. 손절이 없으면: 매도 연도 exit_month의 마지막 거래일 종가로 청산.
       매도 월 데이터가 없으면 그 해는 거래 없음

    연도끼리는 독립. 손절이 다음 해 거래에 영향을 주지 않는다.

[ 구간 탐색 ]
    날짜순 배열의 월 키(year * 12 + month - 1)는 오름차순이므로
    매수 월 시작 / 매도 월 끝 위치를 np.searchsorted로 찾는다.
    DataFrame은 데이터셋당 한 번만 만들고, 배치 모드에서는 종목별 위치 인덱스로 나눈다.

[ 호출하는 곳 ]
    - backtest/engine.py::BacktestEngine.run_single()
    - backtest/batch.py::run_batch() (PriceArrays.split_by_symbol)
"""

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from seasonal_backtest.core.data_provider import PriceRecord
from seasonal_backtest.core.strategy import StrategyConfig
from seasonal_backtest.data.trades import NOTIONAL, Trade

logger = logging.getLogger("seasonal_backtest.backtest")

_FRAME_COLUMNS = ["symbol_code", "date", "date_text", "year", "month", "low", "close"]


def records_to_frame(series: Sequence[PriceRecord]) -> pd.DataFrame:
    """시뮬레이션용 DataFrame. 날짜순 정렬 (같은 날짜는 입력 순서 유지)."""
    frame = pd.DataFrame(
        [
            (r.symbol_code, r.trading_date, r.trading_date_text, r.year, r.month, r.low, r.close)
            for r in series
        ],
        columns=_FRAME_COLUMNS,
    )
    return frame.sort_values("date", kind="mergesort").reset_index(drop=True)


def _month_key(year: int, month: int) -> int:
    return year * 12 + month - 1


@dataclass(frozen=True, eq=False)
class PriceArrays:
    """날짜순으로 정렬된 시뮬레이션 입력 (컬럼별 numpy 배열)."""
    dates: np.ndarray        # datetime.date (object)
    date_texts: np.ndarray
    years: np.ndarray
    month_keys: np.ndarray   # year * 12 + month - 1, 오름차순
    lows: np.ndarray
    closes: np.ndarray

    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> "PriceArrays":
        years = frame["year"].to_numpy(dtype=np.int64)
        months = frame["month"].to_numpy(dtype=np.int64)
        return cls(
            dates=frame["date"].to_numpy(dtype=object),
            date_texts=frame["date_text"].to_numpy(dtype=object),
            years=years,
            month_keys=years * 12 + months - 1,
            lows=frame["low"].to_numpy(dtype=float),
            closes=frame["close"].to_numpy(dtype=float),
        )

    @classmethod
    def from_records(cls, series: Sequence[PriceRecord]) -> "PriceArrays":
        return cls.from_frame(records_to_frame(series))

    @classmethod
    def split_by_symbol(cls, series: Sequence[PriceRecord]) -> dict[str, "PriceArrays"]:
        """전체 레코드로 DataFrame을 한 번 만들고 종목별 배열로 나눈다."""
        frame = records_to_frame(series)
        if frame.empty:
            return {}
        arrays = cls.from_frame(frame)
        # 날짜순 frame의 위치 인덱스이므로 종목 안에서도 날짜순
        positions = frame.groupby("symbol_code", sort=False).indices
        return {code: arrays.take(idx) for code, idx in positions.items()}

    def __len__(self) -> int:
        return len(self.month_keys)

    def take(self, positions: np.ndarray) -> "PriceArrays":
        return PriceArrays(
            dates=self.dates[positions],
            date_texts=self.date_texts[positions],
            years=self.years[positions],
            month_keys=self.month_keys[positions],
            lows=self.lows[positions],
            closes=self.closes[positions],
        )


def _simulate_year(arrays: PriceArrays, year: int, cfg: StrategyConfig) -> Trade | None:
    """한 해의 거래. 조건을 만족하지 못하면 None."""
    keys = arrays.month_keys
    entry_key = _month_key(year, cfg.entry_month)
    start = int(np.searchsorted(keys, entry_key, side="left"))
    if start == len(keys) or keys[start] != entry_key:
        return None

    entry_price = float(arrays.closes[start])
    if entry_price <= 0:
        logger.debug(f"{year}년: 매수가 {entry_price}로 거래 불가")
        return None

    exit_year = cfg.exit_year_for(year)
    exit_key = _month_key(exit_year, cfg.exit_month)
    # 보유 구간 [start, end): 매수일 ~ 매도 월 마지막 레코드
    end = int(np.searchsorted(keys, exit_key, side="right"))

    exit_idx = None
    exit_price = 0.0
    stopped_out = False

    # ─── 손절 체크 (예정된 매도보다 우선) ──────────────────────────────────
    if cfg.stop_loss_enabled:
        stop_price = entry_price * (1 - cfg.stop_loss_pct / 100)
        hits = np.flatnonzero(arrays.lows[start:end] <= stop_price)
        if hits.size:
            exit_idx = start + int(hits[0])
            exit_price = stop_price
            stopped_out = True

    # ─── 예정된 매도: 매도 월 마지막 거래일 종가 ───────────────────────────
    if exit_idx is None:
        if keys[end - 1] != exit_key:
            return None
        exit_idx = end - 1
        exit_price = float(arrays.closes[exit_idx])

    entry_date = arrays.dates[start]
    exit_date = arrays.dates[exit_idx]
    profit_pct = (exit_price - entry_price) / entry_price * 100
    return Trade(
        year=year,
        entry_date=entry_date,
        entry_date_text=arrays.date_texts[start],
        entry_price=entry_price,
        exit_date=exit_date,
        exit_date_text=arrays.date_texts[exit_idx],
        exit_price=exit_price,
        profit_pct=profit_pct,
        profit_abs=NOTIONAL * profit_pct / 100,
        holding_days=abs((exit_date - entry_date).days),
        stopped_out=stopped_out,
    )


def simulate_arrays(arrays: PriceArrays, cfg: StrategyConfig) -> list[Trade]:
    """PriceArrays 입력 버전. 배치 모드에서 종목마다 호출."""
    if len(arrays) == 0:
        return []

    trades: list[Trade] = []
    for year in np.unique(arrays.years):
        if year < cfg.anchor_year:
            continue
        trade = _simulate_year(arrays, int(year), cfg)
        if trade is not None:
            trades.append(trade)
    return trades


def simulate(series: Sequence[PriceRecord], cfg: StrategyConfig) -> list[Trade]:
    """한 종목의 연도별 거래 목록. 한 해에 최대 1건."""
    if not series:
        return []
    return simulate_arrays(PriceArrays.from_records(series), cfg)
