"""Shared test fixtures."""

from __future__ import annotations

import datetime as dt

import pytest

from seasonal_backtest.core.data_provider import PriceRecord
from seasonal_backtest.data.trades import NOTIONAL, Trade


def _record(
    code: str,
    day: dt.date,
    close: float,
    low: float | None = None,
    name: str | None = None,
) -> PriceRecord:
    low = close if low is None else low
    return PriceRecord(
        symbol_code=code,
        display_name=name,
        trading_date=day,
        trading_date_text=day.strftime("%Y/%m/%d"),
        open=close,
        high=max(close, low),
        low=low,
        close=close,
    )


@pytest.fixture
def make_record():
    """Factory: make_record(code, date, close, low=None, name=None)."""
    return _record


@pytest.fixture
def make_trade():
    """Factory for trades where only profit_pct matters."""
    def factory(profit_pct: float, year: int = 2020) -> Trade:
        entry = dt.date(year, 1, 2)
        exit_ = dt.date(year, 12, 31)
        return Trade(
            year=year,
            entry_date=entry,
            entry_date_text=entry.isoformat(),
            entry_price=100.0,
            exit_date=exit_,
            exit_date_text=exit_.isoformat(),
            exit_price=100.0 * (1 + profit_pct / 100),
            profit_pct=profit_pct,
            profit_abs=NOTIONAL * profit_pct / 100,
            holding_days=(exit_ - entry).days,
        )
    return factory


@pytest.fixture
def monthly_series():
    """One record per month for 2019-2021. Close is 100 in January, 110 in December, 105 otherwise."""
    def factory(code: str = "2330", years: tuple[int, ...] = (2019, 2020, 2021)) -> list[PriceRecord]:
        records = []
        for year in years:
            for month in range(1, 13):
                close = 100.0 if month == 1 else 110.0 if month == 12 else 105.0
                records.append(_record(code, dt.date(year, month, 15), close))
        return records
    return factory


PRICE_CSV_ZH = """股票代碼,股票名稱,日期,開盤價,最高價,最低價,收盤價
2330,台積電,2024/01/02,590,593,589,593
2330,台積電,2024/01/03,584,585,578,578
2454,聯發科,2024/01/02,"1,000.00","1,010.00",990.00,"1,005.00"
"""


@pytest.fixture
def price_csv_zh() -> str:
    return PRICE_CSV_ZH
