"""Tests for dataset quality checks."""

from __future__ import annotations

import datetime as dt

from seasonal_backtest.data.market_data import MarketDataset
from seasonal_backtest.data.verify import DataVerifier
from seasonal_backtest.ingestion.price_csv import SKIP_BAD_DATE, SKIP_BAD_NUMBER

DIRTY_CSV = """code,date,open,high,low,close
A,2024/01/02,10,11,9,10
A,2024/01/02,10,11,9,10
A,2024/01/20,10,9,11,10
A,2024/01/21,-1,12,8,13
B,2024/01/03,5,6,4,5
B,2024/13/01,5,6,4,5
B,2024/01/04,x,6,4,5
"""


def _verifier() -> DataVerifier:
    return DataVerifier(MarketDataset.from_text(DIRTY_CSV))


class TestDataVerifier:
    def test_symbol_statistics(self):
        stats = _verifier().get_symbol_statistics()

        assert list(stats["symbol_code"]) == ["A", "B"]
        assert list(stats["record_count"]) == [4, 1]
        assert stats.loc[0, "min_date"] == dt.date(2024, 1, 2)

    def test_statistics_unknown_symbol(self):
        assert _verifier().get_symbol_statistics("Z").empty

    def test_duplicates(self):
        dupes = _verifier().check_duplicates()

        assert len(dupes) == 1
        assert dupes.loc[0, "symbol_code"] == "A"
        assert dupes.loc[0, "count"] == 2

    def test_invalid_prices(self):
        report = _verifier().check_invalid_prices()

        assert report["non_positive_prices"] == 1
        assert report["high_less_than_low"] == 1
        # 2024/01/20 close 10 outside [11, 9] and 2024/01/21 close 13 above high 12
        assert report["close_out_of_range"] == 2

    def test_date_gaps(self):
        gaps = _verifier().find_date_gaps("A", min_gap_days=5)

        assert len(gaps) == 1
        assert gaps[0]["gap_days"] == 18

    def test_skipped_row_summary(self):
        assert _verifier().skipped_row_summary() == {SKIP_BAD_DATE: 1, SKIP_BAD_NUMBER: 1}
