"""Tests for batch (whole-universe) backtests and metadata merging."""

from __future__ import annotations

import datetime as dt
import time

import pytest

from seasonal_backtest.backtest.batch import run_batch, scan_symbols
from seasonal_backtest.backtest.engine import BacktestEngine
from seasonal_backtest.backtest.simulator import PriceArrays, simulate, simulate_arrays
from seasonal_backtest.core.data_provider import PriceRecord, SymbolMetadata
from seasonal_backtest.core.strategy import StrategyConfig
from seasonal_backtest.data.market_data import MarketDataset


@pytest.fixture
def universe(monthly_series, make_record):
    """Symbols A and B interleaved by date, A with inline name."""
    a = [make_record("A", r.trading_date, r.close, name="Alpha") for r in monthly_series("A")]
    b = monthly_series("B")
    return sorted(a + b, key=lambda r: r.trading_date)


class TestScanSymbols:
    def test_order_and_names(self, universe):
        order, names = scan_symbols(universe)

        assert order == ["A", "B"]
        assert names == {"A": "Alpha"}

    def test_order_follows_input_not_date(self, make_record):
        series = [
            make_record("B", dt.date(2021, 1, 1), 1.0),
            make_record("A", dt.date(2020, 1, 1), 1.0),
        ]
        order, _ = scan_symbols(series)
        assert order == ["B", "A"]

    def test_first_non_empty_name_wins(self, make_record):
        series = [
            make_record("A", dt.date(2020, 1, 1), 1.0),
            make_record("A", dt.date(2020, 1, 2), 1.0, name="First"),
            make_record("A", dt.date(2020, 1, 3), 1.0, name="Second"),
        ]
        _, names = scan_symbols(series)
        assert names == {"A": "First"}


class TestSplitBySymbol:
    def test_each_symbol_sorted_by_date(self, make_record):
        series = [
            make_record("A", dt.date(2020, 3, 1), 3.0),
            make_record("B", dt.date(2020, 1, 1), 10.0),
            make_record("A", dt.date(2020, 1, 1), 1.0),
            make_record("A", dt.date(2020, 2, 1), 2.0),
        ]
        by_symbol = PriceArrays.split_by_symbol(series)

        assert sorted(by_symbol) == ["A", "B"]
        assert list(by_symbol["A"].closes) == [1.0, 2.0, 3.0]
        assert len(by_symbol["B"]) == 1

    def test_empty(self):
        assert PriceArrays.split_by_symbol([]) == {}

    def test_matches_single_symbol_simulation(self, monthly_series):
        shuffled = list(reversed(monthly_series("A") + monthly_series("B")))
        cfg = StrategyConfig(anchor_year=2019, entry_month=12, exit_month=1, stop_loss_pct=5)
        by_symbol = PriceArrays.split_by_symbol(shuffled)

        for code in ("A", "B"):
            expected = simulate([r for r in shuffled if r.symbol_code == code], cfg)
            assert simulate_arrays(by_symbol[code], cfg) == expected


class TestRunBatch:
    def test_requested_order_with_missing_symbol(self, universe):
        summaries = run_batch(universe, ["B", "A", "C"], StrategyConfig(anchor_year=2019))

        assert [s.symbol_code for s in summaries] == ["B", "A", "C"]
        assert summaries[0].stats.trade_count == 3
        assert summaries[1].stats.trade_count == 3
        assert summaries[2].stats.trade_count == 0
        assert summaries[2].stats.win_rate_pct == 0.0
        assert summaries[2].display_name == ""

    def test_natural_order_when_no_order_given(self, universe):
        summaries = run_batch(universe, [], StrategyConfig())
        assert [s.symbol_code for s in summaries] == ["A", "B"]

    def test_stats_match_single_symbol_path(self, universe):
        summaries = run_batch(universe, ["A"], StrategyConfig(anchor_year=2019))
        stats = summaries[0].stats

        assert stats.win_rate_pct == pytest.approx(100.0)
        assert stats.total_return_pct == pytest.approx(30.0)

    def test_reference_metadata_overrides_inline_name(self, universe):
        metadata = {
            "A": SymbolMetadata(display_name="台積電", market="上市", industry="半導體業", is_index_weighted=True),
        }
        summaries = run_batch(universe, ["A", "B"], StrategyConfig(), metadata)

        assert summaries[0].display_name == "台積電"
        assert summaries[0].market == "上市"
        assert summaries[0].industry == "半導體業"
        assert summaries[0].is_index_weighted is True
        assert summaries[1].market is None

    def test_inline_name_used_without_reference_entry(self, universe):
        summaries = run_batch(universe, ["A"], StrategyConfig(), {"B": SymbolMetadata(display_name="Beta")})
        assert summaries[0].display_name == "Alpha"

    def test_to_dict_is_flat(self, universe):
        row = run_batch(universe, ["A"], StrategyConfig())[0].to_dict()

        assert row["symbol_code"] == "A"
        assert row["trade_count"] == 3
        assert "stats" not in row

    def test_stop_loss_applies_to_every_symbol(self, make_record):
        series = []
        for code in ("A", "B"):
            series += [
                make_record(code, dt.date(2020, 1, 2), 100.0),
                make_record(code, dt.date(2020, 6, 1), 80.0, low=75.0),
                make_record(code, dt.date(2020, 12, 30), 120.0),
            ]
        summaries = run_batch(series, [], StrategyConfig(stop_loss_pct=20))

        for summary in summaries:
            assert summary.stats.total_return_pct == pytest.approx(-20.0)


class TestUniverseScale:
    """300 symbols x 10 years of weekly bars, recomputed per config change."""

    @pytest.fixture(scope="class")
    def engine(self):
        days = [dt.date(2010, 1, 4) + dt.timedelta(weeks=w) for w in range(522)]
        records = [
            PriceRecord(
                symbol_code=f"{1000 + i}",
                trading_date=day,
                trading_date_text=day.strftime("%Y/%m/%d"),
                open=100.0, high=101.0, low=99.0, close=100.0 + day.month,
            )
            for day in days
            for i in range(300)
        ]
        return BacktestEngine(MarketDataset(records, name="universe"))

    def test_config_changes_are_cheap(self, engine):
        engine.run_batch(StrategyConfig(anchor_year=2010, entry_month=1, exit_month=12))

        started = time.perf_counter()
        summaries = engine.run_batch(StrategyConfig(anchor_year=2010, entry_month=3, exit_month=9, stop_loss_pct=5))
        elapsed = time.perf_counter() - started

        assert len(summaries) == 300
        assert all(s.stats.trade_count == 10 for s in summaries)
        # entry close 103, exit close 109, lows never reach the stop
        assert summaries[0].stats.avg_profit_pct == pytest.approx(600 / 103)
        assert elapsed < 1.0
