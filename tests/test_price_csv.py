"""Tests for price CSV parsing and column layout detection."""

from __future__ import annotations

import datetime as dt

import pytest

from seasonal_backtest.ingestion.csv_text import parse_date, parse_number, split_csv_line
from seasonal_backtest.ingestion.price_csv import (
    SKIP_BAD_DATE,
    SKIP_BAD_NUMBER,
    SKIP_TOO_FEW_COLUMNS,
    SKIP_UNRESOLVED_LAYOUT,
    UNKNOWN_SYMBOL,
    parse_prices,
    parse_prices_with_diagnostics,
)


class TestSplitCsvLine:
    def test_plain(self):
        assert split_csv_line("a, b ,c") == ["a", "b", "c"]

    def test_quoted_comma_is_not_delimiter(self):
        assert split_csv_line('2330,"1,000.50",x') == ["2330", "1,000.50", "x"]

    def test_trailing_empty_field(self):
        assert split_csv_line("a,b,") == ["a", "b", ""]


class TestFieldParsers:
    def test_number_strips_quotes_and_commas(self):
        assert parse_number('"1,234.5"') == 1234.5

    def test_empty_number_is_zero(self):
        assert parse_number("") == 0.0

    def test_bad_number_raises(self):
        with pytest.raises(ValueError):
            parse_number("n/a")

    def test_nan_is_rejected(self):
        with pytest.raises(ValueError):
            parse_number("nan")

    def test_date_formats(self):
        assert parse_date("2024/1/5") == dt.date(2024, 1, 5)
        assert parse_date("2024-01-05") == dt.date(2024, 1, 5)

    def test_date_with_time_component(self):
        assert parse_date("2024/01/05 13:30:00") == dt.date(2024, 1, 5)

    def test_impossible_date_raises(self):
        with pytest.raises(ValueError):
            parse_date("2024/02/30")


class TestHeaderDetection:
    def test_chinese_header(self, price_csv_zh):
        result = parse_prices_with_diagnostics(price_csv_zh)
        layout = result.layout

        assert (layout.code, layout.name, layout.date) == (0, 1, 2)
        assert (layout.open, layout.high, layout.low, layout.close) == (3, 4, 5, 6)
        assert layout.detected_by == "header"
        assert len(result.records) == 3
        assert result.skipped == []

    def test_quoted_numbers_parsed(self, price_csv_zh):
        records = parse_prices(price_csv_zh)
        mtk = [r for r in records if r.symbol_code == "2454"][0]

        assert mtk.display_name == "聯發科"
        assert mtk.open == 1000.0
        assert mtk.close == 1005.0

    def test_english_header_without_code(self):
        text = "Date,Open,High,Low,Close\n2024-01-02,10,11,9,10.5\n2024-01-03,10.5,12,10,11\n"
        records = parse_prices(text)

        assert len(records) == 2
        assert all(r.symbol_code == UNKNOWN_SYMBOL for r in records)
        assert records[1].close == 11.0

    def test_header_is_case_insensitive(self):
        text = "CODE,DATE,OPEN,HIGH,LOW,CLOSE\nA,2024/01/02,1,2,0.5,1.5\n"
        records = parse_prices(text)

        assert records[0].symbol_code == "A"
        assert records[0].low == 0.5


class TestPositionalFallback:
    def test_headerless_five_columns(self):
        text = "2024/01/02,100,101,99,100.5\n2024/01/03,100.5,102,100,101\n"
        result = parse_prices_with_diagnostics(text)

        assert result.layout.detected_by == "five_column"
        # headerless: the first line is data too
        assert len(result.records) == 2
        assert result.records[0].symbol_code == UNKNOWN_SYMBOL
        assert result.records[0].close == 100.5

    def test_seven_columns_date_first(self):
        text = (
            "2024/01/05,2330,台積電,590,595,585,593\n"
            "2024/01/08,2330,台積電,593,596,590,594\n"
        )
        result = parse_prices_with_diagnostics(text)
        layout = result.layout

        assert layout.detected_by == "date_first"
        assert (layout.date, layout.code, layout.name) == (0, 1, 2)
        assert (layout.open, layout.high, layout.low, layout.close) == (3, 4, 5, 6)
        assert result.records[0].symbol_code == "2330"
        assert result.records[0].display_name == "台積電"
        assert result.records[0].close == 593.0

    def test_seven_columns_code_first(self):
        text = (
            "2330,2024/01/05,x,590,595,585,593\n"
            "2330,2024/01/08,x,593,596,590,594\n"
        )
        result = parse_prices_with_diagnostics(text)
        layout = result.layout

        assert layout.detected_by == "code_first"
        assert (layout.code, layout.date) == (0, 1)
        assert (layout.open, layout.high, layout.low, layout.close) == (3, 4, 5, 6)
        assert result.records[0].trading_date == dt.date(2024, 1, 5)
        assert result.records[0].low == 585.0

    def test_six_column_header_without_code_uses_column_after_date(self):
        text = "date,open,high,low,close,volume\n2024/01/02,10,11,9,10.5,5000\n"
        result = parse_prices_with_diagnostics(text)
        layout = result.layout

        assert layout.detected_by == "header"
        assert layout.code == 1
        assert result.records[0].symbol_code == "10"
        assert result.records[0].close == 10.5

    def test_six_column_header_date_not_first(self):
        text = "open,date,high,low,close,volume\n10,2024/01/02,11,9,10.5,5000\n"
        layout = parse_prices_with_diagnostics(text).layout
        assert layout.code == 0

    def test_eight_columns_code_first(self):
        text = (
            "2330,2024/01/05,x,590,595,585,593,21000\n"
            "2330,2024/01/08,x,593,596,590,594,18000\n"
        )
        result = parse_prices_with_diagnostics(text)
        layout = result.layout

        assert layout.detected_by == "code_first"
        assert (layout.code, layout.date, layout.close) == (0, 1, 6)
        assert len(result.records) == 2
        assert result.records[1].close == 594.0

    def test_eight_columns_date_first(self):
        text = "2024/01/05,2330,台積電,590,595,585,593,21000\n"
        result = parse_prices_with_diagnostics(text)

        assert result.layout.detected_by == "date_first"
        assert result.records[0].symbol_code == "2330"
        assert result.records[0].close == 593.0

    def test_unresolved_layout_skips_everything(self):
        text = "foo,bar,baz\n1,2,3\n4,5,6\n"
        result = parse_prices_with_diagnostics(text)

        assert result.records == []
        assert result.skip_counts() == {SKIP_UNRESOLVED_LAYOUT: 2}


class TestRowHandling:
    def test_output_sorted_by_date_across_symbols(self):
        text = (
            "code,date,open,high,low,close\n"
            "B,2024/03/01,1,1,1,1\n"
            "A,2024/01/01,1,1,1,1\n"
            "B,2024/02/01,1,1,1,1\n"
        )
        records = parse_prices(text)
        dates = [r.trading_date for r in records]

        assert dates == sorted(dates)
        assert [r.symbol_code for r in records] == ["A", "B", "B"]

    def test_time_component_removed_from_date_text(self):
        text = "date,open,high,low,close\n2024/01/02 09:00:00,1,2,0.5,1.5\n"
        record = parse_prices(text)[0]

        assert record.trading_date_text == "2024/01/02"
        assert record.trading_date == dt.date(2024, 1, 2)

    def test_malformed_rows_are_reported_not_raised(self):
        text = (
            "date,open,high,low,close\n"
            "2024/01/02,1,2,0.5,1.5\n"
            "2024/02/30,1,2,0.5,1.5\n"
            "2024/01/03,abc,2,0.5,1.5\n"
            "2024/01/04,1,2\n"
            "\n"
        )
        result = parse_prices_with_diagnostics(text)

        assert len(result.records) == 1
        assert result.skip_counts() == {SKIP_BAD_DATE: 1, SKIP_BAD_NUMBER: 1, SKIP_TOO_FEW_COLUMNS: 1}
        assert [row.line_number for row in result.skipped] == [3, 4, 5]

    def test_empty_numeric_field_defaults_to_zero(self):
        text = "date,open,high,low,close\n2024/01/02,,2,0.5,1.5\n"
        assert parse_prices(text)[0].open == 0.0

    def test_missing_code_value_uses_sentinel(self):
        text = "code,date,open,high,low,close\n,2024/01/02,1,2,0.5,1.5\n"
        assert parse_prices(text)[0].symbol_code == UNKNOWN_SYMBOL

    def test_windows_line_endings(self):
        text = "date,open,high,low,close\r\n2024/01/02,1,2,0.5,1.5\r\n"
        assert parse_prices(text)[0].close == 1.5

    @pytest.mark.parametrize("text", ["", "   \n", "date,open,high,low,close\n"])
    def test_empty_inputs(self, text):
        result = parse_prices_with_diagnostics(text)
        assert result.records == []
        assert result.skipped == []
