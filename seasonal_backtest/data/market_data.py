"""
시장 데이터셋 모듈.

[ 역할 ]
    파싱된 PriceRecord 전체를 보관하는 불변 데이터셋.
    종목별 그룹핑 결과를 캐싱하여 단일 종목 조회를 반복해도 재계산하지 않는다.
    새 데이터를 불러오면 새 MarketDataset을 만든다 (전체 교체, 증분 갱신 없음).

[ 의존성 ]
    - ingestion/price_csv.py::parse_prices_with_diagnostics()
    - core/data_provider.py::DataProvider

[ 호출하는 곳 ]
    - backtest/engine.py::BacktestEngine
    - run_backtest.py, scripts/verify_data.py
"""

import logging
from typing import Optional

from seasonal_backtest.core.data_provider import DataProvider, PriceRecord
from seasonal_backtest.ingestion.price_csv import (
    ColumnLayout,
    SkippedRow,
    parse_prices_with_diagnostics,
)

logger = logging.getLogger("seasonal_backtest.data")


class MarketDataset:
    """전체 가격 데이터 + 종목별 조회.

    사용 예:
        dataset = MarketDataset.from_provider(CsvFileProvider("prices.csv"))
        records = dataset.records_for("2330")
    """

    def __init__(
        self,
        records: list[PriceRecord],
        name: str = "",
        layout: Optional[ColumnLayout] = None,
        skipped_rows: Optional[list[SkippedRow]] = None,
    ):
        self.name = name
        self.layout = layout
        self._records = tuple(records)
        self.skipped_rows: tuple[SkippedRow, ...] = tuple(skipped_rows or ())
        self._groups: dict[str, list[PriceRecord]] | None = None  # code → 날짜순 레코드

    @classmethod
    def from_text(cls, text: str, name: str = "") -> "MarketDataset":
        result = parse_prices_with_diagnostics(text)
        return cls(result.records, name=name, layout=result.layout, skipped_rows=result.skipped)

    @classmethod
    def from_provider(cls, provider: DataProvider) -> "MarketDataset":
        dataset = cls.from_text(provider.read_text(), name=provider.describe())
        logger.info(
            f"데이터셋 '{dataset.name}': 레코드 {len(dataset):,}건, "
            f"종목 {len(dataset.symbols())}개, 건너뛴 행 {len(dataset.skipped_rows)}건"
        )
        return dataset

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> tuple[PriceRecord, ...]:
        """전체 레코드 (날짜 오름차순)."""
        return self._records

    def _grouped(self) -> dict[str, list[PriceRecord]]:
        if self._groups is None:
            groups: dict[str, list[PriceRecord]] = {}
            for record in self._records:
                groups.setdefault(record.symbol_code, []).append(record)
            self._groups = groups
        return self._groups

    def symbols(self) -> list[str]:
        """종목 코드 목록 (정렬)."""
        return sorted(self._grouped())

    def records_for(self, symbol_code: str) -> list[PriceRecord]:
        """종목의 날짜순 레코드. 없는 종목이면 빈 목록."""
        return list(self._grouped().get(symbol_code, ()))

    def years(self, symbol_code: Optional[str] = None) -> list[int]:
        """데이터에 존재하는 연도 목록. 종목을 지정하지 않으면 전체 기준."""
        records = self.records_for(symbol_code) if symbol_code else self._records
        return sorted({r.year for r in records})

    def first_year(self) -> Optional[int]:
        return self._records[0].year if self._records else None

    def inline_names(self) -> dict[str, str]:
        """가격 파일에 함께 있던 종목명. 종목별로 처음 나온 이름을 사용."""
        names: dict[str, str] = {}
        for record in self._records:
            if record.display_name and record.symbol_code not in names:
                names[record.symbol_code] = record.display_name
        return names
