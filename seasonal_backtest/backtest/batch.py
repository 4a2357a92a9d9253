"""
전체 종목 일괄 백테스트 (Batch Orchestrator).

[ 역할 ]
    여러 종목이 섞인 레코드 목록을 종목별로 묶고,
    종목마다 simulate_arrays() → aggregate()를 실행한 뒤 메타데이터를 붙인다.

[ 실행 흐름 ]
    1. 레코드를 한 번 순회하며 종목 등장 순서와 종목명(처음 나온 이름) 수집
       가격 DataFrame은 한 번만 만들고 종목별 위치 인덱스로 나눔 (PriceArrays)
    2. 출력 순서: symbol_order가 있으면 그 순서, 없으면 처음 등장한 순서
    3. 종목별 simulate_arrays() + aggregate()
    4. 메타데이터 병합: 참조 테이블 > 가격 파일 종목명
       symbol_order에 있지만 데이터에 없는 종목은 거래 0건 요약으로 포함

[ 호출하는 곳 ]
    - backtest/engine.py::BacktestEngine.run_batch() (summarize_symbols, 종목별 배열 캐시 재사용)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from seasonal_backtest.backtest.metrics import SummaryStats, aggregate
from seasonal_backtest.backtest.simulator import PriceArrays, simulate_arrays
from seasonal_backtest.core.data_provider import PriceRecord, SymbolMetadata
from seasonal_backtest.core.strategy import StrategyConfig
from seasonal_backtest.ingestion.metadata_csv import merge_metadata

logger = logging.getLogger("seasonal_backtest.backtest")


@dataclass(frozen=True)
class SymbolSummary:
    """종목별 요약 (배치 모드 전용)."""
    symbol_code: str
    display_name: str = ""
    market: Optional[str] = None
    industry: Optional[str] = None
    is_index_weighted: Optional[bool] = None
    stats: SummaryStats = field(default_factory=SummaryStats)

    def to_dict(self) -> dict[str, Any]:
        """식별 정보 + 통계를 평탄화한 dict (DataFrame 행)."""
        return {
            "symbol_code": self.symbol_code,
            "display_name": self.display_name,
            "market": self.market,
            "industry": self.industry,
            "is_index_weighted": self.is_index_weighted,
            **self.stats.to_dict(),
        }


def scan_symbols(series: Sequence[PriceRecord]) -> tuple[list[str], dict[str, str]]:
    """한 번 순회로 종목 등장 순서와 종목명(처음 나온 이름)을 모은다."""
    order: dict[str, None] = {}
    inline_names: dict[str, str] = {}
    for record in series:
        order.setdefault(record.symbol_code, None)
        if record.display_name and record.symbol_code not in inline_names:
            inline_names[record.symbol_code] = record.display_name
    return list(order), inline_names


def run_batch(
    series: Sequence[PriceRecord],
    symbol_order: Sequence[str],
    cfg: StrategyConfig,
    metadata: Optional[dict[str, SymbolMetadata]] = None,
) -> list[SymbolSummary]:
    """종목별 요약 목록.

    Args:
        series: 여러 종목이 섞인 레코드 (순서 무관)
        symbol_order: 출력 순서. 비어 있으면 데이터에 처음 등장한 순서
        cfg: 전략 설정 (모든 종목 공통)
        metadata: 참조 테이블 메타데이터 (가격 파일 종목명보다 우선)
    """
    natural_order, inline_names = scan_symbols(series)
    resolved = merge_metadata(metadata or {}, inline_names)
    target_codes = list(symbol_order) if symbol_order else natural_order
    return summarize_symbols(PriceArrays.split_by_symbol(series), target_codes, cfg, resolved)


def summarize_symbols(
    by_symbol: dict[str, PriceArrays],
    symbol_codes: Sequence[str],
    cfg: StrategyConfig,
    metadata: dict[str, SymbolMetadata],
) -> list[SymbolSummary]:
    """종목별 배열이 준비된 상태에서 요약 목록 생성 (metadata는 병합 완료된 값).

    BacktestEngine은 by_symbol을 데이터셋당 한 번 만들어 두고 설정이 바뀔 때마다 이 함수만 호출.
    """
    summaries: list[SymbolSummary] = []
    for code in symbol_codes:
        arrays = by_symbol.get(code)
        trades = simulate_arrays(arrays, cfg) if arrays is not None else []
        meta = metadata.get(code, SymbolMetadata())
        summaries.append(SymbolSummary(
            symbol_code=code,
            display_name=meta.display_name,
            market=meta.market,
            industry=meta.industry,
            is_index_weighted=meta.is_index_weighted,
            stats=aggregate(trades),
        ))

    logger.info(f"배치 백테스트 완료: {len(summaries)}개 종목")
    return summaries
