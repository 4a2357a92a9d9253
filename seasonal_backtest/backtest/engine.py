"""
백테스팅 엔진 모듈.

[ 역할 ]
    MarketDataset 하나에 대해 단일 종목 / 전체 종목 백테스트를 실행하고
    결과를 (종목, 설정) 단위로 캐싱한다. 설정을 바꿀 때마다 다시 호출해도
    같은 조합은 즉시 캐시에서 반환.

[ 실행 흐름 ]
    run_single(code, cfg):
        1. 종목별 PriceArrays (데이터셋당 한 번 생성해 재사용)
        2. simulator.simulate_arrays() → 연도별 Trade 목록
        3. metrics.aggregate() → SummaryStats
    run_batch(cfg, symbol_order):
        batch.summarize_symbols()에 종목별 배열 + 병합 메타데이터 전달

[ 캐시 ]
    키: (종목 코드, StrategyConfig) / (종목 순서, StrategyConfig)
    데이터셋이 바뀌면 새 엔진을 만든다 (엔진 = 데이터셋 하나).

[ 의존성 ]
    - backtest/simulator.py::PriceArrays, simulate_arrays()
    - backtest/metrics.py::aggregate()
    - backtest/batch.py::summarize_symbols()

[ 호출하는 곳 ]
    - run_backtest.py (진입점)에서 생성 및 실행
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from seasonal_backtest.backtest.batch import SymbolSummary, summarize_symbols
from seasonal_backtest.backtest.metrics import SummaryStats, aggregate
from seasonal_backtest.backtest.simulator import PriceArrays, simulate_arrays
from seasonal_backtest.core.data_provider import SymbolMetadata
from seasonal_backtest.core.strategy import StrategyConfig
from seasonal_backtest.data.market_data import MarketDataset
from seasonal_backtest.data.trades import Trade
from seasonal_backtest.ingestion.metadata_csv import merge_metadata

logger = logging.getLogger("seasonal_backtest.backtest")


@dataclass(frozen=True)
class BacktestResult:
    """단일 종목 백테스트 결과."""
    symbol_code: str
    config: StrategyConfig
    trades: tuple[Trade, ...] = ()
    stats: SummaryStats = field(default_factory=SummaryStats)


class BacktestEngine:
    """백테스팅 엔진. run_single() / run_batch()로 시뮬레이션 실행."""

    def __init__(
        self,
        dataset: MarketDataset,
        metadata: Optional[dict[str, SymbolMetadata]] = None,
    ):
        self.dataset = dataset
        self.reference_metadata = dict(metadata or {})
        # 화면 표시용 병합 결과 (참조 테이블 > 가격 파일 종목명)
        self.metadata = merge_metadata(self.reference_metadata, dataset.inline_names())

        self._single_cache: dict[tuple[str, StrategyConfig], BacktestResult] = {}
        self._batch_cache: dict[tuple[tuple[str, ...], StrategyConfig], list[SymbolSummary]] = {}
        self._arrays: dict[str, PriceArrays] | None = None  # code → 날짜순 배열 (지연 생성)

    def _symbol_arrays(self) -> dict[str, PriceArrays]:
        if self._arrays is None:
            self._arrays = PriceArrays.split_by_symbol(self.dataset.records)
        return self._arrays

    def display_name(self, symbol_code: str) -> str:
        meta = self.metadata.get(symbol_code)
        return meta.display_name if meta else ""

    def default_config(self, **overrides: Any) -> StrategyConfig:
        """데이터의 첫 연도를 anchor_year로 하는 기본 설정."""
        anchor = self.dataset.first_year() or 0
        return StrategyConfig(anchor_year=anchor).with_changes(**overrides)

    def run_single(
        self,
        symbol_code: str,
        config: StrategyConfig,
        use_cache: bool = True,
    ) -> BacktestResult:
        """단일 종목 백테스트.

        Args:
            symbol_code: 종목 코드
            config: 전략 설정
            use_cache: False면 캐시를 무시하고 다시 계산

        Returns:
            BacktestResult: 거래 목록 + 요약 통계
        """
        key = (symbol_code, config)
        if use_cache and key in self._single_cache:
            return self._single_cache[key]

        arrays = self._symbol_arrays().get(symbol_code)
        if arrays is None:
            logger.warning(f"{symbol_code}: 데이터가 없습니다.")

        trades = simulate_arrays(arrays, config) if arrays is not None else []
        result = BacktestResult(
            symbol_code=symbol_code,
            config=config,
            trades=tuple(trades),
            stats=aggregate(trades),
        )
        logger.info(
            f"{symbol_code} 백테스트 완료: 거래 {result.stats.trade_count}건, "
            f"승률 {result.stats.win_rate_pct:.1f}%, 총 수익률 {result.stats.total_return_pct:.2f}%"
        )

        if use_cache:
            self._single_cache[key] = result
        return result

    def run_batch(
        self,
        config: StrategyConfig,
        symbol_order: Optional[Sequence[str]] = None,
        use_cache: bool = True,
    ) -> list[SymbolSummary]:
        """전체 종목 백테스트. symbol_order가 없으면 정렬된 종목 코드 순."""
        order = tuple(symbol_order) if symbol_order else tuple(self.dataset.symbols())
        key = (order, config)
        if use_cache and key in self._batch_cache:
            return self._batch_cache[key]

        logger.info(
            f"배치 백테스트 시작: {len(order)}개 종목, "
            f"{config.entry_month}월 매수 → {config.exit_month}월 매도, 손절 {config.stop_loss_pct}%"
        )
        summaries = summarize_symbols(self._symbol_arrays(), order, config, self.metadata)

        if use_cache:
            self._batch_cache[key] = summaries
        return summaries

    def clear_cache(self) -> None:
        """캐시 초기화."""
        self._single_cache.clear()
        self._batch_cache.clear()

    def generate_report(self, symbol_code: str, config: StrategyConfig) -> dict[str, Any]:
        """단일 종목 백테스트 리포트 (JSON 직렬화 가능)."""
        result = self.run_single(symbol_code, config)
        return {
            "symbol_code": symbol_code,
            "display_name": self.display_name(symbol_code),
            "dataset": self.dataset.name,
            "config": config.to_dict(),
            "metrics": result.stats.to_dict(),
            "trade_count": len(result.trades),
            "trades": [t.to_dict() for t in result.trades],
        }
