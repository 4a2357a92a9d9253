"""
시즌 매매 성과 지표 계산 모듈.

[ 역할 ]
    거래(Trade) 목록을 받아 요약 통계(SummaryStats)로 축약.
    aggregate() 함수가 핵심. 거래가 없어도 항상 정의된 값을 반환 (0).

[ 계산하는 지표 ]
    - 거래 수 / 수익 거래 / 손실 거래 / 승률
    - 평균 수익률, 총 수익률 (거래 수익률의 단순 합, 복리 아님)
    - 최고 / 최저 거래 수익률
    - 샤프 비율 = 평균 수익률 / 모표준편차 (무위험 수익률 차감, 연환산 없음)
      거래가 2건 미만이거나 표준편차가 0이면 0

[ 호출하는 곳 ]
    - backtest/engine.py::BacktestEngine.run_single()
    - backtest/batch.py::run_batch()
"""

from dataclasses import asdict, dataclass
from typing import Any, Sequence

import numpy as np

from seasonal_backtest.data.trades import Trade


@dataclass(frozen=True)
class SummaryStats:
    """시즌 전략 성과 지표. summary()로 포맷된 리포트 출력 가능."""
    trade_count: int = 0          # 거래 횟수 (연도 수)
    wins: int = 0                 # 수익 거래 수 (수익률 > 0)
    losses: int = 0               # 손실 거래 수 (수익률 <= 0)
    win_rate_pct: float = 0.0     # 승률 (%)
    avg_profit_pct: float = 0.0   # 평균 수익률 (%)
    total_return_pct: float = 0.0 # 총 수익률 (%), 단순 합
    best_trade_pct: float = 0.0   # 최고 거래 수익률 (%)
    worst_trade_pct: float = 0.0  # 최저 거래 수익률 (%)
    sharpe_ratio: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리 변환."""
        return asdict(self)

    def summary(self) -> str:
        """성과 요약 문자열."""
        lines = [
            "=" * 50,
            "시즌 전략 성과 리포트",
            "=" * 50,
            f"총 수익률(단순합): {self.total_return_pct:>10.2f}%",
            f"평균 수익률:     {self.avg_profit_pct:>10.2f}%",
            f"샤프 비율:       {self.sharpe_ratio:>10.2f}",
            "-" * 50,
            f"총 거래 횟수:    {self.trade_count:>10d}",
            f"승률:            {self.win_rate_pct:>10.2f}%",
            f"수익 거래:       {self.wins:>10d}",
            f"손실 거래:       {self.losses:>10d}",
            f"최고 거래:       {self.best_trade_pct:>10.2f}%",
            f"최저 거래:       {self.worst_trade_pct:>10.2f}%",
            "=" * 50,
        ]
        return "\n".join(lines)


def sharpe_ratio(returns: Sequence[float]) -> float:
    """평균 / 모표준편차. 2건 미만 또는 표준편차 0이면 0."""
    if len(returns) < 2:
        return 0.0
    arr = np.asarray(returns, dtype=float)
    std = np.std(arr)  # ddof=0 (모표준편차)
    if std > 0:
        return float(np.mean(arr) / std)
    return 0.0


def aggregate(trades: Sequence[Trade]) -> SummaryStats:
    """거래 목록 → 요약 통계. 빈 목록이면 모든 값 0."""
    if not trades:
        return SummaryStats()

    profits = [t.profit_pct for t in trades]
    total = len(trades)
    wins = sum(1 for t in trades if t.is_win)
    total_return = float(sum(profits))

    return SummaryStats(
        trade_count=total,
        wins=wins,
        losses=total - wins,
        win_rate_pct=wins / total * 100,
        avg_profit_pct=total_return / total,
        total_return_pct=total_return,
        best_trade_pct=float(max(profits)),
        worst_trade_pct=float(min(profits)),
        sharpe_ratio=sharpe_ratio(profits),
    )
