"""
시즌 매매 거래 기록.

[ 역할 ]
    backtest/simulator.py::simulate()가 연도마다 최대 1건 생성하는 거래 결과.
    metrics.py가 이 목록으로 승률/수익률/샤프 비율을 계산.

[ 손익 계산 ]
    profit_pct = (exit_price - entry_price) / entry_price * 100
    profit_abs = NOTIONAL * profit_pct / 100   (매 거래 고정 금액, 복리 아님)
"""

from dataclasses import asdict, dataclass
from datetime import date
from typing import Any

NOTIONAL = 10_000  # 거래당 고정 투자 금액


@dataclass(frozen=True)
class Trade:
    """한 해의 거래 결과. 생성 후 변경되지 않음."""
    year: int                   # 매수 연도
    entry_date: date
    entry_date_text: str
    entry_price: float          # 매수 월 첫 거래일 종가
    exit_date: date
    exit_date_text: str
    exit_price: float           # 매도 월 마지막 거래일 종가 또는 손절가
    profit_pct: float           # 수익률 (%)
    profit_abs: float           # NOTIONAL 기준 손익
    holding_days: int           # 매수일 ~ 매도일 일수
    stopped_out: bool = False   # 손절로 청산되었는지

    @property
    def is_win(self) -> bool:
        return self.profit_pct > 0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["entry_date"] = self.entry_date.isoformat()
        data["exit_date"] = self.exit_date.isoformat()
        data["is_win"] = self.is_win
        return data
