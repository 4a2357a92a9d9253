"""
시즌 매매 전략 설정 (StrategyConfig) 정의.

[ 역할 ]
    "anchor_year 이후 매년 entry_month에 매수, exit_month에 매도" 전략의 파라미터.
    불변 값 객체이므로 dict 키(메모이제이션 캐시)로 그대로 사용할 수 있다.

[ 파라미터 ]
    anchor_year:    이 연도부터 매매 시작 (0이면 데이터의 모든 연도)
    entry_month:    매수 월 (1~12), 해당 월의 첫 거래일 종가로 진입
    exit_month:     매도 월 (1~12), 해당 월의 마지막 거래일 종가로 청산
                    entry_month보다 작으면 다음 해에 청산 (연도 넘김 보유)
    stop_loss_pct:  손절 비율 (0~50, 0이면 비활성)

[ 호출하는 곳 ]
    - utils/config.py가 config.yaml의 strategy 섹션을 이 객체로 변환
    - backtest/simulator.py::simulate(), backtest/batch.py::run_batch()
"""

from dataclasses import asdict, dataclass, replace
from typing import Any

MIN_MONTH = 1
MAX_MONTH = 12
MAX_STOP_LOSS_PCT = 50.0


@dataclass(frozen=True)
class StrategyConfig:
    """시즌 전략 설정. 생성 시 범위를 검증한다.

    Raises:
        ValueError: 월이 1~12 범위 밖이거나 손절 비율이 0~50 범위 밖인 경우
    """
    anchor_year: int = 0
    entry_month: int = 1
    exit_month: int = 12
    stop_loss_pct: float = 0.0  # 0 = 손절 비활성

    def __post_init__(self):
        for label, month in (("entry_month", self.entry_month), ("exit_month", self.exit_month)):
            if not MIN_MONTH <= month <= MAX_MONTH:
                raise ValueError(f"{label}는 1~12 사이여야 합니다: {month}")
        if not 0 <= self.stop_loss_pct <= MAX_STOP_LOSS_PCT:
            raise ValueError(f"stop_loss_pct는 0~50 사이여야 합니다: {self.stop_loss_pct}")

    @property
    def is_cross_year(self) -> bool:
        """매도 월이 매수 월보다 앞이면 다음 해에 청산."""
        return self.exit_month < self.entry_month

    @property
    def stop_loss_enabled(self) -> bool:
        return self.stop_loss_pct > 0

    def exit_year_for(self, entry_year: int) -> int:
        """매수 연도에 대응하는 매도 연도."""
        return entry_year + 1 if self.is_cross_year else entry_year

    def with_changes(self, **changes: Any) -> "StrategyConfig":
        """일부 필드만 바꾼 새 설정 반환 (검증 포함)."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "StrategyConfig":
        """dict에서 생성. 알 수 없는 키는 무시."""
        data = data or {}
        fields = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if "anchor_year" in fields:
            fields["anchor_year"] = int(fields["anchor_year"])
        for key in ("entry_month", "exit_month"):
            if key in fields:
                fields[key] = int(fields[key])
        if "stop_loss_pct" in fields:
            fields["stop_loss_pct"] = float(fields["stop_loss_pct"])
        return cls(**fields)
