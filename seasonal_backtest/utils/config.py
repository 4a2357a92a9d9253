"""
설정 관리 모듈.

[ 역할 ]
    config.yaml (또는 .json) 파일을 파싱하여 Config 객체로 변환.
    전략 파라미터, 데이터 경로, 결과 출력 옵션, 로깅 설정을 통합 관리.

[ 설정 파일 구조 (config.yaml) ]
    strategy:         → StrategyConfig (anchor_year, entry_month, exit_month, stop_loss_pct)
    data:             → DataConfig (가격 CSV / 매니페스트 / 메타데이터 CSV 경로)
    report:           → ReportConfig (정렬 기준, 출력 개수, 내보내기 경로)
    log_level:        → "INFO" / "DEBUG"
    log_dir:          → 로그 디렉토리 경로

[ 호출하는 곳 ]
    - run_backtest.py에서 Config.from_yaml()로 로드 후 CLI 옵션으로 덮어씀
"""

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from seasonal_backtest.core.strategy import StrategyConfig


@dataclass
class DataConfig:
    """데이터 소스 설정. config.yaml의 data 섹션에 대응.

    price_csv와 manifest 중 하나를 지정. 둘 다 있으면 manifest 우선.
    """
    price_csv: Optional[str] = None
    manifest: Optional[str] = None
    metadata_csv: Optional[str] = None
    encoding: str = "utf-8"


@dataclass
class ReportConfig:
    """결과 출력 설정. config.yaml의 report 섹션에 대응."""
    sort_by: str = "win_rate_pct"
    descending: bool = True
    top_n: int = 20                     # 배치 결과 출력 개수 (0이면 전체)
    export_dir: Optional[str] = None    # CSV 내보내기 디렉토리


@dataclass
class Config:
    """전체 설정. from_yaml() 또는 from_json()으로 파일에서 로드."""
    strategy: StrategyConfig = field(default_factory=StrategyConfig)
    data: DataConfig = field(default_factory=DataConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    log_level: str = "INFO"
    log_dir: str = "logs"

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """YAML 파일에서 설정 로드."""
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls._from_dict(data or {})

    @classmethod
    def from_json(cls, path: str | Path) -> "Config":
        """JSON 파일에서 설정 로드."""
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "Config":
        """딕셔너리에서 Config 생성. 섹션 내 알 수 없는 키는 무시."""
        strategy = StrategyConfig.from_dict(data.get("strategy"))
        data_section = DataConfig(**{
            k: v for k, v in (data.get("data") or {}).items()
            if k in DataConfig.__dataclass_fields__
        })
        report = ReportConfig(**{
            k: v for k, v in (data.get("report") or {}).items()
            if k in ReportConfig.__dataclass_fields__
        })

        return cls(
            strategy=strategy,
            data=data_section,
            report=report,
            log_level=data.get("log_level", "INFO"),
            log_dir=data.get("log_dir", "logs"),
        )

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리로 변환."""
        return asdict(self)

    def save_yaml(self, path: str | Path) -> None:
        """YAML 파일로 저장."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, allow_unicode=True, default_flow_style=False)
