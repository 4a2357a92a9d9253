"""
주가 데이터 레코드 및 데이터 소스 추상 클래스 정의.

[ 역할 ]
    - PriceRecord:      한 종목의 하루치 OHLC (ingestion/price_csv.py가 생성)
    - SymbolMetadata:   종목 코드별 이름/시장/업종/지수 비중 여부
    - DataProvider:     원시 CSV 텍스트를 공급하는 인터페이스.
                        코어는 항상 "하나로 합쳐진 텍스트"만 받는다.

[ 구현체 ]
    - data/providers.py::CsvFileProvider   (단일 CSV 파일)
    - data/providers.py::ManifestProvider  (분할 파일 매니페스트 → 이어 붙임)

[ 호출하는 곳 ]
    - data/market_data.py::MarketDataset.from_provider()
    - run_backtest.py에서 --data / --manifest 옵션으로 구현체 선택
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class PriceRecord:
    """단일 일봉 데이터. 생성 후 변경되지 않음."""
    symbol_code: str
    trading_date: date
    trading_date_text: str      # 원본 파일의 날짜 문자열 (시간 부분 제거)
    open: float                 # 시가
    high: float                 # 고가
    low: float                  # 저가
    close: float                # 종가
    display_name: Optional[str] = None  # 가격 파일에 함께 있던 종목명

    @property
    def year(self) -> int:
        return self.trading_date.year

    @property
    def month(self) -> int:
        return self.trading_date.month


@dataclass(frozen=True)
class SymbolMetadata:
    """종목 메타데이터. 참조 테이블(metadata CSV)이 가격 파일의 종목명보다 우선."""
    display_name: str = ""
    market: Optional[str] = None              # 예: 上市 / 上櫃
    industry: Optional[str] = None
    is_index_weighted: Optional[bool] = None  # 비중 컬럼이 없으면 None


class DataProvider(ABC):
    """원시 가격 CSV 텍스트 제공 추상 클래스.

    데이터를 새로 불러오면 기존 데이터셋 전체를 교체한다 (증분 갱신 없음).
    """

    @abstractmethod
    def read_text(self) -> str:
        """전체 CSV 텍스트를 하나의 문자열로 반환."""
        ...

    @abstractmethod
    def describe(self) -> str:
        """로그/화면 표시용 데이터 소스 이름."""
        ...
