"""
DataProvider 구현체.

[ 역할 ]
    - CsvFileProvider:   로컬 CSV 파일 하나를 읽음
    - ManifestProvider:  분할 매니페스트(data_manifest.json)의 파트를 이어 붙임

[ 의존성 ]
    - core/data_provider.py::DataProvider (추상 클래스)
    - ingestion/manifest.py::read_manifest_text()

[ 호출하는 곳 ]
    - run_backtest.py (--data / --manifest 옵션)
    - data/market_data.py::MarketDataset.from_provider()
"""

import logging
from pathlib import Path

from seasonal_backtest.core.data_provider import DataProvider
from seasonal_backtest.ingestion.manifest import read_manifest_text

logger = logging.getLogger("seasonal_backtest.data")


class CsvFileProvider(DataProvider):
    """단일 CSV 파일 데이터 제공자.

    사용 예:
        provider = CsvFileProvider("data/prices.csv")
        dataset = MarketDataset.from_provider(provider)
    """

    def __init__(self, path: str | Path, encoding: str = "utf-8"):
        self.path = Path(path)
        self.encoding = encoding

    def read_text(self) -> str:
        text = self.path.read_text(encoding=self.encoding)
        logger.info(f"CSV 로드: {self.path} ({len(text):,}자)")
        return text.lstrip("\ufeff")

    def describe(self) -> str:
        return self.path.name


class ManifestProvider(DataProvider):
    """분할 파트 파일 데이터 제공자."""

    def __init__(self, manifest_path: str | Path):
        self.manifest_path = Path(manifest_path)

    def read_text(self) -> str:
        return read_manifest_text(self.manifest_path)

    def describe(self) -> str:
        return f"{self.manifest_path.parent.name}/{self.manifest_path.name}"
