"""
데이터셋 품질 검증 모듈.

[ 역할 ]
    MarketDataset을 DataFrame으로 펼쳐 종목별 통계, 중복 날짜,
    잘못된 가격(0 이하, 고가 < 저가 등), 날짜 간격, 건너뛴 행 사유를 점검.

[ 호출하는 곳 ]
    - scripts/verify_data.py
"""

from collections import Counter
from typing import Optional

import pandas as pd

from seasonal_backtest.data.market_data import MarketDataset


class DataVerifier:
    """데이터 품질 검증 클래스"""

    def __init__(self, dataset: MarketDataset):
        self.dataset = dataset
        self.frame = pd.DataFrame(
            [
                (r.symbol_code, r.trading_date, r.open, r.high, r.low, r.close)
                for r in dataset.records
            ],
            columns=["symbol_code", "date", "open", "high", "low", "close"],
        )

    def _select(self, symbol_code: Optional[str]) -> pd.DataFrame:
        if symbol_code:
            return self.frame[self.frame["symbol_code"] == symbol_code]
        return self.frame

    def get_symbol_statistics(self, symbol_code: Optional[str] = None) -> pd.DataFrame:
        """종목별 레코드 수, 기간, 종가 범위"""
        df = self._select(symbol_code)
        if df.empty:
            return pd.DataFrame(columns=[
                "symbol_code", "record_count", "min_date", "max_date",
                "avg_close", "min_close", "max_close",
            ])
        stats = df.groupby("symbol_code", sort=True).agg(
            record_count=("close", "size"),
            min_date=("date", "min"),
            max_date=("date", "max"),
            avg_close=("close", "mean"),
            min_close=("close", "min"),
            max_close=("close", "max"),
        )
        return stats.reset_index()

    def check_duplicates(self, symbol_code: Optional[str] = None) -> pd.DataFrame:
        """같은 종목, 같은 날짜 레코드"""
        df = self._select(symbol_code)
        counts = df.groupby(["symbol_code", "date"], sort=True).size().reset_index(name="count")
        return counts[counts["count"] > 1].reset_index(drop=True)

    def check_invalid_prices(self, symbol_code: Optional[str] = None) -> dict[str, int]:
        """잘못된 가격 데이터 확인 (0 이하, high < low, 종가 범위 밖)"""
        df = self._select(symbol_code)
        price_cols = ["open", "high", "low", "close"]
        return {
            "non_positive_prices": int((df[price_cols] <= 0).any(axis=1).sum()),
            "high_less_than_low": int((df["high"] < df["low"]).sum()),
            "close_out_of_range": int(((df["close"] < df["low"]) | (df["close"] > df["high"])).sum()),
            "open_out_of_range": int(((df["open"] < df["low"]) | (df["open"] > df["high"])).sum()),
        }

    def find_date_gaps(self, symbol_code: str, min_gap_days: int = 5) -> list[dict]:
        """날짜 간격(gap) 찾기 (min_gap_days일 초과)"""
        dates = sorted(set(self._select(symbol_code)["date"]))
        gaps = []
        for prev_date, current_date in zip(dates, dates[1:]):
            gap_days = (current_date - prev_date).days
            if gap_days > min_gap_days:
                gaps.append({
                    "prev_date": prev_date,
                    "current_date": current_date,
                    "gap_days": gap_days,
                })
        return gaps

    def skipped_row_summary(self) -> dict[str, int]:
        """파싱 단계에서 건너뛴 행의 사유별 개수"""
        return dict(Counter(row.reason for row in self.dataset.skipped_rows))
