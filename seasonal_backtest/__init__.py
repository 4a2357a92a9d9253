"""
=============================================================================
월효과 시즌 매매 백테스트 (Seasonal Backtest)
=============================================================================

"매년 X월 매수, Y월 매도" 전략을 과거 일봉 데이터로 검증한다.
단일 종목 또는 전체 종목(배치)을 대상으로 하며, 보유 중 손절(stop-loss)을 지원.

[ 시스템 전체 구조 ]

    run_backtest.py (진입점)
         │
         ├── utils/config.py          ← config.yaml 설정 로드
         ├── utils/logger.py          ← 로깅
         │
         ├── data/providers.py        ← 원시 CSV 텍스트 제공 (파일 / 분할 매니페스트)
         │     └── ingestion/manifest.py
         │
         ├── ingestion/price_csv.py   ← CSV 텍스트 → PriceRecord 목록 (컬럼 자동 감지)
         ├── ingestion/metadata_csv.py← 종목 코드 → 이름/시장/업종/비중 메타데이터
         │
         ├── data/market_data.py      ← MarketDataset (불변, 종목별 그룹핑)
         │
         └── backtest/engine.py       ← 단일/배치 실행 + 메모이제이션
               │
               ├── backtest/simulator.py← 연도별 매매 시뮬레이션 (손절 포함)
               ├── backtest/metrics.py  ← 거래 목록 → 요약 통계
               ├── backtest/batch.py    ← 전체 종목 일괄 실행
               └── backtest/report.py   ← DataFrame 변환, 정렬/필터, CSV 내보내기


[ 데이터 흐름 ]

    1. DataProvider가 원시 CSV 텍스트 제공 (분할 파일이면 이어 붙임)
    2. parse_prices()가 컬럼 레이아웃을 감지하여 PriceRecord 목록으로 변환
    3. 단일 종목: simulate() → aggregate() → SummaryStats
       배치:      종목별 배열 분할(한 번) → simulate_arrays() → aggregate() → 메타데이터 병합 → SymbolSummary 목록
    4. report.py가 결과를 표로 변환하여 출력/저장


[ 설계 원칙 ]

    - 코어(ingestion / backtest)는 전역 상태가 없는 순수 함수.
      상태와 수명주기는 호출자(CLI, BacktestEngine)가 소유한다.
    - 잘못된 행은 조용히 건너뛰되, 건너뛴 사유는 ParseResult로 따로 제공.
    - 총 수익률은 연도별 거래 수익률의 단순 합 (복리 아님).
"""

__version__ = "0.3.0"
