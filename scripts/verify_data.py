#!/usr/bin/env python3
"""
가격 CSV 데이터셋 품질 검증 스크립트
"""
import argparse
import logging
import sys
from pathlib import Path

# 프로젝트 루트를 sys.path에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from seasonal_backtest.data.market_data import MarketDataset
from seasonal_backtest.data.providers import CsvFileProvider, ManifestProvider
from seasonal_backtest.data.verify import DataVerifier
from seasonal_backtest.ingestion.manifest import ManifestError

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def print_section(title: str):
    """섹션 제목 출력"""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def main():
    parser = argparse.ArgumentParser(description='Verify price CSV data quality')

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument('--data', type=str, help='Price CSV file')
    source.add_argument('--manifest', type=str, help='Chunked dataset manifest (data_manifest.json)')

    parser.add_argument(
        '--symbol',
        type=str,
        default=None,
        help='Specific symbol to verify (default: all symbols)'
    )
    parser.add_argument(
        '--show-skipped',
        type=int,
        default=10,
        help='Number of skipped rows to print (default: 10)'
    )

    args = parser.parse_args()

    provider = ManifestProvider(args.manifest) if args.manifest else CsvFileProvider(args.data)
    try:
        dataset = MarketDataset.from_provider(provider)
    except (FileNotFoundError, ManifestError) as e:
        logger.error(f"Failed to load dataset: {e}")
        sys.exit(1)

    verifier = DataVerifier(dataset)

    print_section(f"데이터 품질 검증: {dataset.name}")
    if dataset.layout is not None:
        print(f"컬럼 레이아웃: {dataset.layout}")

    # 1. 종목별 통계
    print_section("1. 종목별 통계")
    stats_df = verifier.get_symbol_statistics(args.symbol)
    if not stats_df.empty:
        print(stats_df.to_string(index=False))
    else:
        print("No data found")

    # 2. 건너뛴 행
    print_section("2. 건너뛴 행")
    skipped = verifier.skipped_row_summary()
    if skipped:
        for reason, count in skipped.items():
            print(f"⚠️  {reason}: {count}")
        for row in dataset.skipped_rows[:args.show_skipped]:
            print(f"  line {row.line_number} ({row.reason}): {row.text[:80]}")
    else:
        print("✓ No skipped rows")

    # 3. 중복 데이터 확인
    print_section("3. 중복 데이터 확인")
    duplicates_df = verifier.check_duplicates(args.symbol)
    if not duplicates_df.empty:
        print(f"⚠️  Found {len(duplicates_df)} duplicate records:")
        print(duplicates_df.to_string(index=False))
    else:
        print("✓ No duplicates found")

    # 4. 잘못된 가격 확인
    print_section("4. 데이터 유효성 검사")
    invalid_prices = verifier.check_invalid_prices(args.symbol)
    has_issues = False
    for check, count in invalid_prices.items():
        status = "⚠️ " if count > 0 else "✓"
        print(f"{status} {check}: {count}")
        if count > 0:
            has_issues = True

    if not has_issues:
        print("\n✓ All price data is valid")

    # 5. 날짜 간격 확인 (특정 종목만)
    if args.symbol:
        print_section(f"5. 날짜 간격 확인 ({args.symbol})")
        gaps = verifier.find_date_gaps(args.symbol)
        if gaps:
            print(f"⚠️  Found {len(gaps)} date gaps (>5 days):")
            for gap in gaps[:10]:  # 최대 10개만 출력
                print(f"  {gap['prev_date']} → {gap['current_date']} ({gap['gap_days']} days)")
            if len(gaps) > 10:
                print(f"  ... and {len(gaps) - 10} more gaps")
        else:
            print("✓ No significant date gaps found")

    # 요약
    print_section("검증 완료")
    print(f"Total records: {len(dataset)}")
    print(f"Total symbols: {len(dataset.symbols())}")
    print()


if __name__ == "__main__":
    main()
