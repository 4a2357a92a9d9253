#!/usr/bin/env python3
"""
큰 가격 CSV를 분할 JSON 파트 + 매니페스트로 저장하는 스크립트
"""
import argparse
import logging
import sys
from pathlib import Path

# 프로젝트 루트를 sys.path에 추가
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from seasonal_backtest.ingestion.manifest import DEFAULT_CHUNK_SIZE, write_manifest

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description='Split a price CSV into JSON parts with a manifest')

    parser.add_argument('input', type=str, help='Price CSV file')
    parser.add_argument(
        '--out-dir',
        type=str,
        default='public',
        help='Output directory for data_partN.json and data_manifest.json (default: public)'
    )
    parser.add_argument(
        '--chunk-mb',
        type=float,
        default=DEFAULT_CHUNK_SIZE / (1024 * 1024),
        help='Approximate part size in MB of characters (default: 40)'
    )
    parser.add_argument('--encoding', type=str, default='utf-8', help='Input file encoding')

    args = parser.parse_args()

    input_path = Path(args.input)
    if not input_path.exists():
        logger.error(f"Input file not found: {input_path}")
        sys.exit(1)

    chunk_size = int(args.chunk_mb * 1024 * 1024)
    if chunk_size <= 0:
        logger.error(f"Invalid chunk size: {args.chunk_mb} MB")
        sys.exit(1)

    text = input_path.read_text(encoding=args.encoding)
    logger.info(f"Read {input_path} ({len(text):,} chars)")

    manifest_path = write_manifest(text, args.out_dir, chunk_size=chunk_size)
    logger.info(f"Manifest written: {manifest_path}")


if __name__ == "__main__":
    main()
