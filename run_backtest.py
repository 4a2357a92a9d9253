"""
시즌 백테스트 실행 스크립트 (시스템 진입점).

[ 사용법 ]
    # 단일 종목 (config.yaml의 전략 사용, 종목 미지정 시 첫 종목)
    python run_backtest.py --data prices.csv --symbol 2330

    # 전략 지정: 12월 매수 → 다음 해 1월 매도, 10% 손절
    python run_backtest.py --data prices.csv --symbol 2330 --entry-month 12 --exit-month 1 --stop-loss 10

    # 분할 매니페스트 + 메타데이터로 전체 종목 순위표
    python run_backtest.py --manifest public/data_manifest.json --names names.csv --batch

    # 순위표 정렬/필터 + CSV 내보내기
    python run_backtest.py --data prices.csv --batch --sort-by total_return_pct --min-win-rate 60 --export exports

    # 종목 목록 확인
    python run_backtest.py --data prices.csv --list
"""

import argparse
import sys
from pathlib import Path

from seasonal_backtest.backtest.engine import BacktestEngine, BacktestResult
from seasonal_backtest.backtest.report import (
    SORT_FIELDS,
    export_csv,
    filter_summaries,
    rank_summaries,
    summaries_to_frame,
    trades_to_frame,
)
from seasonal_backtest.core.data_provider import DataProvider
from seasonal_backtest.core.strategy import StrategyConfig
from seasonal_backtest.data.market_data import MarketDataset
from seasonal_backtest.data.providers import CsvFileProvider, ManifestProvider
from seasonal_backtest.ingestion.manifest import ManifestError
from seasonal_backtest.ingestion.metadata_csv import load_metadata_file
from seasonal_backtest.utils.config import Config
from seasonal_backtest.utils.logger import setup_logger


def build_provider(config: Config) -> DataProvider | None:
    """설정에서 데이터 제공자 선택. 매니페스트가 있으면 우선."""
    if config.data.manifest:
        return ManifestProvider(config.data.manifest)
    if config.data.price_csv:
        return CsvFileProvider(config.data.price_csv, encoding=config.data.encoding)
    return None


def build_strategy(config: Config, dataset: MarketDataset, args: argparse.Namespace) -> StrategyConfig:
    """config.yaml 전략 + CLI 오버라이드. anchor_year가 0이면 데이터 첫 연도."""
    overrides = {}
    if args.anchor_year is not None:
        overrides["anchor_year"] = args.anchor_year
    elif config.strategy.anchor_year == 0 and dataset.first_year() is not None:
        overrides["anchor_year"] = dataset.first_year()
    if args.entry_month is not None:
        overrides["entry_month"] = args.entry_month
    if args.exit_month is not None:
        overrides["exit_month"] = args.exit_month
    if args.stop_loss is not None:
        overrides["stop_loss_pct"] = args.stop_loss
    return config.strategy.with_changes(**overrides)


def describe_strategy(cfg: StrategyConfig) -> str:
    hold = "연도 넘김 보유" if cfg.is_cross_year else "당해 보유"
    stop = f", 손절 {cfg.stop_loss_pct:g}%" if cfg.stop_loss_enabled else ""
    return f"{cfg.anchor_year}년부터 {cfg.entry_month}월 매수 → {cfg.exit_month}월 매도 ({hold}{stop})"


def print_single_result(engine: BacktestEngine, result: BacktestResult):
    """단일 종목 결과 출력."""
    label = f"{result.symbol_code} {engine.display_name(result.symbol_code)}".strip()
    print(f"\n[종목: {label}]")
    print(f"전략: {describe_strategy(result.config)}")
    print(result.stats.summary())

    if result.trades:
        print("\n연도별 거래:")
        for t in result.trades:
            profit_str = f"+{t.profit_pct:.2f}" if t.profit_pct > 0 else f"{t.profit_pct:.2f}"
            stop_mark = " (손절)" if t.stopped_out else ""
            print(
                f"  {t.year}: {t.entry_date_text} @ {t.entry_price:,.2f} -> "
                f"{t.exit_date_text} @ {t.exit_price:,.2f}  {profit_str}% "
                f"({t.holding_days}일){stop_mark}"
            )
    else:
        print("\n거래 없음 (매수/매도 월 데이터 부족)")


def print_batch_result(frame, total: int, cfg: StrategyConfig):
    """배치 순위표 출력."""
    print(f"\n{'=' * 90}")
    print(f"전체 종목 순위 ({describe_strategy(cfg)})")
    print(f"표시 {len(frame)}개 / 전체 {total}개")
    print(f"{'=' * 90}")
    if frame.empty:
        print("조건에 맞는 종목이 없습니다.")
        return

    columns = [
        "symbol_code", "display_name", "trade_count", "win_rate_pct",
        "avg_profit_pct", "total_return_pct", "sharpe_ratio",
    ]
    print(frame[columns].to_string(
        index=False,
        float_format=lambda v: f"{v:.2f}",
        header=["코드", "종목명", "거래", "승률(%)", "평균(%)", "합계(%)", "샤프"],
    ))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="월효과 시즌 매매 백테스트")
    parser.add_argument("--config", type=str, default="config.yaml", help="설정 파일 경로")
    parser.add_argument("--data", type=str, default=None, help="가격 CSV 파일")
    parser.add_argument("--manifest", type=str, default=None, help="분할 데이터 매니페스트 (data_manifest.json)")
    parser.add_argument("--names", type=str, default=None, help="종목 메타데이터 CSV (code,name,market,industry,weight)")
    parser.add_argument("--symbol", type=str, default=None, help="종목 코드 (단일 모드)")
    parser.add_argument("--batch", action="store_true", help="전체 종목 일괄 실행")
    parser.add_argument("--anchor-year", type=int, default=None, help="시작 연도 (기본: 데이터 첫 연도)")
    parser.add_argument("--entry-month", type=int, default=None, help="매수 월 (1~12)")
    parser.add_argument("--exit-month", type=int, default=None, help="매도 월 (1~12)")
    parser.add_argument("--stop-loss", type=float, default=None, help="손절 비율 %% (0~50, 0이면 비활성)")
    parser.add_argument("--sort-by", type=str, default=None, choices=SORT_FIELDS, help="배치 정렬 기준")
    parser.add_argument("--ascending", action="store_true", help="오름차순 정렬")
    parser.add_argument("--top", type=int, default=None, help="배치 결과 출력 개수 (0이면 전체)")
    parser.add_argument("--search", type=str, default=None, help="종목 코드/이름 검색")
    parser.add_argument("--min-win-rate", type=float, default=0.0, help="최소 승률 (%%)")
    parser.add_argument("--market", type=str, default=None, help="시장 필터")
    parser.add_argument("--industry", type=str, default=None, help="업종 필터")
    parser.add_argument("--weighted-only", action="store_true", help="지수 비중 종목만")
    parser.add_argument("--export", type=str, default=None, help="결과 CSV 저장 디렉토리")
    parser.add_argument("--list", action="store_true", help="종목 목록 출력")
    args = parser.parse_args(argv)

    # 설정 로드
    config_path = Path(args.config)
    if config_path.exists():
        config = Config.from_yaml(config_path)
    else:
        print(f"설정 파일 없음: {config_path}, 기본값 사용")
        config = Config()

    # CLI 경로 오버라이드
    if args.manifest:
        config.data.manifest = args.manifest
    elif args.data:
        config.data.manifest = None
        config.data.price_csv = args.data
    if args.names:
        config.data.metadata_csv = args.names

    # 로거
    logger = setup_logger(level=config.log_level, log_dir=config.log_dir)

    provider = build_provider(config)
    if provider is None:
        print("오류: --data 또는 --manifest로 가격 데이터를 지정하세요.")
        return 1

    # 데이터 로드
    try:
        dataset = MarketDataset.from_provider(provider)
        metadata = (
            load_metadata_file(config.data.metadata_csv, encoding=config.data.encoding)
            if config.data.metadata_csv else {}
        )
    except (FileNotFoundError, ManifestError) as e:
        logger.error(f"데이터 로드 실패: {e}")
        print(f"오류: 데이터 로드 실패: {e}")
        return 1

    if len(dataset) == 0:
        print(f"오류: '{dataset.name}'에서 읽은 가격 데이터가 없습니다.")
        return 1

    engine = BacktestEngine(dataset, metadata)

    # 종목 목록 출력
    if args.list:
        print(f"종목 {len(dataset.symbols())}개 ({dataset.name}):")
        for code in dataset.symbols():
            years = dataset.years(code)
            print(f"  - {code} {engine.display_name(code)} ({years[0]}~{years[-1]})")
        return 0

    try:
        cfg = build_strategy(config, dataset, args)
    except ValueError as e:
        print(f"오류: {e}")
        return 1

    export_dir = Path(args.export or config.report.export_dir) if (args.export or config.report.export_dir) else None

    # ─── 배치 모드 ───────────────────────────────────────────────────────
    if args.batch:
        summaries = engine.run_batch(cfg)
        frame = summaries_to_frame(summaries)
        frame = filter_summaries(
            frame,
            search=args.search,
            min_win_rate=args.min_win_rate,
            market=args.market,
            industry=args.industry,
            index_weighted_only=args.weighted_only,
        )
        sort_by = args.sort_by or config.report.sort_by
        descending = False if args.ascending else config.report.descending
        try:
            frame = rank_summaries(frame, sort_by=sort_by, descending=descending)
        except ValueError as e:
            print(f"오류: {e}")
            return 1

        top_n = config.report.top_n if args.top is None else args.top
        print_batch_result(frame.head(top_n) if top_n > 0 else frame, len(summaries), cfg)

        if export_dir:
            path = export_csv(frame, export_dir / f"summary_{cfg.entry_month:02d}_{cfg.exit_month:02d}.csv")
            print(f"\n순위표 저장: {path}")
        return 0

    # ─── 단일 종목 모드 ─────────────────────────────────────────────────
    symbol = args.symbol or dataset.symbols()[0]
    result = engine.run_single(symbol, cfg)
    print_single_result(engine, result)

    if export_dir:
        path = export_csv(trades_to_frame(result.trades), export_dir / f"trades_{symbol}.csv")
        print(f"\n거래 내역 저장: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
