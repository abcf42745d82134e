"""Scan a ticker universe and print the leaderboard.

Example (yfinance daily):
    python -m scripts.scan_universe --symbols RELIANCE.NS,TCS.NS,INFY.NS --top 10

Example (CSV directory holding <SYMBOL>.csv files, with a chart):
    python -m scripts.scan_universe --csv_dir data --symbols AAA,BBB \
      --details AAA --plot outputs/AAA.png
"""

from __future__ import annotations

import argparse
import logging

import pandas as pd

from ta_scan.config import RiskConfig
from ta_scan.data_provider import SCAN_MODES, CsvProvider, YfinanceProvider
from ta_scan.report import explain, leaderboard_frame, plot_candles, results_frame
from ta_scan.scanner import SeriesCache, parse_symbols, scan_universe


def main():
    p = argparse.ArgumentParser()
    p.add_argument("--symbols", type=str, default="", help="Comma separated tickers (default: built-in NSE list).")
    p.add_argument("--capital", type=float, default=100000.0)
    p.add_argument("--risk", type=float, default=1.0, help="Percent of capital risked per trade.")
    p.add_argument("--target", type=float, default=12.0, help="Target profit percent.")
    p.add_argument("--mode", type=str, default="swing", choices=sorted(SCAN_MODES))
    p.add_argument("--top", type=int, default=50)
    p.add_argument("--all", action="store_true", help="Also print the full results table.")
    p.add_argument("--csv_dir", type=str, default=None, help="Read <SYMBOL>.csv files instead of yfinance.")
    p.add_argument("--details", type=str, default=None, help="Print the detail view for one symbol.")
    p.add_argument("--plot", type=str, default=None, help="Save a candlestick PNG for --details symbol.")
    p.add_argument("--currency", type=str, default="₹")
    p.add_argument("-v", "--verbose", action="store_true")
    args = p.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    risk = RiskConfig(capital=args.capital, risk_pct=args.risk, target_pct=args.target)
    provider = CsvProvider(args.csv_dir) if args.csv_dir else YfinanceProvider()
    cache = SeriesCache()

    board = scan_universe(parse_symbols(args.symbols), provider, risk=risk, mode=args.mode, cache=cache)

    with pd.option_context("display.max_rows", None, "display.width", 120):
        top = leaderboard_frame(board, n=args.top)
        print("No results" if top.empty else top.to_string(index=False))
        if args.all:
            print()
            print(results_frame(board).to_string(index=False))

    if args.details:
        a = board.get(args.details)
        if a is None:
            print(f"No details available for {args.details}")
            return
        print()
        print(explain(a, currency=args.currency))

        if args.plot:
            series = cache.get(args.details)
            if series is None:
                print("No chart data")
                return
            print("Saved chart:", plot_candles(series, args.plot))


if __name__ == "__main__":
    main()
