"""Data providers (yfinance / CSV) normalized into PriceSeries."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from .types import OHLC_COLUMNS, PriceSeries

DEFAULT_TICKERS = [
    "RELIANCE.NS", "TCS.NS", "INFY.NS", "HDFCBANK.NS", "HDFC.NS", "ICICIBANK.NS", "LT.NS", "KOTAKBANK.NS",
    "SBIN.NS", "AXISBANK.NS", "BAJAJFINSV.NS", "BHARTIARTL.NS", "ITC.NS", "HINDUNILVR.NS", "MARUTI.NS", "TATAMOTORS.NS",
    "ONGC.NS", "POWERGRID.NS", "NTPC.NS", "BPCL.NS", "EICHERMOT.NS", "ADANIENT.NS", "ASIANPAINT.NS", "DIVISLAB.NS",
    "SUNPHARMA.NS", "DRREDDY.NS", "TECHM.NS", "WIPRO.NS", "JSWSTEEL.NS", "TATASTEEL.NS", "ULTRACEMCO.NS", "HEROMOTOCO.NS",
    "GRASIM.NS", "CIPLA.NS", "BRITANNIA.NS", "TITAN.NS", "HCLTECH.NS", "COALINDIA.NS", "HDFCLIFE.NS", "ICICIPRULI.NS",
]


@dataclass(frozen=True)
class ScanMode:
    """Lookback/bar-size preset passed to the provider."""

    name: str
    period: str
    interval: str


SCAN_MODES = {
    "swing": ScanMode("swing", period="6mo", interval="1d"),
    "intraday": ScanMode("intraday", period="7d", interval="5m"),
}


def get_mode(name: str) -> ScanMode:
    try:
        return SCAN_MODES[str(name).lower()]
    except KeyError:
        raise ValueError(f"Unknown scan mode {name!r}; expected one of {sorted(SCAN_MODES)}") from None


def _standardize_ohlc_columns(df: pd.DataFrame) -> pd.DataFrame:
    # yfinance can return MultiIndex columns depending on options/version.
    # We standardize to a simple 1-level column index.
    if isinstance(df.columns, pd.MultiIndex):
        df = df.copy()
        # Common yfinance layout: (field, ticker)
        tickers = list(dict.fromkeys(df.columns.get_level_values(-1)))
        if len(tickers) == 1:
            df.columns = df.columns.get_level_values(0)
        else:
            df = df.xs(tickers[0], axis=1, level=-1, drop_level=True)

    rename_map = {}
    for col in df.columns:
        c = str(col).strip().lower()
        if c in {"open", "o"}:
            rename_map[col] = "Open"
        elif c in {"high", "h"}:
            rename_map[col] = "High"
        elif c in {"low", "l"}:
            rename_map[col] = "Low"
        elif c in {"close", "c"}:
            rename_map[col] = "Close"
        elif c in {"adj close", "adjclose"}:
            # Keep adjusted close separate to avoid duplicate "Close" columns.
            rename_map[col] = "AdjClose"
    df = df.rename(columns=rename_map).copy()

    # If provider only has AdjClose, use it as Close.
    if "Close" not in df.columns and "AdjClose" in df.columns:
        df = df.rename(columns={"AdjClose": "Close"})

    missing = [c for c in OHLC_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required OHLC columns: {missing}")
    return df[OHLC_COLUMNS].astype(float)


class YfinanceProvider:
    """Fetch recent history from yfinance.

    Notes:
    - intraday (interval < 1d) has a limited lookback (about 60 days for 5m).
    """

    def fetch(
        self,
        symbol: str,
        period: str = "6mo",
        interval: str = "1d",
        auto_adjust: bool = False,
    ) -> PriceSeries:
        import yfinance as yf  # local import to keep dependency optional in some environments

        df = yf.download(
            tickers=symbol,
            period=period,
            interval=interval,
            auto_adjust=auto_adjust,
            progress=False,
        )
        if df is None or len(df) == 0:
            raise RuntimeError(f"yfinance returned empty data for symbol={symbol}")

        df = _standardize_ohlc_columns(df)
        return PriceSeries.from_frame(df, symbol)

    def fetch_mode(self, symbol: str, mode: ScanMode) -> PriceSeries:
        return self.fetch(symbol, period=mode.period, interval=mode.interval)


class CsvProvider:
    """Load OHLC data from a CSV file.

    Either one file per symbol (``csv_path``), or a directory holding
    ``<SYMBOL>.csv`` files when used through ``fetch_mode``.
    """

    def __init__(self, root: str | Path | None = None):
        self.root = Path(root) if root is not None else None

    def fetch(self, csv_path: str | Path, symbol: str, datetime_col: str = "Date") -> PriceSeries:
        path = Path(csv_path)
        if not path.exists():
            raise FileNotFoundError(str(path))

        df = pd.read_csv(path)
        if datetime_col not in df.columns:
            # try common alternatives
            for cand in ["Datetime", "datetime", "timestamp", "Time", "time", "t"]:
                if cand in df.columns:
                    datetime_col = cand
                    break

        if datetime_col not in df.columns:
            raise ValueError(f"CSV must contain a datetime column. Tried '{datetime_col}' and common aliases.")

        df[datetime_col] = pd.to_datetime(df[datetime_col])
        df = df.set_index(datetime_col).sort_index()

        df = _standardize_ohlc_columns(df)
        return PriceSeries.from_frame(df, symbol)

    def fetch_mode(self, symbol: str, mode: ScanMode) -> PriceSeries:
        # files hold whatever history was exported; the mode is ignored
        if self.root is None:
            raise ValueError("CsvProvider needs a root directory to fetch by symbol")
        return self.fetch(self.root / f"{symbol}.csv", symbol)
