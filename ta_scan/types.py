"""Shared types for the scanner.

The guiding principle is to keep the runtime objects small and explicit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Iterator

import numpy as np
import pandas as pd

OHLC_COLUMNS = ["Open", "High", "Low", "Close"]

BUY = "BUY"
SELL = "SELL"
HOLD = "HOLD"


class AnalysisError(ValueError):
    """Base class for typed per-symbol analysis failures."""

    kind = "analysis_error"

    def __init__(self, symbol: str, message: str):
        super().__init__(f"{symbol}: {message}")
        self.symbol = symbol
        self.message = message


class InsufficientData(AnalysisError):
    """Series shorter than the minimum length threshold."""

    kind = "insufficient_data"


class MalformedSeries(AnalysisError):
    """Non-finite or non-positive prices, or a broken time axis."""

    kind = "malformed_series"


@dataclass(frozen=True)
class PricePoint:
    """OHLC point.

    All prices must be float (already adjusted to the desired currency scale).
    """

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float


@dataclass(frozen=True)
class PriceSeries:
    """Ordered OHLC history for one symbol.

    ``df`` has columns Open, High, Low, Close and a datetime index. Treat it as
    read-only; every indicator works on copies.
    """

    df: pd.DataFrame
    symbol: str

    @classmethod
    def from_points(cls, symbol: str, points: Iterable[PricePoint]) -> "PriceSeries":
        """Build from points; same null-dropping and ordering rules as from_frame."""
        rows = [(p.timestamp, p.open, p.high, p.low, p.close) for p in points]
        df = pd.DataFrame(rows, columns=["Date"] + OHLC_COLUMNS).set_index("Date")
        df.index = pd.to_datetime(df.index)
        return cls.from_frame(df, symbol)

    @classmethod
    def from_frame(cls, df: pd.DataFrame, symbol: str) -> "PriceSeries":
        """Build from an already-standardized OHLC frame.

        Rows with any null OHLC field are dropped, duplicate timestamps keep
        the last row, and the index is sorted.
        """
        missing = [c for c in OHLC_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(f"Missing required OHLC columns: {missing}")
        out = df[OHLC_COLUMNS].astype(float).dropna(how="any")
        out = out[~out.index.duplicated(keep="last")].sort_index()
        if out.empty:
            raise MalformedSeries(symbol, "empty series")
        return cls(df=out, symbol=symbol)

    def __len__(self) -> int:
        return int(len(self.df))

    def __iter__(self) -> Iterator[PricePoint]:
        for ts, row in zip(self.df.index, self.df.itertuples(index=False)):
            yield PricePoint(ts.to_pydatetime(), float(row[0]), float(row[1]), float(row[2]), float(row[3]))

    @property
    def close(self) -> pd.Series:
        return self.df["Close"].copy()

    @property
    def last(self) -> PricePoint:
        ts = self.df.index[-1]
        row = self.df.iloc[-1]
        return PricePoint(
            ts.to_pydatetime(),
            float(row["Open"]),
            float(row["High"]),
            float(row["Low"]),
            float(row["Close"]),
        )

    def validate(self) -> None:
        """Raise MalformedSeries unless prices are positive finite and time increases."""
        values = self.df[OHLC_COLUMNS].to_numpy(dtype=float)
        if values.size == 0:
            raise MalformedSeries(self.symbol, "empty series")
        if not np.isfinite(values).all():
            raise MalformedSeries(self.symbol, "non-finite price")
        if (values <= 0).any():
            raise MalformedSeries(self.symbol, "non-positive price")
        if not self.df.index.is_monotonic_increasing or self.df.index.has_duplicates:
            raise MalformedSeries(self.symbol, "timestamps not strictly increasing")


@dataclass(frozen=True)
class IndicatorSet:
    """Indicator arrays aligned index-for-index with the input series."""

    sma_fast: pd.Series
    sma_slow: pd.Series
    ema_fast: pd.Series
    ema_slow: pd.Series
    rsi: pd.Series
    macd_line: pd.Series
    macd_signal: pd.Series
    macd_hist: pd.Series
    bb_mid: pd.Series
    bb_upper: pd.Series
    bb_lower: pd.Series
    volatility: float

    def latest(self, name: str) -> float:
        return float(getattr(self, name).iloc[-1])


@dataclass(frozen=True)
class Analysis:
    """Signal engine output for one symbol. Prices are display-ready (2 dp)."""

    symbol: str
    last: float

    sma20: float
    sma50: float
    rsi14: float
    macd: float
    macd_signal: float
    macd_hist: float
    bb_lower: float
    bb_mid: float
    bb_upper: float
    volatility: float  # |high - low| of the latest bar, not a true ATR

    score: int  # -4..+4
    recommendation: str  # BUY/SELL/HOLD
    entry: float
    stop: float
    target: float
    quantity: int
    position_value: float
    expected_profit_pct: float
    risk_amount: float
    reasons: tuple[str, ...] = field(default_factory=tuple)

    @property
    def confidence(self) -> int:
        """Rough confidence proxy in percent (50 +/- 10 per vote)."""
        return 50 + self.score * 10


@dataclass(frozen=True)
class Failure:
    """A symbol that could not be analyzed."""

    symbol: str
    kind: str  # 'no_data' / 'insufficient_data' / 'malformed_series'
    message: str

    @classmethod
    def from_error(cls, err: AnalysisError) -> "Failure":
        return cls(symbol=err.symbol, kind=err.kind, message=err.message)
