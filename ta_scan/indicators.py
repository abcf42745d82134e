"""Indicator computation utilities.

Every indicator is computed on the CLOSE series and produces one value per
input bar. Early bars use a partial window instead of a NaN warm-up segment,
so outputs are always defined.
"""

from __future__ import annotations

from typing import Union

import numpy as np
import pandas as pd

from .config import IndicatorConfig, SignalConfig
from .types import IndicatorSet, PriceSeries

SeriesLike = Union[PriceSeries, pd.Series]


def _close(series: SeriesLike) -> pd.Series:
    if isinstance(series, PriceSeries):
        return series.close
    return series.astype(float).copy()


def sma(series: SeriesLike, window: int) -> pd.Series:
    """Simple moving average over ``[max(0, i-window+1), i]``."""
    if window <= 0:
        raise ValueError("window must be positive")
    return _close(series).rolling(window=window, min_periods=1).mean()


def ema(series: SeriesLike, span: int) -> pd.Series:
    """Exponential moving average with a stable definition.

    Uses pandas ewm with adjust=False (recursive form, k = 2/(span+1)); the
    first output equals the first input.
    """
    if span <= 0:
        raise ValueError("span must be positive")
    return _close(series).ewm(span=span, adjust=False, min_periods=1).mean()


def rsi(series: SeriesLike, period: int = 14, epsilon: float = 1e-9) -> pd.Series:
    """Relative strength index with Wilder smoothing seeded at zero.

    gain(i) = (gain(i-1)*(period-1) + max(0, delta)) / period, same for loss,
    which is ewm(alpha=1/period, adjust=False). Bars where both smoothed gain
    and loss are still zero (bar 0, or a flat start) read as neutral 50.
    """
    if period <= 0:
        raise ValueError("period must be positive")
    close = _close(series)
    delta = close.diff().fillna(0.0)
    gain = delta.clip(lower=0.0).ewm(alpha=1.0 / period, adjust=False).mean()
    loss = (-delta).clip(lower=0.0).ewm(alpha=1.0 / period, adjust=False).mean()

    rs = gain / loss.where(loss > 0, epsilon)
    out = 100.0 - 100.0 / (1.0 + rs)
    flat = (gain <= 0) & (loss <= 0)
    return out.where(~flat, 50.0)


def macd(
    series: SeriesLike, fast: int = 12, slow: int = 26, signal: int = 9
) -> tuple[pd.Series, pd.Series, pd.Series]:
    """MACD line, signal line, and histogram."""
    close = _close(series)
    macd_line = ema(close, fast) - ema(close, slow)
    signal_line = ema(macd_line, signal)
    hist = macd_line - signal_line
    return macd_line, signal_line, hist


def bollinger(
    series: SeriesLike, window: int = 20, n_std: float = 2.0
) -> tuple[pd.Series, pd.Series, pd.Series]:
    """Bollinger bands as (lower, mid, upper).

    Population std (ddof=0) over the same partial window as the midline.
    """
    close = _close(series)
    mid = sma(close, window)
    std = close.rolling(window=window, min_periods=1).std(ddof=0).fillna(0.0)
    lower = mid - n_std * std
    upper = mid + n_std * std
    return lower, mid, upper


def volatility_proxy(series: PriceSeries) -> float:
    """|high - low| of the latest bar.

    A crude intrabar range; unlike ATR it ignores the gap from the previous
    close.
    """
    last = series.last
    return float(np.abs(last.high - last.low))


def compute_indicators(
    series: PriceSeries,
    config: IndicatorConfig = IndicatorConfig(),
    signal_cfg: SignalConfig = SignalConfig(),
) -> IndicatorSet:
    """All indicators used by the signal engine, aligned with ``series``."""
    close = series.close
    macd_line, macd_sig, macd_hist = macd(close, config.macd_fast, config.macd_slow, config.macd_signal)
    bb_lower, bb_mid, bb_upper = bollinger(close, config.bb_window, config.bb_n_std)
    return IndicatorSet(
        sma_fast=sma(close, config.sma_fast),
        sma_slow=sma(close, config.sma_slow),
        ema_fast=ema(close, config.macd_fast),
        ema_slow=ema(close, config.macd_slow),
        rsi=rsi(close, config.rsi_period, epsilon=signal_cfg.rsi_epsilon),
        macd_line=macd_line,
        macd_signal=macd_sig,
        macd_hist=macd_hist,
        bb_mid=bb_mid,
        bb_upper=bb_upper,
        bb_lower=bb_lower,
        volatility=volatility_proxy(series),
    )
