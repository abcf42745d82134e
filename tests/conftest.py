"""Shared series builders for the test suite."""

import numpy as np
import pandas as pd
import pytest

from ta_scan.types import HOLD, Analysis, PriceSeries


def make_series(closes, symbol="TEST", spread=0.5, start="2024-01-01", freq="D"):
    """OHLC series with open=close and high/low = close +/- spread."""
    closes = np.asarray(closes, dtype=float)
    idx = pd.date_range(start, periods=len(closes), freq=freq)
    df = pd.DataFrame(
        {"Open": closes, "High": closes + spread, "Low": closes - spread, "Close": closes},
        index=idx,
    )
    return PriceSeries(df=df, symbol=symbol)


def make_analysis(symbol, expected_profit_pct, score=0, recommendation=HOLD):
    return Analysis(
        symbol=symbol,
        last=100.0,
        sma20=100.0,
        sma50=100.0,
        rsi14=50.0,
        macd=0.0,
        macd_signal=0.0,
        macd_hist=0.0,
        bb_lower=95.0,
        bb_mid=100.0,
        bb_upper=105.0,
        volatility=1.0,
        score=score,
        recommendation=recommendation,
        entry=100.0,
        stop=95.0,
        target=112.0,
        quantity=200,
        position_value=20000.0,
        expected_profit_pct=expected_profit_pct,
        risk_amount=1000.0,
        reasons=("Price within Bollinger bands",),
    )


@pytest.fixture
def uptrend():
    """60 bars, close 101..160 in steps of 1."""
    return make_series(np.arange(101, 161), symbol="UP")


@pytest.fixture
def flat():
    """30 bars, every OHLC field = 100."""
    return make_series([100.0] * 30, symbol="FLAT", spread=0.0)


@pytest.fixture
def random_walk():
    rng = np.random.default_rng(7)
    closes = 100.0 * np.exp(np.cumsum(rng.normal(0, 0.02, size=120)))
    return make_series(closes, symbol="RW")
