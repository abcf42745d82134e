"""Signal engine: one PriceSeries + RiskConfig -> one Analysis.

Scoring is four independent +/-1 votes (trend, momentum, MACD, Bollinger)
evaluated in that order on the latest bar. Each vote appends a reason string,
so ``reasons`` reads in evaluation order.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal

import numpy as np

from .config import IndicatorConfig, RiskConfig, SignalConfig
from .indicators import compute_indicators
from .types import BUY, HOLD, SELL, Analysis, IndicatorSet, InsufficientData, MalformedSeries, PriceSeries

_ROUNDING = {"half_up": ROUND_HALF_UP, "half_even": ROUND_HALF_EVEN}


def round_price(x: float, mode: str = "half_up") -> float:
    """Round to 2 decimals on the decimal representation of ``x``.

    'half_up' rounds ties away from zero (1.005 -> 1.01), 'half_even' is
    banker's rounding.
    """
    q = Decimal(repr(float(x))).quantize(Decimal("0.01"), rounding=_ROUNDING[mode])
    return float(q)


def recommend(score: int, cfg: SignalConfig = SignalConfig()) -> str:
    """Hard cutoffs on the integer score."""
    if score >= cfg.buy_threshold:
        return BUY
    if score <= cfg.sell_threshold:
        return SELL
    return HOLD


def score_votes(last: float, ind: IndicatorSet, cfg: SignalConfig = SignalConfig()) -> tuple[int, list[str]]:
    """Return (score, reasons) for the latest bar."""
    score = 0
    reasons: list[str] = []

    # 1) trend vs slow SMA
    sma_slow = ind.latest("sma_slow")
    if np.isfinite(sma_slow):
        if last > sma_slow:
            score += 1
            reasons.append("Price above 50 SMA (uptrend)")
        else:
            score -= 1
            reasons.append("Price below 50 SMA (downtrend)")
    else:
        reasons.append("50 SMA unavailable (trend not scored)")

    # 2) momentum
    rsi_now = ind.latest("rsi")
    if rsi_now < cfg.rsi_oversold:
        score += 1
        reasons.append(f"RSI < {cfg.rsi_oversold:g} (oversold)")
    elif rsi_now > cfg.rsi_overbought:
        score -= 1
        reasons.append(f"RSI > {cfg.rsi_overbought:g} (overbought)")
    else:
        reasons.append(f"RSI {rsi_now:.1f} (neutral)")

    # 3) MACD line vs signal line
    macd_now = ind.latest("macd_line")
    macd_sig = ind.latest("macd_signal")
    if math.isclose(macd_now, macd_sig, rel_tol=0.0, abs_tol=cfg.tie_tolerance):
        reasons.append("MACD flat (no crossover)")
    elif macd_now > macd_sig:
        score += 1
        reasons.append("MACD bullish")
    else:
        score -= 1
        reasons.append("MACD bearish")

    # 4) Bollinger position (lower band checked first)
    bb_low = ind.latest("bb_lower")
    bb_up = ind.latest("bb_upper")
    if last <= bb_low:
        score += 1
        reasons.append("Price near lower Bollinger (value)")
    elif last >= bb_up:
        score -= 1
        reasons.append("Price near upper Bollinger (extended)")
    else:
        reasons.append("Price within Bollinger bands")

    return score, reasons


def position_size(entry: float, stop: float, risk: RiskConfig, cfg: SignalConfig = SignalConfig()) -> int:
    """Whole shares such that (entry - stop) * qty stays within the risk budget."""
    per_share_risk = max(cfg.position_epsilon, abs(entry - stop))
    return max(0, int(math.floor(risk.risk_amount / per_share_risk)))


def analyze(
    series: PriceSeries,
    risk: RiskConfig = RiskConfig(),
    signal_cfg: SignalConfig = SignalConfig(),
    ind_cfg: IndicatorConfig = IndicatorConfig(),
) -> Analysis:
    """Analyze one symbol.

    Raises InsufficientData when the series is shorter than
    ``signal_cfg.min_length`` and MalformedSeries for non-finite or
    non-positive prices, or a last close that rounds to a zero entry.
    """
    if len(series) < signal_cfg.min_length:
        raise InsufficientData(
            series.symbol, f"{len(series)} points, need at least {signal_cfg.min_length}"
        )
    series.validate()

    ind = compute_indicators(series, ind_cfg, signal_cfg)
    last = float(series.df["Close"].iloc[-1])

    score, reasons = score_votes(last, ind, signal_cfg)
    rec = recommend(score, signal_cfg)

    mode = signal_cfg.rounding
    if rec == BUY:
        entry = round_price(last * (1.0 - signal_cfg.entry_discount_pct / 100.0), mode)
    else:
        entry = round_price(last, mode)
    if entry <= 0:
        raise MalformedSeries(series.symbol, f"price {last!r} below rounding precision")
    stop = round_price(last * (1.0 - signal_cfg.stop_pct / 100.0), mode)
    target = round_price(last * (1.0 + float(risk.target_pct) / 100.0), mode)

    qty = position_size(entry, stop, risk, signal_cfg)
    pos_value = round_price(qty * entry, mode)
    expected_profit_pct = round_price((target - entry) / entry * 100.0, mode)

    return Analysis(
        symbol=series.symbol,
        last=last,
        sma20=ind.latest("sma_fast"),
        sma50=ind.latest("sma_slow"),
        rsi14=ind.latest("rsi"),
        macd=ind.latest("macd_line"),
        macd_signal=ind.latest("macd_signal"),
        macd_hist=ind.latest("macd_hist"),
        bb_lower=ind.latest("bb_lower"),
        bb_mid=ind.latest("bb_mid"),
        bb_upper=ind.latest("bb_upper"),
        volatility=ind.volatility,
        score=int(score),
        recommendation=rec,
        entry=entry,
        stop=stop,
        target=target,
        quantity=qty,
        position_value=pos_value,
        expected_profit_pct=expected_profit_pct,
        risk_amount=risk.risk_amount,
        reasons=tuple(reasons),
    )
