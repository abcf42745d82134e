"""Configuration objects.

Style rules:
- keep signatures stable (no alias chaos)
- prefer explicit field names
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class IndicatorConfig:
    """Indicator window configuration."""

    sma_fast: int = 20
    sma_slow: int = 50
    rsi_period: int = 14

    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9

    bb_window: int = 20
    bb_n_std: float = 2.0


@dataclass(frozen=True)
class SignalConfig:
    """Scoring, pricing and sizing constants.

    Earlier copies of the scanner disagreed on several of these; they are
    pinned here instead.
    """

    # analyze() refuses shorter series (RSI/MACD/Bollinger need history)
    min_length: int = 15

    # guards: per-share risk floor and RSI loss floor
    position_epsilon: float = 1e-3
    rsi_epsilon: float = 1e-9

    rsi_oversold: float = 30.0
    rsi_overbought: float = 70.0

    buy_threshold: int = 2
    sell_threshold: int = -2

    # BUY entries are a limit order below last close
    entry_discount_pct: float = 0.5
    # flat stop below last close, independent of direction
    stop_pct: float = 5.0

    rounding: str = "half_up"  # 'half_up' or 'half_even'

    # MACD line and signal closer than this count as "no crossover"
    tie_tolerance: float = 1e-9

    def __post_init__(self):
        if self.rounding not in ("half_up", "half_even"):
            raise ValueError(f"rounding must be 'half_up' or 'half_even', got {self.rounding!r}")
        if self.min_length < 1:
            raise ValueError("min_length must be positive")
        if self.buy_threshold <= self.sell_threshold:
            raise ValueError("buy_threshold must be above sell_threshold")


@dataclass(frozen=True)
class RiskConfig:
    """Per-scan capital and risk knobs. Percentages are in percent units."""

    capital: float = 100_000.0
    risk_pct: float = 1.0
    target_pct: float = 12.0

    def __post_init__(self):
        for name in ("capital", "risk_pct", "target_pct"):
            v = float(getattr(self, name))
            if not math.isfinite(v) or v <= 0:
                raise ValueError(f"{name} must be positive, got {v}")

    @property
    def risk_amount(self) -> float:
        return float(self.capital) * float(self.risk_pct) / 100.0

    @classmethod
    def from_params_dict(cls, d: dict) -> "RiskConfig":
        """Create RiskConfig from a loose dict (e.g. form or JSON input).

        Accepts snake_case or the camelCase keys used by the browser version.
        Unknown keys are ignored.
        """
        mapping = {
            "capital": "capital",
            "risk_pct": "risk_pct",
            "riskPct": "risk_pct",
            "risk": "risk_pct",
            "target_pct": "target_pct",
            "targetPct": "target_pct",
        }
        kwargs = {}
        for k, v in (d or {}).items():
            if k in mapping and v is not None:
                kwargs[mapping[k]] = float(v)
        return cls(**kwargs)
