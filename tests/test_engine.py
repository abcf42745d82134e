"""Tests for the signal engine."""

import numpy as np
import pandas as pd
import pytest

from ta_scan.config import RiskConfig, SignalConfig
from ta_scan.engine import analyze, position_size, recommend, round_price
from ta_scan.types import BUY, HOLD, SELL, InsufficientData, MalformedSeries, PriceSeries

from conftest import make_series

RISK = RiskConfig(capital=100000, risk_pct=1, target_pct=12)


class TestRounding:
    def test_half_up(self):
        assert round_price(1.005) == 1.01
        assert round_price(2.675) == 2.68

    def test_half_even(self):
        assert round_price(1.005, "half_even") == 1.0
        assert round_price(1.015, "half_even") == 1.02

    def test_plain(self):
        assert round_price(159.20000000000002) == 159.2


class TestRecommend:
    @pytest.mark.parametrize(
        "score, expected",
        [(-4, SELL), (-3, SELL), (-2, SELL), (-1, HOLD), (0, HOLD), (1, HOLD), (2, BUY), (3, BUY), (4, BUY)],
    )
    def test_cutoffs(self, score, expected):
        assert recommend(score) == expected


class TestPositionSize:
    def test_floor(self):
        # risk 1000 / per-share 8 -> 125
        assert position_size(160.0, 152.0, RISK) == 125

    def test_zero_when_budget_below_one_share(self):
        tiny = RiskConfig(capital=100, risk_pct=1, target_pct=12)
        assert position_size(160.0, 152.0, tiny) == 0

    def test_epsilon_guard(self):
        qty = position_size(100.0, 100.0, RISK, SignalConfig(position_epsilon=0.5))
        assert qty == 2000


class TestScenarios:
    def test_uptrend(self, uptrend):
        a = analyze(uptrend, RISK)
        assert a.last == 160.0
        assert a.last > a.sma50
        assert a.macd > 0
        assert a.rsi14 > 70
        assert a.recommendation != SELL
        # +1 trend, -1 overbought, +1 MACD, 0 inside bands
        assert a.score == 1
        assert a.recommendation == HOLD
        assert a.reasons == (
            "Price above 50 SMA (uptrend)",
            "RSI > 70 (overbought)",
            "MACD bullish",
            "Price within Bollinger bands",
        )

    def test_uptrend_price_levels(self, uptrend):
        a = analyze(uptrend, RISK)
        assert a.entry == 160.0
        assert a.stop == 152.0
        assert a.target == 179.2
        assert a.expected_profit_pct == 12.0
        assert a.quantity == 125
        assert a.position_value == 20000.0
        assert a.risk_amount == 1000.0
        assert a.confidence == 60

    def test_buy_entry_discount(self, uptrend):
        a = analyze(uptrend, RISK, SignalConfig(buy_threshold=1))
        assert a.recommendation == BUY
        assert a.entry == 159.2
        assert a.stop == 152.0
        assert a.quantity == 138  # floor(1000 / 7.2)
        assert a.position_value == 21969.6
        assert a.expected_profit_pct == 12.56

    def test_flat(self, flat):
        a = analyze(flat, RISK)
        assert a.rsi14 == 50.0
        assert a.bb_upper == a.bb_lower
        assert a.macd == pytest.approx(0.0, abs=1e-9)
        # -1 trend (not above), 0 RSI, MACD abstains, +1 at lower band
        assert a.score == 0
        assert a.recommendation == HOLD
        assert "MACD flat (no crossover)" in a.reasons
        assert "RSI 50.0 (neutral)" in a.reasons

    def test_downtrend_not_buy(self):
        s = make_series(np.arange(160, 100, -1), symbol="DOWN")
        a = analyze(s, RISK)
        assert a.last < a.sma50
        assert a.recommendation != BUY
        assert a.reasons[0] == "Price below 50 SMA (downtrend)"
        assert a.reasons[1] == "RSI < 30 (oversold)"

    def test_zero_quantity_is_valid(self, uptrend):
        a = analyze(uptrend, RiskConfig(capital=100, risk_pct=1, target_pct=12))
        assert a.quantity == 0
        assert a.position_value == 0.0

    def test_epsilon_guard_through_analyze(self, uptrend):
        # a 0.001% stop rounds onto the entry price
        a = analyze(uptrend, RISK, SignalConfig(stop_pct=0.001, position_epsilon=0.5))
        assert a.entry == a.stop == 160.0
        assert a.quantity == 2000
        assert a.position_value == 320000.0


class TestFailures:
    def test_three_points_insufficient(self):
        with pytest.raises(InsufficientData) as exc:
            analyze(make_series([100.0, 101.0, 102.0]), RISK)
        assert exc.value.kind == "insufficient_data"
        assert exc.value.symbol == "TEST"

    def test_min_length_boundary(self):
        closes = np.linspace(100, 110, 15)
        with pytest.raises(InsufficientData):
            analyze(make_series(closes[:14]), RISK)
        assert analyze(make_series(closes), RISK).symbol == "TEST"

    def test_configurable_min_length(self):
        a = analyze(make_series([100.0, 101.0, 102.0]), RISK, SignalConfig(min_length=3))
        assert a.last == 102.0

    def test_nan_price(self, random_walk):
        df = random_walk.df.copy()
        df.iloc[-1, df.columns.get_loc("Close")] = np.nan
        with pytest.raises(MalformedSeries):
            analyze(PriceSeries(df=df, symbol="BAD"), RISK)

    def test_non_positive_price(self, random_walk):
        df = random_walk.df.copy()
        df.iloc[5, df.columns.get_loc("Low")] = 0.0
        with pytest.raises(MalformedSeries):
            analyze(PriceSeries(df=df, symbol="BAD"), RISK)

    def test_unsorted_timestamps(self, random_walk):
        df = random_walk.df.iloc[::-1]
        with pytest.raises(MalformedSeries):
            analyze(PriceSeries(df=df, symbol="BAD"), RISK)

    def test_price_below_rounding_precision(self):
        with pytest.raises(MalformedSeries) as exc:
            analyze(make_series([0.004] * 20, spread=0.0, symbol="PENNY"), RISK)
        assert exc.value.kind == "malformed_series"
        assert "rounding precision" in exc.value.message

    def test_smallest_roundable_price(self):
        a = analyze(make_series([0.006] * 20, spread=0.0), RISK)
        assert a.entry == 0.01
        assert a.expected_profit_pct == 0.0


class TestProperties:
    def test_repeatable(self, random_walk):
        assert analyze(random_walk, RISK) == analyze(random_walk, RISK)

    def test_input_untouched(self, random_walk):
        before = random_walk.df.copy()
        analyze(random_walk, RISK)
        pd.testing.assert_frame_equal(random_walk.df, before)

    @pytest.mark.parametrize("seed", range(10))
    def test_score_bounds(self, seed):
        rng = np.random.default_rng(seed)
        closes = 50.0 * np.exp(np.cumsum(rng.normal(0, 0.03, size=80)))
        a = analyze(make_series(closes, symbol=f"S{seed}"), RISK)
        assert isinstance(a.score, int)
        assert -4 <= a.score <= 4
        assert a.recommendation == recommend(a.score)
        assert a.quantity >= 0
        assert len(a.reasons) == 4
