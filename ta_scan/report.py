"""Leaderboard tables, detail text and candlestick charts."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from .ranking import Leaderboard
from .types import Analysis, PriceSeries


def fmt(x: float, currency: str = "") -> str:
    s = f"{float(x):,.2f}"
    return f"{currency} {s}" if currency else s


def leaderboard_frame(board: Leaderboard, n: int = 50) -> pd.DataFrame:
    """Top-n ranked rows."""
    rows = [
        {
            "Symbol": a.symbol,
            "Rec": a.recommendation,
            "Entry": a.entry,
            "Target": a.target,
            "Exp %": a.expected_profit_pct,
        }
        for a in board.top(n)
    ]
    return pd.DataFrame(rows, columns=["Symbol", "Rec", "Entry", "Target", "Exp %"])


def results_frame(board: Leaderboard, n: int = 200) -> pd.DataFrame:
    """Full results: ranked rows, then failures with their message in Error."""
    rows = []
    for row in board.all_rows()[: max(0, int(n))]:
        if isinstance(row, Analysis):
            rows.append({"Symbol": row.symbol, "Rec": row.recommendation, "Exp %": row.expected_profit_pct, "Error": ""})
        else:
            rows.append({"Symbol": row.symbol, "Rec": "", "Exp %": float("nan"), "Error": row.message})
    return pd.DataFrame(rows, columns=["Symbol", "Rec", "Exp %", "Error"])


def explain(a: Analysis, currency: str = "") -> str:
    """Multi-line detail text for one symbol, reasons last."""
    lines = [
        f"Symbol: {a.symbol}",
        f"Recommendation: {a.recommendation}",
        f"Entry: {fmt(a.entry, currency)}",
        f"Target: {fmt(a.target, currency)}",
        f"Stop-loss: {fmt(a.stop, currency)}",
        f"Qty: {a.quantity} (~{fmt(a.position_value, currency)})",
        f"Confidence proxy: {a.confidence}%",
        "",
        "Reasons:",
    ]
    lines.extend(f"- {r}" for r in a.reasons)
    return "\n".join(lines)


def plot_candles(series: PriceSeries, path: str | Path, title: str | None = None) -> Path:
    """Save a candlestick chart of ``series`` as PNG."""
    import matplotlib.pyplot as plt

    df = series.df
    x = range(len(df))
    up = df["Close"] >= df["Open"]
    colors = ["tab:green" if u else "tab:red" for u in up]

    fig, ax = plt.subplots(figsize=(10, 3.5))
    ax.vlines(x, df["Low"], df["High"], colors=colors, linewidth=0.8)
    body_low = df[["Open", "Close"]].min(axis=1)
    body_h = (df["Close"] - df["Open"]).abs()
    ax.bar(x, body_h, bottom=body_low, color=colors, width=0.6)

    step = max(1, len(df) // 8)
    ticks = list(range(0, len(df), step))
    ax.set_xticks(ticks)
    ax.set_xticklabels([df.index[i].strftime("%Y-%m-%d") for i in ticks], rotation=30, ha="right")
    ax.set_title(title or series.symbol)
    fig.tight_layout()

    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out, dpi=150)
    plt.close(fig)
    return out
