"""Universe scan: fetch -> analyze -> rank, one symbol at a time."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional, Protocol

from .config import IndicatorConfig, RiskConfig, SignalConfig
from .data_provider import DEFAULT_TICKERS, ScanMode, get_mode
from .engine import analyze
from .ranking import Leaderboard, Outcome, rank
from .types import AnalysisError, Failure, PriceSeries

logger = logging.getLogger(__name__)


class SeriesProvider(Protocol):
    def fetch_mode(self, symbol: str, mode: ScanMode) -> PriceSeries: ...


class SeriesCache:
    """Symbol -> PriceSeries map owned by the caller.

    Filled by ``scan_universe`` and read back when showing details or charts.
    No eviction; call ``clear`` between unrelated scans if needed.
    """

    def __init__(self):
        self._data: dict[str, PriceSeries] = {}

    def get(self, symbol: str) -> Optional[PriceSeries]:
        return self._data.get(symbol)

    def put(self, series: PriceSeries) -> None:
        self._data[series.symbol] = series

    def clear(self) -> None:
        self._data.clear()

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)


def parse_symbols(text: str | None) -> list[str]:
    """Comma separated symbols; empty input means the default universe."""
    symbols = [s.strip() for s in (text or "").split(",")]
    symbols = [s for s in symbols if s]
    return symbols or list(DEFAULT_TICKERS)


def scan_universe(
    symbols: Iterable[str],
    provider: SeriesProvider,
    risk: RiskConfig = RiskConfig(),
    mode: str | ScanMode = "swing",
    cache: Optional[SeriesCache] = None,
    signal_cfg: SignalConfig = SignalConfig(),
    ind_cfg: IndicatorConfig = IndicatorConfig(),
    min_fetch_points: int = 5,
) -> Leaderboard:
    """Analyze every symbol sequentially and rank the results.

    Fetch errors and short downloads become ``no_data`` failures; analysis
    errors keep their own kind. Neither aborts the batch.
    """
    scan_mode = mode if isinstance(mode, ScanMode) else get_mode(mode)
    results: list[tuple[str, Outcome]] = []

    for sym in symbols:
        try:
            series = provider.fetch_mode(sym, scan_mode)
        except Exception:
            logger.exception("fetch failed for %s", sym)
            results.append((sym, Failure(symbol=sym, kind="no_data", message="no data")))
            continue

        if len(series) < min_fetch_points:
            logger.warning("too few points for %s: %d", sym, len(series))
            results.append((sym, Failure(symbol=sym, kind="no_data", message="no data")))
            continue

        if cache is not None:
            cache.put(series)

        try:
            results.append((sym, analyze(series, risk, signal_cfg, ind_cfg)))
        except AnalysisError as exc:
            logger.info("analysis failed for %s: %s", sym, exc.message)
            results.append((sym, exc))

    board = rank(results)
    logger.info("scanned %d symbols: %d ranked, %d failed", len(board), len(board.ranked), len(board.failures))
    return board
