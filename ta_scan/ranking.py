"""Leaderboard construction."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Union

from .types import Analysis, AnalysisError, Failure

Outcome = Union[Analysis, Failure, AnalysisError]


@dataclass(frozen=True)
class Leaderboard:
    ranked: tuple[Analysis, ...]
    failures: tuple[Failure, ...]

    def top(self, n: int = 50) -> tuple[Analysis, ...]:
        return self.ranked[: max(0, int(n))]

    def all_rows(self) -> tuple[Union[Analysis, Failure], ...]:
        """Ranked analyses followed by failures (full-results view)."""
        return self.ranked + self.failures

    def get(self, symbol: str) -> Analysis | None:
        for a in self.ranked:
            if a.symbol == symbol:
                return a
        return None

    def __len__(self) -> int:
        return len(self.ranked) + len(self.failures)


def rank(results: Iterable[tuple[str, Outcome]]) -> Leaderboard:
    """Sort analyses by expected profit % (desc), ties by symbol (asc).

    Failures never enter the ranked list; they keep their input order.
    """
    analyses: list[tuple[str, Analysis]] = []
    failures: list[Failure] = []
    for symbol, outcome in results:
        if isinstance(outcome, Analysis):
            analyses.append((symbol, outcome))
        elif isinstance(outcome, AnalysisError):
            failures.append(Failure(symbol=symbol, kind=outcome.kind, message=outcome.message))
        elif isinstance(outcome, Failure):
            failures.append(outcome)
        else:
            raise TypeError(f"unsupported outcome for {symbol}: {type(outcome).__name__}")

    analyses.sort(key=lambda p: (-p[1].expected_profit_pct, p[0]))
    return Leaderboard(ranked=tuple(a for _, a in analyses), failures=tuple(failures))
