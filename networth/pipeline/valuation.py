from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping

from .periods import Granularity, iter_buckets

PriceMaps = Mapping[str, Mapping[str, float]]


@dataclass
class SeriesSummary:
    data_points: list[dict] = field(default_factory=list)
    start_value: float = 0.0
    end_value: float = 0.0
    change: float = 0.0
    change_pct: float = 0.0


def build_time_axis(
    price_maps: PriceMaps,
    start: date,
    end: date,
    granularity: Granularity,
    has_cash: bool,
    calendar_fill: bool = True,
) -> list[str]:
    """Sorted bucket keys every portfolio is valued on.

    The axis is the union of all priced buckets. With ``calendar_fill`` the
    regular grid over ``[start, end]`` fills gaps inside the priced span, so
    non-trading days get forward-filled values; the grid never extends the
    axis past the first or last priced bucket. A cash-only request (no
    priced buckets) gets the whole grid; no prices and no cash gives an
    empty axis.
    """
    keys: set[str] = set()
    for series in price_maps.values():
        keys.update(series.keys())
    if keys and calendar_fill:
        first, last = min(keys), max(keys)
        keys.update(k for k in iter_buckets(start, end, granularity) if first <= k <= last)
    elif not keys and has_cash:
        keys.update(iter_buckets(start, end, granularity))
    return sorted(keys)


class FillState:
    """Last known price per symbol, carried through a chronological fold.

    Seeded with each symbol's earliest price on the axis, so buckets before
    a symbol's first observation reuse that observation (backward fill).
    Later gaps reuse the most recent observation (forward fill).
    """

    def __init__(self, last_known: dict[str, float] | None = None):
        self.last_known: dict[str, float] = dict(last_known or {})

    @classmethod
    def seed(cls, symbols: Iterable[str], price_maps: PriceMaps, sorted_dates: list[str]) -> "FillState":
        state = cls()
        for symbol in symbols:
            series = price_maps.get(symbol)
            if not series:
                continue
            for key in sorted_dates:
                if key in series:
                    state.last_known[symbol] = series[key]
                    break
        return state

    def price_for(self, symbol: str, bucket: str, price_maps: PriceMaps) -> float | None:
        series = price_maps.get(symbol)
        if series is None:
            return None
        exact = series.get(bucket)
        if exact is not None:
            self.last_known[symbol] = exact
            return exact
        return self.last_known.get(symbol)


def symbol_quantities(holdings) -> dict[str, float]:
    quantities: dict[str, float] = {}
    for holding in holdings:
        if not holding.symbol:
            continue
        quantities[holding.symbol] = quantities.get(holding.symbol, 0.0) + float(holding.quantity)
    return quantities


def value_portfolio(
    quantities: Mapping[str, float],
    cash: float,
    sorted_dates: list[str],
    price_maps: PriceMaps,
) -> dict[str, float]:
    """Per-bucket value of one portfolio, before range filtering.

    Buckets whose total is not strictly positive are dropped.
    """
    state = FillState.seed(quantities.keys(), price_maps, sorted_dates)
    values: dict[str, float] = {}
    for bucket in sorted_dates:
        total = 0.0
        for symbol, qty in quantities.items():
            price = state.price_for(symbol, bucket, price_maps)
            if price is not None:
                total += qty * price
        total += cash
        if total > 0:
            values[bucket] = total
    return values


def summarize(values: Mapping[str, float], start_key: str, end_key: str) -> SeriesSummary:
    points = [
        {"date": key, "value": values[key]}
        for key in sorted(values)
        if start_key <= key <= end_key
    ]
    summary = SeriesSummary(data_points=points)
    if not points:
        return summary
    summary.start_value = points[0]["value"]
    summary.end_value = points[-1]["value"]
    summary.change = summary.end_value - summary.start_value
    if summary.start_value > 0:
        summary.change_pct = summary.change / summary.start_value * 100.0
    return summary


def aggregate(per_portfolio: Iterable[Mapping[str, float]]) -> dict[str, float]:
    totals: dict[str, float] = {}
    for values in per_portfolio:
        for key, value in values.items():
            totals[key] = totals.get(key, 0.0) + value
    return totals
