from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable

import structlog

from ..config import settings
from ..utils import local_today
from .errors import AuthorizationError, RequestCancelled, ValidationError
from .periods import Granularity, bucket_key, default_start, lookup_window, parse_granularity
from .ports import CashStore, HoldingStore, Portfolio, PortfolioStore, PriceHistoryProvider
from .prices import build_price_series
from .valuation import aggregate, build_time_axis, summarize, symbol_quantities, value_portfolio

log = structlog.get_logger()


@dataclass
class PortfolioPerformance:
    id: str
    name: str
    data_points: list[dict]
    start_value: float = 0.0
    end_value: float = 0.0
    change: float = 0.0
    change_pct: float = 0.0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "data_points": self.data_points,
            "start_value": self.start_value,
            "end_value": self.end_value,
            "change": self.change,
            "change_pct": self.change_pct,
        }


@dataclass
class PerformanceResult:
    period: str
    data_points: list[dict] = field(default_factory=list)
    start_value: float = 0.0
    end_value: float = 0.0
    change: float = 0.0
    change_pct: float = 0.0
    portfolios: list[PortfolioPerformance] | None = None

    def to_dict(self) -> dict:
        out = {
            "period": self.period,
            "data_points": self.data_points,
            "start_value": self.start_value,
            "end_value": self.end_value,
            "change": self.change,
            "change_pct": self.change_pct,
        }
        if self.portfolios is not None:
            out["portfolios"] = [p.to_dict() for p in self.portfolios]
        return out


@dataclass
class _Scope:
    portfolio: Portfolio
    quantities: dict[str, float]
    cash: float


def _parse_date(val: str | None, field_name: str) -> date | None:
    if val is None or not str(val).strip():
        return None
    try:
        return datetime.strptime(str(val).strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid {field_name} format. Use YYYY-MM-DD") from None


def _parse_portfolio_id(val: str | None) -> str | None:
    if val is None or not str(val).strip():
        return None
    try:
        return str(uuid.UUID(str(val).strip()))
    except ValueError:
        raise ValidationError("Invalid portfolio ID") from None


def resolve_range(
    granularity: Granularity,
    start_date: str | None,
    end_date: str | None,
    today: date,
) -> tuple[date, date]:
    end = _parse_date(end_date, "end_date") or today
    start = _parse_date(start_date, "start_date") or default_start(end, granularity)
    if start > end:
        raise ValidationError("start_date must be <= end_date")
    return start, end


class PerformanceService:
    """Builds the portfolio performance chart for one request.

    Every call re-reads portfolios, holdings, cash and prices; nothing is
    cached between requests.
    """

    def __init__(
        self,
        portfolios: PortfolioStore,
        holdings: HoldingStore,
        cash: CashStore,
        prices: PriceHistoryProvider,
        *,
        workers: int | None = None,
        symbol_timeout: float | None = None,
        time_budget: float | None = None,
        calendar_fill: bool | None = None,
        today: Callable[[], date] | None = None,
    ):
        self.portfolios = portfolios
        self.holdings = holdings
        self.cash = cash
        self.prices = prices
        self.workers = workers if workers is not None else settings.price_fetch_workers
        self.symbol_timeout = symbol_timeout if symbol_timeout is not None else settings.price_fetch_timeout_seconds
        self.time_budget = time_budget if time_budget is not None else settings.request_time_budget_seconds
        self.calendar_fill = bool(settings.axis_fill_calendar) if calendar_fill is None else calendar_fill
        self.today = today or (lambda: local_today(settings.local_tz, settings.daily_cutover))

    def performance(
        self,
        user_id: str,
        period: str | None = None,
        portfolio_id: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        deadline: float | None = None,
    ) -> PerformanceResult:
        started = time.monotonic()
        if deadline is None and self.time_budget:
            deadline = started + self.time_budget

        def _check_deadline(stage: str):
            if deadline is not None and time.monotonic() >= deadline:
                raise RequestCancelled(f"time_budget_exceeded_{stage}")

        # Request-shape validation happens before any store or provider call.
        granularity = parse_granularity(period)
        today = self.today()
        start, end = resolve_range(granularity, start_date, end_date, today)
        wanted_id = _parse_portfolio_id(portfolio_id)
        # Remote ranges count back from today, so the window must reach start from today.
        range_keyword = lookup_window(start, max(end, today))
        if wanted_id and not self.portfolios.belongs_to_user(wanted_id, user_id):
            raise AuthorizationError("Access denied")

        log.info(
            "performance_started",
            user_id=user_id,
            period=granularity.value,
            start=start.isoformat(),
            end=end.isoformat(),
            range=range_keyword,
            portfolio_id=wanted_id,
        )

        portfolios = self.portfolios.list_portfolios(user_id)
        if wanted_id:
            portfolios = [p for p in portfolios if p.id == wanted_id]
            if not portfolios:
                raise AuthorizationError("Access denied")
        _check_deadline("portfolios")

        scopes = self._load_scopes(portfolios)
        _check_deadline("holdings")
        result = PerformanceResult(period=granularity.value, portfolios=None if wanted_id else [])
        if not scopes:
            log.info("performance_finished", user_id=user_id, portfolios_count=0, points=0)
            return result

        symbols = sorted({sym for scope in scopes for sym in scope.quantities})
        price_maps, skipped = build_price_series(
            symbols,
            range_keyword,
            granularity,
            self.prices,
            workers=self.workers,
            symbol_timeout=self.symbol_timeout,
            deadline=deadline,
        )
        _check_deadline("prices")

        has_cash = any(scope.cash > 0 for scope in scopes)
        sorted_dates = build_time_axis(
            price_maps, start, end, granularity, has_cash, calendar_fill=self.calendar_fill
        )
        start_key = bucket_key(start, granularity)
        end_key = bucket_key(end, granularity)

        per_portfolio_values = []
        for scope in scopes:
            values = value_portfolio(scope.quantities, scope.cash, sorted_dates, price_maps)
            per_portfolio_values.append(values)
            if result.portfolios is not None:
                summary = summarize(values, start_key, end_key)
                result.portfolios.append(
                    PortfolioPerformance(
                        id=scope.portfolio.id,
                        name=scope.portfolio.name,
                        data_points=summary.data_points,
                        start_value=summary.start_value,
                        end_value=summary.end_value,
                        change=summary.change,
                        change_pct=summary.change_pct,
                    )
                )

        total = summarize(aggregate(per_portfolio_values), start_key, end_key)
        result.data_points = total.data_points
        result.start_value = total.start_value
        result.end_value = total.end_value
        result.change = total.change
        result.change_pct = total.change_pct

        log.info(
            "performance_finished",
            user_id=user_id,
            portfolios_count=len(scopes),
            symbols_count=len(symbols),
            skipped_symbols=sorted(skipped),
            points=len(result.data_points),
            elapsed_sec=round(time.monotonic() - started, 3),
        )
        return result

    def _load_scopes(self, portfolios: list[Portfolio]) -> list[_Scope]:
        scopes = []
        for portfolio in portfolios:
            try:
                holdings = self.holdings.list_holdings(portfolio.id)
            except Exception as e:
                log.error("holdings_load_failed", portfolio_id=portfolio.id, err=str(e))
                holdings = []
            try:
                cash = sum(float(acct.balance) for acct in self.cash.list_cash_accounts(portfolio.id))
            except Exception as e:
                log.error("cash_load_failed", portfolio_id=portfolio.id, err=str(e))
                cash = 0.0
            if holdings or cash > 0:
                scopes.append(_Scope(portfolio, symbol_quantities(holdings), cash))
        return scopes
