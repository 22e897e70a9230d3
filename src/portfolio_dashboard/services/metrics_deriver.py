"""Turns raw snapshot series into chart points and summary scalars."""

from collections.abc import Sequence
from datetime import datetime

from portfolio_dashboard.contracts.dashboard import DerivedMetrics, DerivedPoint, HoverDelta, SummaryCards
from portfolio_dashboard.contracts.snapshots import BenchmarkSnapshot, PortfolioSnapshot, SummaryMetrics
from portfolio_dashboard.display_policy import (
    alignment_key,
    format_currency,
    format_long_timestamp,
    format_percent,
    format_ratio,
    format_short_date,
    parse_timestamp,
)


def change_pct(change_abs: float | None, base_value: float | None) -> float | None:
    """Percent change relative to ``base_value``; None when the base is missing or zero."""
    if change_abs is None or base_value is None or base_value == 0:
        return None
    return change_abs / base_value * 100


def derive(
    snapshots: Sequence[PortfolioSnapshot],
    benchmark: Sequence[BenchmarkSnapshot] | None = None,
) -> DerivedMetrics:
    if not snapshots:
        return DerivedMetrics()

    first_value = snapshots[0].value
    aligned: dict[datetime, BenchmarkSnapshot] = {}
    initial_benchmark: BenchmarkSnapshot | None = None
    scale: float | None = None
    if benchmark:
        initial_benchmark = benchmark[0]
        aligned = {alignment_key(item.timestamp): item for item in benchmark}
        if initial_benchmark.price != 0:
            scale = first_value / initial_benchmark.price

    series = [
        _derive_point(snapshot, aligned, initial_benchmark, scale) for snapshot in snapshots
    ]
    first, latest = series[0], series[-1]
    period_change_abs = latest.value - first.value

    outperformance = None
    if benchmark:
        outperformance = snapshots[-1].cumulative_return - benchmark[-1].cumulative_return

    return DerivedMetrics(
        series=series,
        first=first,
        latest=latest,
        period_change_abs=period_change_abs,
        period_change_pct=change_pct(period_change_abs, first.value),
        outperformance=outperformance,
    )


def _derive_point(
    snapshot: PortfolioSnapshot,
    aligned: dict[datetime, BenchmarkSnapshot],
    initial_benchmark: BenchmarkSnapshot | None,
    scale: float | None,
) -> DerivedPoint:
    moment = parse_timestamp(snapshot.timestamp)
    benchmark_price = None
    benchmark_cumulative_return = None
    if initial_benchmark is not None:
        match = aligned.get(alignment_key(snapshot.timestamp), initial_benchmark)
        if scale is not None:
            benchmark_price = match.price * scale
        benchmark_cumulative_return = match.cumulative_return * 100

    return DerivedPoint(
        date=format_short_date(moment),
        timestamp=format_long_timestamp(moment),
        raw_timestamp=snapshot.timestamp,
        value=snapshot.value,
        cumulative_return=snapshot.cumulative_return * 100,
        return_dollar=snapshot.return_dollar,
        cumulative_return_dollar=snapshot.cumulative_return_dollar,
        benchmark_price=benchmark_price,
        benchmark_cumulative_return=benchmark_cumulative_return,
    )


def hover_delta(metrics: DerivedMetrics, index: int | None) -> HoverDelta:
    """Values shown in the header while hovering; falls back to the latest point."""
    point = metrics.latest
    if index is not None and 0 <= index < len(metrics.series):
        point = metrics.series[index]
    if point is None or metrics.first is None:
        return HoverDelta()

    change_abs = point.value - metrics.first.value
    return HoverDelta(
        point=point,
        change_abs=change_abs,
        change_pct=change_pct(change_abs, metrics.first.value),
    )


def summary_cards(metrics: DerivedMetrics, summary: SummaryMetrics | None = None) -> SummaryCards:
    latest_value = metrics.latest.value if metrics.latest is not None else None
    outperformance = metrics.outperformance * 100 if metrics.outperformance is not None else None

    def _pct(value: float | None) -> float | None:
        return value * 100 if value is not None else None

    return SummaryCards(
        latest_value=format_currency(latest_value),
        period_change_abs=format_currency(metrics.period_change_abs, signed=True),
        period_change_pct=format_percent(metrics.period_change_pct),
        outperformance=format_percent(outperformance),
        total_return=format_percent(_pct(summary.total_return) if summary else None),
        total_return_dollar=format_currency(
            summary.total_return_dollar if summary else None, signed=True
        ),
        mean_return_ann=format_percent(_pct(summary.mean_return_ann) if summary else None),
        volatility_ann=format_percent(
            _pct(summary.volatility_ann) if summary else None, signed=False
        ),
        sharpe=format_ratio(summary.sharpe if summary else None),
    )
