import pytest

from portfolio_dashboard.contracts.snapshots import BenchmarkSnapshot, PortfolioSnapshot, SummaryMetrics
from portfolio_dashboard.display_policy import SENTINEL
from portfolio_dashboard.services.metrics_deriver import derive, hover_delta, summary_cards


def _snapshot(timestamp: str, value: float, cumulative_return: float = 0.0) -> PortfolioSnapshot:
    return PortfolioSnapshot(
        timestamp=timestamp,
        value=value,
        return_=0.0,
        cumulative_return=cumulative_return,
        return_dollar=0.0,
        cumulative_return_dollar=value - 1000.0,
    )


def _benchmark(timestamp: str, price: float, cumulative_return: float = 0.0) -> BenchmarkSnapshot:
    return BenchmarkSnapshot(
        timestamp=timestamp,
        price=price,
        return_=0.0,
        cumulative_return=cumulative_return,
    )


def test_open_to_close_period_change():
    metrics = derive(
        [
            _snapshot("2026-10-16T13:30:00Z", 1000.0),
            _snapshot("2026-10-16T20:00:00Z", 1050.0, cumulative_return=0.05),
        ]
    )

    assert metrics.period_change_abs == 50.0
    assert metrics.period_change_pct == pytest.approx(5.0)
    assert metrics.first.value == 1000.0
    assert metrics.latest.value == 1050.0
    assert metrics.outperformance is None


def test_points_are_formatted_in_eastern_time_and_scaled():
    metrics = derive([_snapshot("2026-10-16T13:30:00Z", 1000.0, cumulative_return=0.0123)])

    point = metrics.series[0]
    assert point.date == "Oct 16"
    assert point.timestamp == "Oct 16, 2026, 9:30 AM EDT"
    assert point.raw_timestamp == "2026-10-16T13:30:00Z"
    assert point.cumulative_return == pytest.approx(1.23)


def test_period_change_abs_is_exact_difference():
    values = [1234.56, 999.99, 1500.01, 1111.11]
    metrics = derive(
        [_snapshot(f"2026-10-1{i}T14:00:00Z", value) for i, value in enumerate(values)]
    )

    assert metrics.period_change_abs == values[-1] - values[0]


def test_zero_first_value_leaves_percent_change_undefined():
    metrics = derive(
        [_snapshot("2026-10-16T13:30:00Z", 0.0), _snapshot("2026-10-16T20:00:00Z", 25.0)]
    )

    assert metrics.period_change_abs == 25.0
    assert metrics.period_change_pct is None
    assert summary_cards(metrics).period_change_pct == SENTINEL


def test_empty_series_yields_sentinels_everywhere():
    metrics = derive([])

    assert metrics.series == []
    assert metrics.first is None
    assert metrics.latest is None
    assert metrics.period_change_abs is None
    assert metrics.period_change_pct is None

    cards = summary_cards(metrics)
    assert set(cards.model_dump().values()) == {SENTINEL}


def test_benchmark_prices_are_rescaled_to_portfolio_axis():
    metrics = derive(
        [
            _snapshot("2026-10-16T13:30:00.250000Z", 1000.0),
            _snapshot("2026-10-16T20:00:00Z", 1050.0, cumulative_return=0.05),
        ],
        [
            _benchmark("2026-10-16T09:30:00-04:00", 500.0),
            _benchmark("2026-10-16T20:00:00Z", 510.0, cumulative_return=0.02),
        ],
    )

    assert metrics.series[0].benchmark_price == pytest.approx(1000.0)
    assert metrics.series[1].benchmark_price == pytest.approx(510.0 * (1000.0 / 500.0))
    assert metrics.series[1].benchmark_cumulative_return == pytest.approx(2.0)
    assert metrics.outperformance == pytest.approx(0.03)


def test_unmatched_benchmark_point_falls_back_to_initial_price():
    metrics = derive(
        [
            _snapshot("2026-10-16T13:30:00Z", 1000.0),
            _snapshot("2026-10-16T15:00:00Z", 1010.0),
        ],
        [
            _benchmark("2026-10-16T13:30:00Z", 400.0),
            _benchmark("2026-10-16T20:00:00Z", 420.0, cumulative_return=0.05),
        ],
    )

    assert metrics.series[1].benchmark_price == pytest.approx(1000.0)
    assert metrics.series[1].benchmark_cumulative_return == pytest.approx(0.0)


def test_zero_initial_benchmark_price_skips_scaling():
    metrics = derive(
        [_snapshot("2026-10-16T13:30:00Z", 1000.0)],
        [_benchmark("2026-10-16T13:30:00Z", 0.0)],
    )

    assert metrics.series[0].benchmark_price is None
    assert metrics.outperformance == 0.0


def test_empty_benchmark_is_treated_as_absent():
    metrics = derive([_snapshot("2026-10-16T13:30:00Z", 1000.0)], [])

    assert metrics.series[0].benchmark_price is None
    assert metrics.outperformance is None


def test_hover_delta_uses_hovered_point_or_latest():
    metrics = derive(
        [
            _snapshot("2026-10-16T13:30:00Z", 1000.0),
            _snapshot("2026-10-16T15:00:00Z", 980.0),
            _snapshot("2026-10-16T20:00:00Z", 1050.0),
        ]
    )

    hovered = hover_delta(metrics, 1)
    assert hovered.point.value == 980.0
    assert hovered.change_abs == -20.0
    assert hovered.change_pct == pytest.approx(-2.0)

    assert hover_delta(metrics, None).point.value == 1050.0
    assert hover_delta(metrics, 99).point.value == 1050.0
    assert hover_delta(derive([]), 0).point is None


def test_summary_cards_format_values():
    metrics = derive(
        [_snapshot("2026-10-16T13:30:00Z", 1000.0), _snapshot("2026-10-16T20:00:00Z", 1050.0)]
    )
    summary = SummaryMetrics(
        total_return=0.05,
        total_return_dollar=50.0,
        mean_return_ann=0.1234,
        volatility_ann=0.2,
        sharpe=1.234,
    )

    cards = summary_cards(metrics, summary)

    assert cards.latest_value == "$1,050.00"
    assert cards.period_change_abs == "+$50.00"
    assert cards.period_change_pct == "+5.00%"
    assert cards.outperformance == SENTINEL
    assert cards.total_return == "+5.00%"
    assert cards.total_return_dollar == "+$50.00"
    assert cards.mean_return_ann == "+12.34%"
    assert cards.volatility_ann == "20.00%"
    assert cards.sharpe == "1.23"
