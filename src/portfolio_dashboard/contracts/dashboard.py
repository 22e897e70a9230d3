from pydantic import BaseModel, Field

from portfolio_dashboard.contracts.snapshots import Period, SummaryMetrics


class DerivedPoint(BaseModel):
    date: str
    timestamp: str
    raw_timestamp: str
    value: float
    cumulative_return: float
    return_dollar: float
    cumulative_return_dollar: float
    benchmark_price: float | None = None
    benchmark_cumulative_return: float | None = None

    model_config = {"frozen": True}


class DerivedMetrics(BaseModel):
    series: list[DerivedPoint] = Field(default_factory=list)
    first: DerivedPoint | None = None
    latest: DerivedPoint | None = None
    period_change_abs: float | None = None
    period_change_pct: float | None = None
    outperformance: float | None = None

    model_config = {"frozen": True}


class HoverDelta(BaseModel):
    point: DerivedPoint | None = None
    change_abs: float | None = None
    change_pct: float | None = None


class SummaryCards(BaseModel):
    latest_value: str
    period_change_abs: str
    period_change_pct: str
    outperformance: str
    total_return: str
    total_return_dollar: str
    mean_return_ann: str
    volatility_ann: str
    sharpe: str


class DashboardView(BaseModel):
    period: Period
    metrics: DerivedMetrics
    cards: SummaryCards
    summary: SummaryMetrics | None = None
    has_benchmark: bool = False


class DashboardViewResponse(BaseModel):
    correlation_id: str
    contract_version: str = Field(default="v1")
    view: DashboardView


class PeriodOptionsResponse(BaseModel):
    periods: list[Period]
    default_period: Period


class DashboardSessionCreateRequest(BaseModel):
    period: Period | None = None
    include_benchmark: bool = False
    include_summary: bool = False


class DashboardPeriodRequest(BaseModel):
    period: Period


class DashboardHoverRequest(BaseModel):
    index: int | None = None


class DashboardSessionResponse(BaseModel):
    correlation_id: str
    contract_version: str = Field(default="v1")
    session_id: str
    selected_period: Period
    request_token: int
    loading: bool
    error: str | None = None
    view: DashboardView | None = None
    hover: HoverDelta | None = None
