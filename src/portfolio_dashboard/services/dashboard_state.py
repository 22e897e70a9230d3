"""Presentation state for a dashboard session and the reducer that updates it.

Every period switch or refresh bumps ``request_token``. A fetch completion
carries the token it was issued under; when ``discard_stale`` is set, a
completion whose token is no longer the latest is dropped so an older,
slower response can never overwrite a newer selection.
"""

from pydantic import BaseModel

from portfolio_dashboard.contracts.dashboard import DashboardView
from portfolio_dashboard.contracts.snapshots import Period


class DashboardState(BaseModel):
    selected_period: Period
    request_token: int = 0
    loading: bool = False
    error: str | None = None
    view: DashboardView | None = None
    hover_index: int | None = None

    model_config = {"frozen": True}


class PeriodSelected(BaseModel):
    period: Period


class RefreshRequested(BaseModel):
    pass


class FetchSucceeded(BaseModel):
    token: int
    view: DashboardView


class FetchFailed(BaseModel):
    token: int
    message: str


class HoverChanged(BaseModel):
    index: int | None = None


DashboardEvent = PeriodSelected | RefreshRequested | FetchSucceeded | FetchFailed | HoverChanged


def is_stale(state: DashboardState, token: int) -> bool:
    return token != state.request_token


def reduce(state: DashboardState, event: DashboardEvent, discard_stale: bool = True) -> DashboardState:
    if isinstance(event, PeriodSelected):
        return state.model_copy(
            update={
                "selected_period": event.period,
                "request_token": state.request_token + 1,
                "loading": True,
                "hover_index": None,
            }
        )
    if isinstance(event, RefreshRequested):
        return state.model_copy(
            update={"request_token": state.request_token + 1, "loading": True}
        )
    if isinstance(event, FetchSucceeded):
        if discard_stale and is_stale(state, event.token):
            return state
        return state.model_copy(
            update={"view": event.view, "error": None, "loading": False, "hover_index": None}
        )
    if isinstance(event, FetchFailed):
        if discard_stale and is_stale(state, event.token):
            return state
        # the last successful view stays on screen
        return state.model_copy(update={"error": event.message, "loading": False})
    if isinstance(event, HoverChanged):
        return state.model_copy(update={"hover_index": event.index})
    raise TypeError(f"unsupported dashboard event: {type(event).__name__}")
