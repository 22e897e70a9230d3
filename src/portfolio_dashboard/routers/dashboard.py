from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Query, status

from portfolio_dashboard.clients.portfolio_api_client import PortfolioApiClient
from portfolio_dashboard.config import settings
from portfolio_dashboard.contracts.dashboard import (
    DashboardHoverRequest,
    DashboardPeriodRequest,
    DashboardSessionCreateRequest,
    DashboardSessionResponse,
    DashboardViewResponse,
    PeriodOptionsResponse,
)
from portfolio_dashboard.contracts.snapshots import HISTORY_PERIODS, Period
from portfolio_dashboard.middleware.correlation import correlation_id_var
from portfolio_dashboard.services.dashboard_service import (
    DashboardController,
    DashboardService,
    DashboardSession,
    DashboardSessionStore,
)

router = APIRouter(prefix="/api/v1/dashboard", tags=["Dashboard"])

session_store = DashboardSessionStore(max_sessions=settings.max_sessions)


def _dashboard_service() -> DashboardService:
    return DashboardService(
        api_client=PortfolioApiClient(
            base_url=settings.portfolio_api_base_url,
            timeout_seconds=settings.portfolio_api_timeout_seconds,
        )
    )


def _dashboard_controller() -> DashboardController:
    return DashboardController(
        service=_dashboard_service(),
        store=session_store,
        discard_stale=settings.discard_stale_responses,
    )


def _require_session(controller: DashboardController, session_id: str) -> DashboardSession:
    session = controller.get_session(session_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Dashboard session not found: {session_id}",
        )
    return session


def _session_response(session: DashboardSession) -> DashboardSessionResponse:
    state = session.state
    return DashboardSessionResponse(
        correlation_id=correlation_id_var.get(),
        contract_version=settings.contract_version,
        session_id=session.session_id,
        selected_period=state.selected_period,
        request_token=state.request_token,
        loading=state.loading,
        error=state.error,
        view=state.view,
        hover=session.hover(),
    )


@router.get(
    "/periods",
    response_model=PeriodOptionsResponse,
    summary="List selectable periods",
)
async def list_periods() -> PeriodOptionsResponse:
    return PeriodOptionsResponse(
        periods=list(HISTORY_PERIODS),
        default_period=settings.default_period,
    )


@router.post(
    "/sessions",
    response_model=DashboardSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create dashboard session",
    description="Creates presentation state for one viewer and performs the initial load.",
)
async def create_session(request: DashboardSessionCreateRequest) -> DashboardSessionResponse:
    controller = _dashboard_controller()
    session = await controller.create_session(
        period=request.period or settings.default_period,
        include_benchmark=request.include_benchmark,
        include_summary=request.include_summary,
    )
    return _session_response(session)


@router.get(
    "/sessions/{session_id}",
    response_model=DashboardSessionResponse,
    summary="Get dashboard session state",
)
async def get_session(session_id: str) -> DashboardSessionResponse:
    controller = _dashboard_controller()
    return _session_response(_require_session(controller, session_id))


@router.post(
    "/sessions/{session_id}/period",
    response_model=DashboardSessionResponse,
    summary="Switch the selected period",
)
async def select_period(session_id: str, request: DashboardPeriodRequest) -> DashboardSessionResponse:
    controller = _dashboard_controller()
    session = _require_session(controller, session_id)
    await controller.select_period(session, request.period)
    return _session_response(session)


@router.post(
    "/sessions/{session_id}/refresh",
    response_model=DashboardSessionResponse,
    summary="Reload the selected period",
)
async def refresh_session(session_id: str) -> DashboardSessionResponse:
    controller = _dashboard_controller()
    session = _require_session(controller, session_id)
    await controller.refresh(session)
    return _session_response(session)


@router.post(
    "/sessions/{session_id}/hover",
    response_model=DashboardSessionResponse,
    summary="Set the hovered chart point",
)
async def hover_session(session_id: str, request: DashboardHoverRequest) -> DashboardSessionResponse:
    controller = _dashboard_controller()
    session = _require_session(controller, session_id)
    controller.hover(session, request.index)
    return _session_response(session)


@router.get(
    "/{period}",
    response_model=DashboardViewResponse,
    summary="Get derived dashboard view",
    description=(
        "Fetches portfolio history for the period, optionally with benchmark history and "
        "summary metrics, and returns chart-ready series with formatted summary cards. "
        "Portfolio API failures are returned as 502 problem details."
    ),
)
async def get_dashboard_view(
    period: Annotated[Period, Path(description="Period token passed through to the portfolio API.")],
    benchmark: Annotated[bool, Query(description="Also fetch and align benchmark history.")] = False,
    summary: Annotated[bool, Query(description="Also fetch server-side summary metrics.")] = False,
) -> DashboardViewResponse:
    service = _dashboard_service()
    view = await service.load_view(period, include_benchmark=benchmark, include_summary=summary)
    return DashboardViewResponse(
        correlation_id=correlation_id_var.get(),
        contract_version=settings.contract_version,
        view=view,
    )
