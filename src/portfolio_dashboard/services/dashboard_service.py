import asyncio
import logging
from collections import OrderedDict
from typing import Any
from uuid import uuid4

from portfolio_dashboard.clients.errors import DashboardFetchError
from portfolio_dashboard.clients.portfolio_api_client import PortfolioApiClient
from portfolio_dashboard.contracts.dashboard import DashboardView, HoverDelta
from portfolio_dashboard.contracts.snapshots import Period
from portfolio_dashboard.services.dashboard_state import (
    DashboardEvent,
    DashboardState,
    FetchFailed,
    FetchSucceeded,
    HoverChanged,
    PeriodSelected,
    RefreshRequested,
    reduce,
)
from portfolio_dashboard.services.metrics_deriver import derive, hover_delta, summary_cards

logger = logging.getLogger(__name__)


class DashboardService:
    def __init__(self, api_client: PortfolioApiClient):
        self._api_client = api_client

    async def load_view(
        self,
        period: Period,
        include_benchmark: bool = False,
        include_summary: bool = False,
    ) -> DashboardView:
        """Fetch everything the view needs for ``period`` and derive it.

        All requested endpoints are fetched together; any failure fails the
        whole load with the first ``DashboardFetchError`` raised.
        """
        tasks: list[Any] = [self._api_client.fetch_snapshots(period)]
        if include_benchmark:
            tasks.append(self._api_client.fetch_benchmark(period))
        if include_summary:
            tasks.append(self._api_client.fetch_summary(period))
        results = list(await asyncio.gather(*tasks))

        snapshots = results.pop(0)
        benchmark = results.pop(0) if include_benchmark else None
        summary = results.pop(0) if include_summary else None

        metrics = derive(snapshots, benchmark)
        return DashboardView(
            period=period,
            metrics=metrics,
            cards=summary_cards(metrics, summary),
            summary=summary,
            has_benchmark=bool(benchmark),
        )

    async def load_outcome(
        self,
        period: Period,
        token: int,
        include_benchmark: bool = False,
        include_summary: bool = False,
    ) -> FetchSucceeded | FetchFailed:
        """Load a view and wrap the result as the completion event for ``token``."""
        try:
            view = await self.load_view(period, include_benchmark, include_summary)
        except DashboardFetchError as exc:
            logger.warning("dashboard load for %s failed: %s", period, exc)
            return FetchFailed(token=token, message=str(exc))
        return FetchSucceeded(token=token, view=view)


class DashboardSession:
    def __init__(
        self,
        session_id: str,
        state: DashboardState,
        include_benchmark: bool,
        include_summary: bool,
    ):
        self.session_id = session_id
        self.state = state
        self.include_benchmark = include_benchmark
        self.include_summary = include_summary

    def hover(self) -> HoverDelta | None:
        if self.state.view is None:
            return None
        return hover_delta(self.state.view.metrics, self.state.hover_index)


class DashboardSessionStore:
    """In-memory sessions, evicting the least recently used beyond ``max_sessions``."""

    def __init__(self, max_sessions: int = 1000):
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, DashboardSession] = OrderedDict()

    def add(self, session: DashboardSession) -> None:
        self._sessions[session.session_id] = session
        self._sessions.move_to_end(session.session_id)
        while len(self._sessions) > self._max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.info("evicted dashboard session %s", evicted)

    def get(self, session_id: str) -> DashboardSession | None:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def __len__(self) -> int:
        return len(self._sessions)


class DashboardController:
    """Runs the select/refresh -> fetch -> derive cycle for stored sessions."""

    def __init__(
        self,
        service: DashboardService,
        store: DashboardSessionStore,
        discard_stale: bool = True,
    ):
        self._service = service
        self._store = store
        self._discard_stale = discard_stale

    def get_session(self, session_id: str) -> DashboardSession | None:
        return self._store.get(session_id)

    async def create_session(
        self,
        period: Period,
        include_benchmark: bool = False,
        include_summary: bool = False,
    ) -> DashboardSession:
        session = DashboardSession(
            session_id=f"dash_{uuid4().hex[:12]}",
            state=DashboardState(selected_period=period),
            include_benchmark=include_benchmark,
            include_summary=include_summary,
        )
        self._store.add(session)
        await self.select_period(session, period)
        return session

    async def select_period(self, session: DashboardSession, period: Period) -> DashboardSession:
        self.dispatch(session, PeriodSelected(period=period))
        await self._load(session)
        return session

    async def refresh(self, session: DashboardSession) -> DashboardSession:
        self.dispatch(session, RefreshRequested())
        await self._load(session)
        return session

    def hover(self, session: DashboardSession, index: int | None) -> DashboardSession:
        self.dispatch(session, HoverChanged(index=index))
        return session

    def dispatch(self, session: DashboardSession, event: DashboardEvent) -> DashboardState:
        session.state = reduce(session.state, event, discard_stale=self._discard_stale)
        return session.state

    async def _load(self, session: DashboardSession) -> None:
        token = session.state.request_token
        period = session.state.selected_period
        outcome = await self._service.load_outcome(
            period,
            token,
            include_benchmark=session.include_benchmark,
            include_summary=session.include_summary,
        )
        if token != session.state.request_token:
            logger.debug(
                "session %s: response for token %s arrived after token %s",
                session.session_id,
                token,
                session.state.request_token,
            )
        self.dispatch(session, outcome)
