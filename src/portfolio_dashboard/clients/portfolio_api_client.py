import logging
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from portfolio_dashboard.clients.errors import ParseError, RequestError, UpstreamUnavailableError
from portfolio_dashboard.contracts.snapshots import BenchmarkSnapshot, PortfolioSnapshot, SummaryMetrics
from portfolio_dashboard.middleware.correlation import propagation_headers

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SNAPSHOTS = TypeAdapter(list[PortfolioSnapshot])
_BENCHMARK = TypeAdapter(list[BenchmarkSnapshot])
_SUMMARY = TypeAdapter(SummaryMetrics)


class PortfolioApiClient:
    """Read-only client for the portfolio history, summary and benchmark endpoints.

    Every call is one fresh GET; nothing is retried or cached.
    """

    def __init__(self, base_url: str, timeout_seconds: float | None = None):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds

    async def fetch_snapshots(self, period: str) -> list[PortfolioSnapshot]:
        return await self._get(f"/portfolio_history/{period}", "portfolio history", _SNAPSHOTS)

    async def fetch_benchmark(self, period: str) -> list[BenchmarkSnapshot]:
        return await self._get(f"/benchmark_history/{period}", "benchmark history", _BENCHMARK)

    async def fetch_summary(self, period: str) -> SummaryMetrics:
        return await self._get(f"/portfolio_summary/{period}", "portfolio summary", _SUMMARY)

    async def _get(self, path: str, resource: str, adapter: TypeAdapter[T]) -> T:
        url = f"{self._base_url}{path}"
        logger.debug("GET %s", url)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(url, headers=propagation_headers())
        except httpx.TransportError as exc:
            logger.warning("%s unreachable: %s", url, exc.__class__.__name__)
            raise UpstreamUnavailableError(resource, exc.__class__.__name__) from exc

        if not response.is_success:
            logger.warning("%s returned %s %s", url, response.status_code, response.reason_phrase)
            raise RequestError(resource, response.status_code, response.reason_phrase)

        payload = self._response_payload(response, resource)
        try:
            return adapter.validate_python(payload)
        except ValidationError as exc:
            logger.warning("%s returned an unexpected shape: %s", url, exc.error_count())
            raise ParseError(resource, f"{exc.error_count()} validation error(s)") from exc

    def _response_payload(self, response: httpx.Response, resource: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ParseError(resource, "response body is not valid JSON") from exc
