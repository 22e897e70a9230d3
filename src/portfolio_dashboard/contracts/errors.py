from pydantic import BaseModel

from portfolio_dashboard.clients.errors import (
    DashboardFetchError,
    ParseError,
    RequestError,
    UpstreamUnavailableError,
)

UPSTREAM_REQUEST_FAILED = "UPSTREAM_REQUEST_FAILED"
UPSTREAM_PARSE_FAILED = "UPSTREAM_PARSE_FAILED"
UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
INTERNAL_ERROR = "INTERNAL_ERROR"


class ProblemDetails(BaseModel):
    type: str = "about:blank"
    title: str
    status: int
    detail: str
    instance: str
    correlation_id: str
    error_code: str
    upstream_resource: str | None = None
    upstream_status: int | None = None


def fetch_error_code(exc: DashboardFetchError) -> str:
    if isinstance(exc, RequestError):
        return UPSTREAM_REQUEST_FAILED
    if isinstance(exc, ParseError):
        return UPSTREAM_PARSE_FAILED
    if isinstance(exc, UpstreamUnavailableError):
        return UPSTREAM_UNAVAILABLE
    return INTERNAL_ERROR


def fetch_error_problem(exc: DashboardFetchError, instance: str, correlation_id: str) -> ProblemDetails:
    """Problem body for a portfolio API failure; ``detail`` is the user-visible message."""
    titles = {
        UPSTREAM_REQUEST_FAILED: "Portfolio API request failed",
        UPSTREAM_PARSE_FAILED: "Portfolio API returned an unexpected response",
        UPSTREAM_UNAVAILABLE: "Portfolio API unreachable",
        INTERNAL_ERROR: "Portfolio API failure",
    }
    error_code = fetch_error_code(exc)
    return ProblemDetails(
        title=titles[error_code],
        status=502,
        detail=str(exc),
        instance=instance,
        correlation_id=correlation_id,
        error_code=error_code,
        upstream_resource=getattr(exc, "resource", None),
        upstream_status=exc.status_code if isinstance(exc, RequestError) else None,
    )
