import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from portfolio_dashboard.clients.errors import DashboardFetchError
from portfolio_dashboard.config import settings
from portfolio_dashboard.contracts.errors import INTERNAL_ERROR, ProblemDetails, fetch_error_problem
from portfolio_dashboard.middleware.correlation import correlation_id_var, correlation_middleware, setup_logging
from portfolio_dashboard.routers.dashboard import router as dashboard_router
from portfolio_dashboard.routers.dashboard import session_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _app_lifespan(application: FastAPI):
    application.state.is_draining = False
    logger.info("reading portfolio data from %s", settings.portfolio_api_base_url)
    yield
    application.state.is_draining = True
    logger.info("shutting down with %s dashboard session(s)", len(session_store))


app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=_app_lifespan)
setup_logging()
app.middleware("http")(correlation_middleware)
Instrumentator().instrument(app).expose(app)
app.include_router(dashboard_router)


def _problem_response(problem: ProblemDetails) -> JSONResponse:
    return JSONResponse(
        status_code=problem.status,
        media_type="application/problem+json",
        content=problem.model_dump(),
    )


@app.get("/health/live")
async def health_live() -> dict[str, str]:
    return {"status": "live"}


@app.get("/health/ready")
async def health_ready(response: Response) -> dict[str, str | int]:
    if bool(getattr(app.state, "is_draining", False)):
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "draining", "active_sessions": len(session_store)}
    return {
        "status": "ready",
        "portfolio_api_base_url": settings.portfolio_api_base_url,
        "active_sessions": len(session_store),
    }


@app.exception_handler(DashboardFetchError)
async def dashboard_fetch_error_handler(request: Request, exc: DashboardFetchError) -> JSONResponse:
    problem = fetch_error_problem(
        exc,
        instance=str(request.url.path),
        correlation_id=correlation_id_var.get() or "",
    )
    return _problem_response(problem)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s", request.url.path)
    return _problem_response(
        ProblemDetails(
            title="Internal Server Error",
            status=500,
            detail="An unexpected error occurred.",
            instance=str(request.url.path),
            correlation_id=correlation_id_var.get() or "",
            error_code=INTERNAL_ERROR,
        )
    )
