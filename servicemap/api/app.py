# This file builds the FastAPI application and registers all API routers.
# Startup behavior, middleware and error handling are configured in one place.
# The app adds request IDs, timing headers and Prometheus request metrics.

from __future__ import annotations

import logging
import time
import uuid

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import RequestResponseEndpoint

from servicemap.api.api_config import get_api_config
from servicemap.api.dependencies import get_database_client
from servicemap.api.error_handlers import register_error_handlers
from servicemap.api.routers.auth import router as auth_router
from servicemap.api.routers.favorites import router as favorites_router
from servicemap.api.routers.health import router as health_router
from servicemap.api.routers.services import router as services_router
from servicemap.common.logging import configure_logging

LOGGER = logging.getLogger("servicemap.api")

API_HTTP_REQUESTS_TOTAL = Counter(
    "api_http_requests_total",
    "Total number of HTTP requests processed by the API.",
    ["method", "path", "status_code"],
)
API_HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "api_http_request_duration_seconds",
    "API request duration in seconds.",
    ["method", "path"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
)
API_HTTP_INFLIGHT_REQUESTS = Gauge(
    "api_http_inflight_requests",
    "Number of API requests currently being processed.",
    ["method"],
)


def _route_label(request: Request) -> str:
    # Route templates keep label cardinality bounded (/services/{service_id}, not every id).
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def create_app() -> FastAPI:
    """Create configured FastAPI application instance."""

    configure_logging()
    config = get_api_config()

    app = FastAPI(
        title=config.api_name,
        description=(
            "Location-based service directory: radius search with distance ranking, "
            "country-specific address formatting, and per-user favorites."
        ),
        version=config.app_version,
        openapi_tags=[
            {"name": "health", "description": "Service liveness, readiness, and version metadata."},
            {"name": "auth", "description": "Registration, login, and the signed-in user."},
            {
                "name": "services",
                "description": "Service search, catalog lookups, countries, divisions, and addresses.",
            },
            {"name": "favorites", "description": "The signed-in user's favorite services."},
        ],
    )

    if config.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def request_context_middleware(
        request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        method_label = request.method
        started = time.perf_counter()
        status_code = 500
        API_HTTP_INFLIGHT_REQUESTS.labels(method=method_label).inc()
        try:
            response: Response = await call_next(request)
            status_code = response.status_code
            duration_ms = (time.perf_counter() - started) * 1000.0

            response.headers["x-request-id"] = request_id
            response.headers["x-response-time-ms"] = f"{duration_ms:.2f}"
            return response
        finally:
            duration_s = time.perf_counter() - started
            path_label = _route_label(request)
            API_HTTP_REQUESTS_TOTAL.labels(
                method=method_label,
                path=path_label,
                status_code=str(status_code),
            ).inc()
            API_HTTP_REQUEST_DURATION_SECONDS.labels(
                method=method_label,
                path=path_label,
            ).observe(duration_s)
            API_HTTP_INFLIGHT_REQUESTS.labels(method=method_label).dec()

    @app.get("/metrics", include_in_schema=False)
    def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.on_event("startup")
    def startup_checks() -> None:
        try:
            db = get_database_client()
            app.state.db_connected_at_startup = db.can_connect()
        except (SQLAlchemyError, ValueError):
            LOGGER.warning("Database client could not be created at startup", exc_info=True)
            app.state.db_connected_at_startup = False
        if not app.state.db_connected_at_startup:
            LOGGER.warning("Database unreachable at startup; /ready will report not ready")

    register_error_handlers(app)

    app.include_router(health_router)
    app.include_router(auth_router, prefix=config.api_version_path)
    app.include_router(services_router, prefix=config.api_version_path)
    app.include_router(favorites_router, prefix=config.api_version_path)

    return app


app = create_app()
