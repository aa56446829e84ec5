"""ClipFeed Engine - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from clipfeed.accounts.repository import AccountRepository
from clipfeed.accounts.router import admin_router as accounts_admin_router
from clipfeed.accounts.router import router as accounts_router
from clipfeed.accounts.service import AccountService
from clipfeed.analytics.router import router as analytics_router
from clipfeed.analytics.service import AnalyticsService
from clipfeed.comments.repository import CommentRepository
from clipfeed.comments.router import router as comments_router
from clipfeed.comments.service import CommentService
from clipfeed.config import Settings, get_settings
from clipfeed.core.context import get_request_id
from clipfeed.core.database import init_async_cassandra, shutdown_async_cassandra
from clipfeed.core.logging import configure_structlog, get_logger
from clipfeed.core.middleware import RequestContextMiddleware
from clipfeed.core.redis import init_redis, shutdown_redis
from clipfeed.engagement.repository import EngagementRepository
from clipfeed.engagement.router import router as engagement_router
from clipfeed.engagement.service import EngagementService
from clipfeed.feed.router import router as feed_router
from clipfeed.feed.service import FeedService
from clipfeed.health import router as health_router
from clipfeed.moderation.repository import ReportRepository
from clipfeed.moderation.router import admin_router as moderation_admin_router
from clipfeed.moderation.router import router as moderation_router
from clipfeed.moderation.service import ModerationService
from clipfeed.videos.repository import VideoRepository
from clipfeed.videos.router import router as videos_router
from clipfeed.videos.service import VideoService


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))
logger = get_logger(__name__)


# Application state for dependency injection
class AppState:
    """Application state container."""

    cassandra_session: Any = None
    redis: Any = None
    engagement_service: EngagementService | None = None
    comment_service: CommentService | None = None
    moderation_service: ModerationService | None = None
    feed_service: FeedService | None = None
    analytics_service: AnalyticsService | None = None
    account_service: AccountService | None = None
    video_service: VideoService | None = None


app_state = AppState()

SERVICE_NAMES = (
    "engagement_service",
    "comment_service",
    "moderation_service",
    "feed_service",
    "analytics_service",
    "account_service",
    "video_service",
)


def build_services(session: Any, settings: Settings, redis: Any = None) -> dict[str, Any]:
    """Wire repositories and services over one Cassandra session."""
    keyspace = settings.cassandra_keyspace

    accounts = AccountRepository(session, keyspace)
    videos = VideoRepository(session, keyspace)
    engagement_repo = EngagementRepository(session, keyspace)
    comments = CommentRepository(session, keyspace)
    reports = ReportRepository(session, keyspace)

    engagement = EngagementService(engagement_repo, videos, accounts, settings)
    return {
        "engagement_service": engagement,
        "comment_service": CommentService(
            comments, videos, accounts, engagement, settings, redis=redis
        ),
        "moderation_service": ModerationService(
            reports, videos, accounts, settings, redis=redis
        ),
        "feed_service": FeedService(videos, accounts, engagement, settings),
        "analytics_service": AnalyticsService(videos, accounts, engagement),
        "account_service": AccountService(accounts, videos, engagement),
        "video_service": VideoService(videos, accounts, engagement),
    }


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()

    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    # Initialize Redis (non-critical - rate limits are skipped without it)
    redis_client = None
    try:
        redis_client = await init_redis()
        logger.info("redis_initialized")
    except Exception as e:
        logger.warning(
            "redis_init_skipped",
            error=str(e),
            message="Running without Redis - rate limits disabled",
        )
    app_state.redis = redis_client
    app.state.redis = redis_client

    # Initialize Cassandra (async)
    try:
        app_state.cassandra_session = await init_async_cassandra()
        logger.info("cassandra_initialized")

        services = build_services(app_state.cassandra_session, settings, redis_client)
        for name in SERVICE_NAMES:
            setattr(app_state, name, services[name])
            # Also set on app.state for dependency injection via request.app.state
            setattr(app.state, name, services[name])
        logger.info("engine_services_initialized", services=list(SERVICE_NAMES))
    except Exception as e:
        logger.warning(
            "database_init_skipped",
            error=str(e),
            message="Running without database connection",
        )

    yield

    # Shutdown
    logger.info("shutting_down_application")
    await shutdown_redis()
    await shutdown_async_cassandra()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # Always debug=False so Starlette never renders stack traces; the handlers
    # below log details and return safe messages.
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Engagement consistency and feed ranking engine",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Request context middleware (must be added first - outermost)
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    def _get_request_id_safe(request: Request) -> str | None:
        """Get request_id from request state or context."""
        if hasattr(request.state, "request_id"):
            return request.state.request_id
        return get_request_id()

    # Global exception handlers (never expose stack traces)
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Handle HTTP exceptions with safe error messages."""
        request_id = _get_request_id_safe(request)

        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=exc.status_code,
            content={
                "error": True,
                "message": str(exc.detail)
                if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
                else "Internal server error",
                "status_code": exc.status_code,
                "request_id": request_id,
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Handle validation errors with safe error messages."""
        request_id = _get_request_id_safe(request)

        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": True,
                "message": "Validation error",
                "status_code": 422,
                "request_id": request_id,
                "details": [
                    {
                        "field": ".".join(str(loc) for loc in err.get("loc", [])),
                        "message": err.get("msg", "Invalid value"),
                    }
                    for err in exc.errors()
                ],
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler for unhandled exceptions."""
        request_id = _get_request_id_safe(request)

        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": True,
                "message": "An unexpected error occurred. Please try again later.",
                "status_code": 500,
                "request_id": request_id,
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(engagement_router)
    app.include_router(comments_router)
    app.include_router(moderation_router)
    app.include_router(moderation_admin_router)
    app.include_router(accounts_admin_router)
    app.include_router(feed_router)
    app.include_router(analytics_router)
    app.include_router(accounts_router)
    app.include_router(videos_router)

    return app


app = create_app()
