"""StudyOverflow API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.comments.acceptance import AnswerAcceptance
from src.comments.router import router as comments_router
from src.comments.service import CommentService
from src.comments.store import CommentStore
from src.config import Settings, get_settings
from src.core.context import get_request_id
from src.core.database import init_async_cassandra, shutdown_async_cassandra
from src.core.logging import configure_structlog, get_logger
from src.core.middleware import RequestContextMiddleware
from src.core.redis import init_redis, shutdown_redis
from src.core.sequences import IdAllocator
from src.courses.service import CourseDirectory
from src.health import router as health_router
from src.posts.router import router as posts_router
from src.posts.service import PostService
from src.posts.store import PostStore
from src.posts.views import PostAggregateView
from src.profiles.service import ProfileDirectory
from src.votes.ledger import VoteLedger
from src.votes.store import VoteStore


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=settings.log_dir)

logger = get_logger(__name__)


def init_services(
    app: FastAPI, session: Any, settings: Settings, redis_client: Any = None
) -> None:
    """Construct stores and services and publish them on ``app.state``."""
    keyspace = settings.cassandra_keyspace

    post_store = PostStore(session=session, keyspace=keyspace)
    comment_store = CommentStore(session=session, keyspace=keyspace)
    courses = CourseDirectory(session=session, keyspace=keyspace)
    profiles = ProfileDirectory(session=session, keyspace=keyspace)
    ids = IdAllocator(
        session=session,
        keyspace=keyspace,
        max_attempts=settings.id_allocation_max_attempts,
    )
    ledger = VoteLedger(
        VoteStore(session=session, keyspace=keyspace),
        max_attempts=settings.vote_max_attempts,
    )
    view = PostAggregateView()

    app.state.vote_ledger = ledger
    app.state.post_service = PostService(
        store=post_store,
        courses=courses,
        profiles=profiles,
        ledger=ledger,
        ids=ids,
        view=view,
    )
    logger.info("post_service_initialized")

    app.state.comment_service = CommentService(
        store=comment_store,
        posts=post_store,
        profiles=profiles,
        ledger=ledger,
        ids=ids,
        acceptance=AnswerAcceptance(comments=comment_store, posts=post_store),
        view=view,
        redis=redis_client,
        cache_ttl_seconds=settings.comment_cache_ttl_seconds,
    )
    logger.info("comment_service_initialized", cache_enabled=redis_client is not None)


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

    # Initialize Redis (non-critical - app works without it)
    redis_client = None
    try:
        redis_client = await init_redis()
        logger.info("redis_initialized")
    except Exception as e:
        logger.warning(
            "redis_init_skipped",
            error=str(e),
            message="Running without Redis - comment cache disabled",
        )
    app.state.redis = redis_client

    try:
        app.state.cassandra_session = await init_async_cassandra()
        logger.info("cassandra_initialized")

        init_services(app, app.state.cassandra_session, settings, redis_client)
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

    # Starlette debug stays off so stack traces never reach responses
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="StudyOverflow - course Q&A forum API",
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
        """Catch-all handler for unhandled exceptions.

        Details are logged; the response carries a generic message only.
        """
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

    app.include_router(health_router)
    app.include_router(posts_router)
    app.include_router(comments_router)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": "StudyOverflow API",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


app = create_app()
