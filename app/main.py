from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import structlog
import time

from app.core.config import Settings, settings as default_settings
from app.core.constants import ERROR_MESSAGES
from app.core.database import Database
from app.middleware.rate_limit import RedisTokenBucket, create_rate_limit_middleware
from app.api import auth, events, properties, tracking_plans

# Configure structured logging
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
    ]
)

logger = structlog.get_logger()

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle events"""
    settings: Settings = app.state.settings
    logger.info("application_startup", app_name=settings.app_name)

    owns_database = getattr(app.state, "database", None) is None
    if owns_database:
        app.state.database = Database.from_settings(settings)
    if settings.create_tables:
        await app.state.database.create_all()

    yield

    if owns_database:
        await app.state.database.dispose()
        app.state.database = None
    logger.info("application_shutdown")


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        # Drop the "body"/"query"/"path" prefix FastAPI puts first
        location = [str(item) for item in error.get("loc", ())[1:]]
        parts.append(f"{'.'.join(location) or 'request'}: {error.get('msg')}")
    return ", ".join(parts)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "error": ERROR_MESSAGES["VALIDATION_ERROR"],
            "message": _validation_message(exc)
        }
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    content = {"success": False}
    if isinstance(exc.detail, dict):
        content.update(exc.detail)
    else:
        content["error"] = str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "unhandled_exception",
        method=request.method,
        path=request.url.path,
        error=str(exc)
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": ERROR_MESSAGES["INTERNAL_ERROR"],
            "message": str(exc) or "Unknown error occurred"
        }
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.database = None

    if settings.rate_limit_enabled:
        limiter = RedisTokenBucket(
            rate=settings.rate_limit_requests,
            period=settings.rate_limit_period,
            redis_url=settings.redis_url
        )
        app.middleware("http")(create_rate_limit_middleware(limiter, settings))

    # Middleware for logging requests
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        duration = time.time() - start_time
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2)
        )

        return response

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Include routers
    app.include_router(events.router, prefix=API_PREFIX)
    app.include_router(properties.router, prefix=API_PREFIX)
    app.include_router(tracking_plans.router, prefix=API_PREFIX)
    app.include_router(auth.router, prefix=API_PREFIX)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "app": settings.app_name}

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": settings.app_name,
            "endpoints": {
                "health": "/health",
                "events": f"{API_PREFIX}/events",
                "properties": f"{API_PREFIX}/properties",
                "tracking_plans": f"{API_PREFIX}/tracking-plans",
                "permissions": f"{API_PREFIX}/auth/permissions",
                "docs": "/docs"
            }
        }

    return app


app = create_app()
