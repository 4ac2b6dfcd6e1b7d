"""FastAPI application factory and startup configuration.

Authentication is attached per router (`dependencies=[RequireApiKey]`) rather
than as a global middleware, so /health and /docs stay public.
"""
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from houselyzer.config import settings
from houselyzer.core.exceptions import AppException, NotFoundError, ValidationError
from houselyzer.core.logging import setup_logging, get_logger
from houselyzer.api.v1.extraction import router as extraction_router
from houselyzer.api.v1.listings import router as listings_router
from houselyzer.api.v1.mortgage import router as mortgage_router
from houselyzer.api.v1.settings import router as settings_router
from houselyzer.api.deps import RequireApiKey
from houselyzer.api.responses import fail, ok
from houselyzer.database import create_tables
from houselyzer.services.importer_service import PropertyImporter

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown events."""
    setup_logging()
    logger.info("Starting %s v%s", settings.app_name, settings.app_version)

    if not settings.api_key:
        logger.warning(
            "API_KEY is not configured; protected endpoints will answer 500. "
            "Set API_KEY in the environment before deploying."
        )
    if not PropertyImporter.from_settings().configured:
        logger.info("Extraction service URL or key not set; imports will use template extraction")

    await create_tables()

    yield

    logger.info("Shutting down %s", settings.app_name)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Houselyzer API — track listings, import them from URLs, and quote mortgages.",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.middleware("http")
    async def add_trace_id(request: Request, call_next):
        request.state.trace_id = str(uuid4())
        response = await call_next(request)
        response.headers["X-Trace-Id"] = request.state.trace_id
        return response

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        trace_id = getattr(request.state, "trace_id", None)
        logger.exception("Unhandled exception [trace_id=%s]", trace_id, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=fail("Internal server error", request).model_dump(),
        )

    @application.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=fail(exc.message, request).model_dump())

    @application.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content=fail(exc.message, request).model_dump())

    @application.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        logger.error("Request failed: %s", exc.message)
        return JSONResponse(status_code=400, content=fail(exc.message, request).model_dump())

    _auth = [RequireApiKey]

    application.include_router(listings_router, prefix="/api/v1/listings", tags=["listings"], dependencies=_auth)
    application.include_router(mortgage_router, prefix="/api/v1/mortgage", tags=["mortgage"], dependencies=_auth)
    application.include_router(settings_router, prefix="/api/v1/settings", tags=["settings"], dependencies=_auth)
    application.include_router(extraction_router, prefix="/api/v1/extraction", tags=["extraction"], dependencies=_auth)

    @application.get("/health", tags=["system"])
    async def health_check(request: Request):
        from sqlalchemy import text
        from houselyzer.database import async_session_factory

        db_status = "ok"
        try:
            async with async_session_factory() as session:
                await session.execute(text("SELECT 1"))
        except Exception as e:
            db_status = f"error: {str(e)}"

        return ok(
            {
                "status": "healthy" if db_status == "ok" else "unhealthy",
                "version": settings.app_version,
                "database": db_status,
                "extraction_service": "configured" if PropertyImporter.from_settings().configured else "template-only",
            },
            "Health check completed",
            request,
        )

    return application


app = create_app()
