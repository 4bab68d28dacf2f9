import logging as _logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text

from .platform.config import settings
from .platform.database import Base, async_engine, async_session_maker
from .platform.logging import setup_logging
from .platform.middleware import RequestLoggingMiddleware
from .shared.background import drain_detached_tasks

# Set up logging
logger = setup_logging()

_is_production = settings.DEPLOYMENT_ENV == "production"
_docs_url = None if _is_production else "/api/docs"
_openapi_url = None if _is_production else "/api/openapi.json"


async def _prepare_local_database() -> None:
    """Create tables and seed the default rubric on a local SQLite database.

    Postgres deployments are migrated with Alembic instead.
    """
    from . import models  # noqa: F401  (register tables on Base.metadata)
    from .components.video_evaluation.rubric_loader import seed_default_rubric

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with async_session_maker() as db:
        await seed_default_rubric(db)


@asynccontextmanager
async def _lifespan(_app: FastAPI):
    # Startup
    if async_engine.url.get_backend_name() == "sqlite":
        await _prepare_local_database()
    logger.info("Signal engine API started | env=%s", settings.DEPLOYMENT_ENV)
    yield
    # Shutdown: let in-flight evaluations and embedding writes finish
    await drain_detached_tasks()
    await async_engine.dispose()


app = FastAPI(
    title="Signal Engine API",
    description="Hiring simulation signal scoring, video evaluation and reporting.",
    version="1.0.0",
    docs_url=_docs_url,
    openapi_url=_openapi_url,
    lifespan=_lifespan,
)

_val_logger = _logging.getLogger("signal_engine.validation")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log validation errors with detail so we can diagnose 422s."""
    _val_logger.warning(
        "Validation error on %s %s: %s",
        request.method,
        request.url.path,
        exc.errors(),
    )
    return JSONResponse(
        status_code=422,
        content={"detail": [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]},
    )


# Request logging
app.add_middleware(RequestLoggingMiddleware)

# Sentry (optional)
if settings.SENTRY_DSN and settings.SENTRY_DSN.startswith("https://"):
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        traces_sample_rate=0.1,
        integrations=[FastApiIntegration(), SqlalchemyIntegration()],
    )

# Include routers
from .domains.admin.routes import router as admin_router
from .domains.reports.routes import router as reports_router
from .domains.scoring.routes import router as scoring_router
from .domains.video_assessments.routes import router as video_assessments_router

app.include_router(video_assessments_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")
app.include_router(reports_router, prefix="/api/v1")
app.include_router(scoring_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    db_ok = False
    try:
        async with async_session_maker() as db:
            await db.execute(text("SELECT 1"))
        db_ok = True
    except Exception:
        logger.warning("Health check database probe failed", exc_info=True)
    return {"status": "ok" if db_ok else "degraded", "database": db_ok}
