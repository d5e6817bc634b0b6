from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from app.schemas.common import fail
from app.shared.core.config import get_settings
from app.shared.core.exceptions import NimbusException
from app.shared.core.logging import setup_logging
from app.shared.core.middleware import RequestIDMiddleware, SecurityHeadersMiddleware
from app.shared.core.rate_limit import setup_rate_limiting
from app.shared.db.session import engine, get_db
from app.modules.accounts.api.v1.auth import router as auth_router
from app.modules.accounts.api.v1.users import router as users_router
from app.modules.monitoring.api.v1.alerts import router as alerts_router
from app.modules.monitoring.api.v1.metrics import router as metrics_router


# Configure logging
setup_logging()

# Get logger
logger = structlog.get_logger()

# This runs BEFORE the app starts (setup) and AFTER it stops (teardown).
@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info("app_starting", app=settings.APP_NAME, version=settings.VERSION, environment=settings.ENVIRONMENT)

    yield

    logger.info("app_shutting_down", app=settings.APP_NAME)
    await engine.dispose()

settings = get_settings()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    lifespan=lifespan)

# ============================================================
# Exception handlers: every failure leaves as {success: false, message}
# ============================================================

@app.exception_handler(NimbusException)
async def nimbus_exception_handler(request: Request, exc: NimbusException):
    logger.info(
        "request_failed",
        path=request.url.path,
        code=exc.code,
        status_code=exc.status_code,
        message=exc.message,
    )
    body = fail(exc.message)
    if exc.details:
        body["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=fail(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    fields = [".".join(str(p) for p in err.get("loc", ()) if p != "body") for err in errors]
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    if fields and fields[0]:
        message = f"{fields[0]}: {message}"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=fail(message, details={"fields": fields}),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("unhandled_exception", path=request.url.path, error=str(exc), exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=fail("Server error"),
    )

# ============================================================
# Middleware
# ============================================================

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestIDMiddleware)

# CORS Middleware - Allow the dashboard frontend to access the API
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_rate_limiting(app)

# Initialize Prometheus Metrics
Instrumentator().instrument(app).expose(app)

# Include routers
app.include_router(auth_router, prefix="/api/v1/auth")
app.include_router(metrics_router, prefix="/api/v1/metrics")
app.include_router(alerts_router, prefix="/api/v1/alerts")
app.include_router(users_router, prefix="/api/v1/users")

# Health Check
# Every K8s pod needs a health check endpoint to prove it's alive
@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    database = "up"
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("health_check_database_failed", error=str(e))
        database = "down"

    healthy = database == "up"
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "active" if healthy else "degraded",
            "app": settings.APP_NAME,
            "version": settings.VERSION,
            "database": database,
        },
    )
