import sys
import logging
from pathlib import Path
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from app.api.routes import router, limiter, SERVICE_VERSION
from app.api.metrics import router as metrics_router
from app.core.config import get_settings
from app.core.errors import AppError, ErrorCodes, get_error_response
from app.core.logging import configure_logging
from app.core.middleware import CorrelationIDMiddleware, TimeoutMiddleware, CORRELATION_HEADER
from app.core.security import SecurityHeadersMiddleware

# Load environment variables
load_dotenv()

try:
    settings = get_settings()
except Exception as e:
    logging.basicConfig(level=logging.ERROR)
    logging.getLogger(__name__).error(f"Failed to load configuration: {e}")
    sys.exit(1)

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Tabular Insights API",
    description="Descriptive statistics, chart aggregates and insights for CSV/Excel data",
    version=SERVICE_VERSION
)

app.state.limiter = limiter
app.state.settings = settings


def _correlation_id(request: Request) -> str:
    return getattr(request.state, 'correlation_id', 'unknown')


def _error_json(request: Request, status_code: int, error_info: dict, headers: dict = None) -> JSONResponse:
    correlation_id = _correlation_id(request)
    error_info['correlation_id'] = correlation_id
    return JSONResponse(
        status_code=status_code,
        content={"detail": error_info},
        headers={CORRELATION_HEADER: correlation_id, **(headers or {})}
    )


async def app_error_handler(request: Request, exc: AppError):
    logger.warning(f"Request rejected with {exc.error_code}: {exc}")
    return _error_json(request, exc.status_code, exc.to_response())


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return _error_json(
        request, 422,
        get_error_response(ErrorCodes.INVALID_PAYLOAD, f"{len(exc.errors())} validation error(s).")
    )


def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return _error_json(
        request, 429,
        get_error_response(ErrorCodes.RATE_LIMIT_EXCEEDED),
        headers={"Retry-After": str(getattr(exc, 'retry_after', 60))}
    )


app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

# Last added runs first
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["Content-Type", CORRELATION_HEADER],
    expose_headers=[CORRELATION_HEADER]
)
app.add_middleware(CorrelationIDMiddleware)

logger.info(f"CORS allowed origins: {settings.allowed_origins_list}")

app.include_router(router, prefix="/api")
app.include_router(metrics_router, prefix="/api")

if settings.static_dir and Path(settings.static_dir).is_dir():
    app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
    logger.info(f"Serving static frontend from {settings.static_dir}")
else:
    @app.get("/")
    async def root():
        return {"message": "Tabular Insights API is running"}

logger.info("Application started successfully")
