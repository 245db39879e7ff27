import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

# Register models on Base.metadata
import models  # noqa: F401
from core.config import settings
from core.database import SessionLocal
from core.logging_config import setup_logging, get_logger
from middleware.rate_limiter import limiter
from routers import tokens
from services.token_cleanup import TokenCleanupScheduler
from utils.logger import log_request

setup_logging(
    log_level=settings.LOG_LEVEL,
    log_dir=settings.LOG_DIR
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    cleanup = None
    if settings.TOKEN_CLEANUP_INTERVAL_SECONDS > 0:
        cleanup = TokenCleanupScheduler(SessionLocal, settings.TOKEN_CLEANUP_INTERVAL_SECONDS)
        cleanup.start()
    logger.info("Application startup complete", extra={"event": "startup"})
    yield
    if cleanup is not None:
        cleanup.shutdown()
    logger.info("Application shutting down", extra={"event": "shutdown"})


app = FastAPI(
    title="Auth Token Store API",
    description="Session and app-password token store",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log every HTTP request with method, path, status code and duration.
    Headers are never logged; they carry bearer secrets.
    """
    start_time = time.time()

    response = await call_next(request)

    log_request(
        logger,
        request.method,
        request.url.path,
        response.status_code,
        (time.time() - start_time) * 1000,
        client_ip=request.client.host if request.client else "unknown",
    )

    return response


@app.get("/health")
async def health_check():
    logger.debug("Health check requested")
    return {"status": "Healthy"}


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Log unhandled exceptions (storage failures included) with their stack
    trace and answer 500 without exposing internals.
    """
    if isinstance(exc, (HTTPException, RequestValidationError)):
        raise exc

    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
        },
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )


app.include_router(tokens.router)


app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
