from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from app.core.config import settings
from app.core.database import init_db, close_db
from app.core.exceptions import CMSError, error_response
from app.core.logging_config import logger
from app.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
)
from app.core.rate_limiter import limiter, rate_limit_exceeded_handler
from app.api.v1.router import api_router
from slowapi.errors import RateLimitExceeded

APP_VERSION = "1.0.0"


async def validate_critical_config():
    """Fail fast on settings the CMS cannot run without; warn on risky ones"""
    errors = []
    warnings = []
    production = settings.ENVIRONMENT == "production"

    if not settings.DATABASE_URL:
        errors.append("DATABASE_URL is not set")

    if not settings.JWT_SECRET_KEY or settings.JWT_SECRET_KEY == "CHANGE_ME":
        (errors if production else warnings).append("JWT_SECRET_KEY is not set or using default value")

    if production and settings.BCRYPT_ROUNDS < 10:
        warnings.append(f"BCRYPT_ROUNDS={settings.BCRYPT_ROUNDS} is too low for production")

    if settings.MAX_CSV_UPLOAD_SIZE > settings.MAX_REQUEST_SIZE:
        warnings.append("MAX_CSV_UPLOAD_SIZE exceeds MAX_REQUEST_SIZE; large uploads are cut off at the request limit")

    if settings.ID_ALLOCATION_MAX_PROBES < 1:
        errors.append("ID_ALLOCATION_MAX_PROBES must be at least 1")

    if settings.RATE_LIMIT_ENABLED and not settings.REDIS_URL:
        warnings.append("REDIS_URL not set, rate limits are kept in process memory")

    if not settings.CORS_ORIGINS:
        warnings.append("CORS_ORIGINS_STR is empty, browsers on other origins will be refused")

    for warn in warnings:
        logger.warning(f"[Startup] {warn}")

    if errors:
        for err in errors:
            logger.critical(f"[Startup] {err}")
        raise RuntimeError(f"Invalid configuration: {', '.join(errors)}")

    logger.info("[Startup] Configuration validated")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        f"Starting {settings.APP_NAME} {APP_VERSION} ({settings.ENVIRONMENT}, API {settings.API_VERSION})"
    )
    await validate_critical_config()
    await init_db()
    logger.info("[Startup] Database tables ready")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}")
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    description="Content management backend for academic project problem statements",
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    redirect_slashes=False,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Last added runs first: CORS, size limit, security headers, request logging
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_REQUEST_SIZE)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)


@app.exception_handler(CMSError)
async def cms_exception_handler(request: Request, exc: CMSError):
    if exc.status_code >= 500:
        logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    else:
        logger.warning(f"{type(exc).__name__}: {exc.message}", extra={"error_code": exc.code})
    return JSONResponse(status_code=exc.status_code, content=error_response(exc))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": str(exc) if settings.DEBUG else "Internal server error"
        }
    )


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "OK",
        "app_name": settings.APP_NAME,
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT
    }


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": APP_VERSION,
        "docs": "/docs",
        "health": "/health",
        "api": f"/api/{settings.API_VERSION}"
    }


app.include_router(api_router, prefix=f"/api/{settings.API_VERSION}")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG
    )
