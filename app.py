"""
Storefront Order Intake API
FastAPI backend storing orders in a JSON file and forwarding them to WhatsApp
"""

import math
import os
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

import admin
import routes
from config import get_settings
from dependencies import IMAGES_PATH
from errors import OrderApiError
from logging_config import configure_logging
from schemas import FIELD_ERRORS
from security import RateLimiter

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    settings = get_settings()
    os.makedirs(settings.images_dir, exist_ok=True)

    logger.info(
        "application_startup",
        version="1.0.0",
        port=settings.port,
        environment=settings.environment,
        has_order_secret=bool(settings.order_secret),
        has_whatsapp_credentials=settings.has_whatsapp_credentials,
    )
    if not settings.order_secret:
        logger.warning("order_secret_not_set", detail="order and admin routes are open to anyone")
    yield
    logger.info("application_shutdown")


def _validation_message(exc: RequestValidationError) -> str:
    for error in exc.errors():
        for part in error.get("loc", ()):
            if part in FIELD_ERRORS:
                return FIELD_ERRORS[part]
    return "Invalid request body"


def _internal_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_exception", error=str(exc), path=request.url.path)
    return JSONResponse(status_code=500, content={"error": str(exc)})


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, settings.environment)

    app = FastAPI(
        title="Storefront Order Intake API",
        description="Order intake with WhatsApp notifications and image management",
        version="1.0.0",
        lifespan=lifespan,
    )

    general_limiter = RateLimiter(settings.rate_limit_max, settings.rate_limit_window)
    admin_limiter = RateLimiter(settings.admin_rate_limit_max, settings.admin_rate_limit_window)
    app.state.general_limiter = general_limiter
    app.state.admin_limiter = admin_limiter

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        """Per-IP limits on order and admin routes, stricter for admin"""
        client_ip = request.client.host if request.client else "unknown"
        path = request.url.path
        if path.startswith("/admin/"):
            limiter = admin_limiter
            message = "Too many requests, please try again later."
        elif path.startswith("/api/"):
            limiter = general_limiter
            message = "Too many requests from this IP, please try again later."
        else:
            return await call_next(request)

        retry_after = limiter.hit(client_ip)
        if retry_after is not None:
            logger.warning("rate_limit_exceeded", ip=client_ip, path=path)
            return JSONResponse(
                status_code=429,
                content={"error": message},
                headers={"Retry-After": str(max(1, math.ceil(retry_after)))},
            )
        return await call_next(request)

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        # Unhandled errors are turned into responses here, inside CORS
        try:
            response = await call_next(request)
        except Exception as exc:
            response = _internal_error(request, exc)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    # CORS - restrict via ALLOWED_ORIGIN in production
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.allowed_origin],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "x-order-secret"],
        max_age=600,
    )

    # Error handlers
    @app.exception_handler(OrderApiError)
    async def order_api_error_handler(request: Request, exc: OrderApiError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        message = _validation_message(exc)
        logger.info("request_rejected", path=request.url.path, error=message)
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        return _internal_error(request, exc)

    app.include_router(routes.router)
    app.include_router(admin.router)

    # Serve uploaded images
    app.mount(
        IMAGES_PATH,
        StaticFiles(directory=settings.images_dir, check_dir=False),
        name="images",
    )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app:app",
        host="0.0.0.0",
        port=get_settings().port,
        workers=1,
        reload=False,
        log_level=get_settings().log_level.lower(),
    )
