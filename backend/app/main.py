"""FastAPI application entry point for the message service."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.middleware.sessions import SessionMiddleware

from .api import routes_admin, routes_conversations, routes_messages, routes_user_holders
from .core.config import settings
from .core.errors import ServiceError, service_error_handler
from .core.middleware import RequestLoggingMiddleware
from .core.rate_limiter import limiter, rate_limit_handler


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION)

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(ServiceError, service_error_handler)

    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.rstrip("/") for origin in settings.CORS_ALLOWED_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            f"X-{settings.APP_NAME}-alert",
            f"X-{settings.APP_NAME}-error",
            f"X-{settings.APP_NAME}-params",
        ],
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET,
        session_cookie=settings.SESSION_COOKIE_NAME,
        same_site="lax",
        https_only=settings.SESSION_COOKIE_SECURE,
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(routes_admin.router, prefix="/admin", tags=["admin"])
    app.include_router(routes_messages.router, prefix="/api", tags=["messages"])
    app.include_router(routes_conversations.router, prefix="/api/conversations", tags=["conversations"])
    app.include_router(routes_user_holders.router, prefix="/api/user-holders", tags=["user-holders"])

    @app.get("/health", tags=["admin"], summary="Service health check")
    async def health() -> dict[str, str]:
        """Return a simple liveness payload."""
        return {"status": "ok"}

    return app


app = create_app()
