# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Portfolio API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
#   python -m app.main          (uses API_HOST / API_PORT)
# =============================================================================

import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.auth import CsrfGuard, get_session_store
from app.auth import routes as auth_routes
from app.config import settings
from app.dependencies import get_config_store
from app.exceptions import (
    PortfolioException,
    portfolio_exception_handler,
    validation_exception_handler,
)
from app.routers import health, profile, projects, upload

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup and shutdown:
    - Startup: Create the data directories, report admin configuration
    - Shutdown: Nothing to release; every write completes before its
      request returns
    """
    # Startup
    logger.info(f"Starting Portfolio API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    store = app.dependency_overrides.get(get_config_store, get_config_store)()
    store.ensure_layout()
    logger.info(f"Config document: {store.config_path}")

    if not settings.admin_configured:
        logger.warning("ADMIN_KEY is not set; admin login and all writes are disabled")

    yield

    # Shutdown
    logger.info("Shutting down Portfolio API")


# Create FastAPI application
app = FastAPI(
    title="Portfolio API",
    description="""
## Personal Site Content API

Stores the site profile and the ordered list of portfolio projects in a
single JSON document.

### Writing

All POST/PATCH/DELETE endpoints require:

1. **An admin session** - `POST /api/admin/login` with `{"key": "<ADMIN_KEY>"}`
2. **A CSRF token** - from the `csrf_token` cookie or `GET /api/csrf-token`,
   echoed in the `X-CSRF-Token` header

### Quick Start

```bash
# 1. Get a CSRF token (also sets the session and csrf cookies)
curl -c jar -b jar http://localhost:3000/api/csrf-token

# 2. Log in
curl -c jar -b jar -X POST http://localhost:3000/api/admin/login \\
  -H "X-CSRF-Token: <token>" -H "Content-Type: application/json" \\
  -d '{"key": "<ADMIN_KEY>"}'

# 3. Create a project
curl -c jar -b jar -X POST http://localhost:3000/api/projects \\
  -H "X-CSRF-Token: <token>" -H "Content-Type: application/json" \\
  -d '{"title": "Site", "description": "My site", "tags": "python, web"}'
```
""",
    version=health.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Auth",
            "description": "Admin login/logout and CSRF tokens",
        },
        {
            "name": "Profile",
            "description": "The site profile",
        },
        {
            "name": "Projects",
            "description": "Portfolio projects",
        },
        {
            "name": "Upload",
            "description": "Project image upload",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

@app.middleware("http")
async def session_middleware(request: Request, call_next):
    """
    Attach the session to the request, then refresh the session and CSRF
    cookies on the response.

    Routes may replace request.state.session (login rotates it) or clear it
    (logout); a cleared session is replaced by a new anonymous one.
    """
    sessions = get_session_store()
    incoming_token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    request.state.session = sessions.resolve(incoming_token)

    response = await call_next(request)

    session = getattr(request.state, "session", None) or sessions.create()
    # Minted before encoding: anonymous sessions carry their token in the cookie
    csrf_token = CsrfGuard.issue(session)
    session_token = sessions.encode(session)
    if session_token != incoming_token:
        response.set_cookie(
            key=settings.SESSION_COOKIE_NAME,
            value=session_token,
            max_age=max(int(session.expires_at - time.time()), 0),
            httponly=True,
            secure=settings.cookie_secure,
            samesite="strict" if settings.is_production else "lax",
        )

    if csrf_token != request.cookies.get(settings.CSRF_COOKIE_NAME):
        response.set_cookie(
            key=settings.CSRF_COOKIE_NAME,
            value=csrf_token,
            httponly=True,
            secure=settings.cookie_secure,
            samesite="strict" if settings.is_production else "lax",
        )

    return response


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """Log API requests with status and duration, and add security headers."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000

    if request.url.path.startswith("/api"):
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} in {duration_ms:.0f}ms"
        )

    for header, value in SECURITY_HEADERS.items():
        response.headers.setdefault(header, value)
    return response


# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(PortfolioException)
async def handle_portfolio_exception(request: Request, exc: PortfolioException):
    """Handle custom Portfolio exceptions."""
    return await portfolio_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    """Handle request body/path validation errors."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Authentication endpoints (login/logout/status/csrf-token)
app.include_router(
    auth_routes.router,
    prefix="/api",
    tags=["Auth"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api",
    tags=["Health"]
)

# Profile endpoints
app.include_router(
    profile.router,
    prefix="/api",
    tags=["Profile"]
)

# Project image upload (before /projects/{id})
app.include_router(
    upload.router,
    prefix="/api/projects",
    tags=["Upload"]
)

# Project CRUD endpoints
app.include_router(
    projects.router,
    prefix="/api/projects",
    tags=["Projects"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Portfolio API",
        "version": health.API_VERSION,
        "docs": "/docs",
        "health": "/api/health",
    }


# =============================================================================
# Launcher
# =============================================================================

def main() -> None:
    """Run the API with uvicorn on API_HOST:API_PORT (auto-reload in development)."""
    uvicorn.run(
        "app.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.is_development,
        log_level="debug" if settings.DEBUG else "info",
    )


if __name__ == "__main__":
    main()
