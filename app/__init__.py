# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the FastAPI web application:
# - main.py: App entry point, session middleware, error handlers
# - config.py: Environment variable loading and settings
# - auth/: Admin sessions, login gate and CSRF protection
# - routers/: API endpoint definitions organized by feature
#
# The app layer is thin - it handles HTTP concerns and delegates
# storage and validation to the core/ package.
# =============================================================================
