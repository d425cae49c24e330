from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from .database.init_db import init_database
from .api import register_routes
from .logging import configure_logging
from .config import get_settings
from .middleware.logging import RequestLoggingMiddleware
from .middleware.security import SecurityHeadersMiddleware
from .rate_limiter import limiter, rate_limit_error_handler
from .sentry import init_sentry

settings = get_settings()

configure_logging(settings.app.log_level)
init_sentry(settings)

app = FastAPI(title="musicbox")

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_error_handler)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,  # Use CORS origins from settings
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept"],
)

# Only create tables in development environment
if settings.is_development:
    init_database()

register_routes(app)
