from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse
from .config import get_settings
import logging

logger = logging.getLogger(__name__)

# Rate limit configurations for different endpoint categories
RATE_LIMITS = {
    # Like endpoints (per-user style limits)
    "song_like": "20/minute",            # 20 like/unlike requests per minute
    "song_stream": "60/minute",          # 60 signed stream URLs per minute

    # Playlist endpoints
    "playlist_write": "30/minute",       # create, edit, delete, add/remove songs
    "playlist_library": "30/minute",     # follow / unfollow

    # User endpoints
    "user_sync": "10/minute",            # 10 profile syncs per minute
    "user_delete": "3/minute",           # 3 account deletions per minute

    # General API (fallback)
    "general": "100/minute",             # 100 general requests per minute
}

# Initialize limiter with remote address as key
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[RATE_LIMITS["general"]],  # Global default
    storage_uri="memory://",  # In-memory storage (use Redis for production)
    enabled=get_settings().rate_limit_enabled,
)


async def rate_limit_error_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Custom error handler for rate limit exceeded errors."""
    logger.warning(
        f"Rate limit exceeded for {request.client.host if request.client else 'unknown'} on {request.url.path}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded",
            "message": "Too many requests. Please try again later.",
            "retry_after": exc.detail if hasattr(exc, 'detail') else "60 seconds"
        },
        headers={
            "Retry-After": "60",  # Suggest retry after 60 seconds
            "X-RateLimit-Limit": str(getattr(exc, 'limit', RATE_LIMITS["general"])),
        }
    )
