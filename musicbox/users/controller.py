from fastapi import APIRouter, HTTPException, Request, status

from ..database.core import DbSession
from . import models
from . import service
from ..auth.service import CurrentToken, CurrentUserId
from ..rate_limiter import limiter, RATE_LIMITS
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["Users"]
)


@router.post("/sync", response_model=models.UserResponse)
@limiter.limit(RATE_LIMITS["user_sync"])
def sync_current_user(request: Request, current_token: CurrentToken, db: DbSession):
    """
    Create or refresh the account behind the presented token.
    Clients call this after signing in with the identity provider.
    """
    try:
        return service.sync_user(db, current_token)
    except Exception:
        logger.error("User sync failed", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/me", response_model=models.UserResponse)
def get_current_user(current_user_id: CurrentUserId, db: DbSession):
    """
    Get current user information.
    Requires authentication.
    """
    user = service.get_user_by_id(db, current_user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(RATE_LIMITS["user_delete"])
def delete_current_user(request: Request, current_user_id: CurrentUserId, db: DbSession):
    """Delete the current account together with its likes, playlists and library."""
    try:
        deleted = service.delete_user(db, current_user_id)
    except Exception:
        logger.error(f"Failed to delete user {current_user_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
    if not deleted:
        raise HTTPException(status_code=404, detail="User not found")
