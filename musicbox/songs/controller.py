from typing import Optional
from uuid import UUID
from fastapi import APIRouter, HTTPException, Query, Request
from ..auth.service import OptionalUserId, CurrentUserId
from ..database.core import DbSession
from ..exceptions import StorageError
from ..likes import service as likes_service
from ..pagination import PageSize
from ..rate_limiter import limiter, RATE_LIMITS
from ..storage.service import StorageService
from . import service
from .models import SongPage, SongWithLikeInfo, StreamUrlResponse, LikeStatusResponse, LikeCountResponse
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/songs",
    tags=["songs"]
)


def _get_song_or_404(db, song_id: UUID, user_id: Optional[UUID]) -> SongWithLikeInfo:
    song = service.get_song(db, song_id, user_id)
    if song is None:
        raise HTTPException(status_code=404, detail="Song not found")
    return song


@router.get("", response_model=SongPage)
def list_songs(
    db: DbSession,
    user_id: OptionalUserId,
    page_size: PageSize,
    search_term: Optional[str] = Query(default=None, alias="searchTerm"),
    page: int = Query(default=1, ge=1),
    sort_by: Optional[str] = Query(default=None, alias="sortBy", description="'popular', 'liked' or empty"),
):
    """Search songs by title or artist, one page at a time."""
    songs, total_pages = service.list_songs(
        db,
        search_term=search_term,
        page=page,
        page_size=page_size,
        user_id=user_id,
        sort=service.SongSort.parse(sort_by),
    )
    return SongPage(songs=songs, total_pages=total_pages)


@router.get("/popular", response_model=SongPage)
def list_popular_songs(
    db: DbSession,
    user_id: OptionalUserId,
    page_size: PageSize,
    page: int = Query(default=1, ge=1),
):
    """Songs with at least one like, most liked first."""
    songs, total_pages = service.list_songs(
        db, page=page, page_size=page_size, user_id=user_id, sort=service.SongSort.POPULAR
    )
    return SongPage(songs=songs, total_pages=total_pages)


@router.get("/liked", response_model=SongPage)
def list_liked_songs(
    db: DbSession,
    user_id: CurrentUserId,
    page_size: PageSize,
    page: int = Query(default=1, ge=1),
):
    """Songs the current user has liked, by title."""
    songs, total_pages = service.list_songs(
        db, page=page, page_size=page_size, user_id=user_id, sort=service.SongSort.LIKED_BY_USER
    )
    return SongPage(songs=songs, total_pages=total_pages)


@router.get("/{song_id}", response_model=SongWithLikeInfo)
def get_song(song_id: UUID, db: DbSession, user_id: OptionalUserId):
    return _get_song_or_404(db, song_id, user_id)


@router.get("/{song_id}/stream", response_model=StreamUrlResponse)
@limiter.limit(RATE_LIMITS["song_stream"])
def get_stream_url(
    request: Request,
    song_id: UUID,
    db: DbSession,
    user_id: OptionalUserId,
    storage: StorageService,
):
    """
    Temporary streaming URL for a song.

    The URL carries a read-only signature that expires after the configured
    time (one hour by default).
    """
    song = _get_song_or_404(db, song_id, user_id)
    try:
        return StreamUrlResponse(stream_url=storage.get_stream_url(song.file_path))
    except StorageError as e:
        logger.error(f"Failed to sign stream URL for song {song_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error generating stream URL: {e}")


@router.post("/{song_id}/like")
@limiter.limit(RATE_LIMITS["song_like"])
def like_song(request: Request, song_id: UUID, db: DbSession, user_id: CurrentUserId):
    """Like a song; it is also added to the user's Liked Songs playlist."""
    if not service.song_exists(db, song_id):
        raise HTTPException(status_code=404, detail="Song not found")

    try:
        result = likes_service.like_song(db, user_id, song_id)
    except Exception:
        logger.error(f"Failed to like song {song_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
    if result is likes_service.LikeResult.ALREADY_LIKED:
        raise HTTPException(status_code=400, detail="Song is already liked")
    return {"message": "Song liked"}


@router.delete("/{song_id}/like")
@limiter.limit(RATE_LIMITS["song_like"])
def unlike_song(request: Request, song_id: UUID, db: DbSession, user_id: CurrentUserId):
    """Remove a like; the song also leaves the user's Liked Songs playlist."""
    if not service.song_exists(db, song_id):
        raise HTTPException(status_code=404, detail="Song not found")

    try:
        result = likes_service.unlike_song(db, user_id, song_id)
    except Exception:
        logger.error(f"Failed to unlike song {song_id}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
    if result is likes_service.LikeResult.NOT_LIKED:
        raise HTTPException(status_code=400, detail="Song is not liked")
    return {"message": "Song unliked"}


@router.get("/{song_id}/like", response_model=LikeStatusResponse)
def is_song_liked(song_id: UUID, db: DbSession, user_id: CurrentUserId):
    song = _get_song_or_404(db, song_id, user_id)
    return LikeStatusResponse(is_liked=song.is_liked)


@router.get("/{song_id}/likes", response_model=LikeCountResponse)
def get_like_count(song_id: UUID, db: DbSession, user_id: OptionalUserId):
    song = _get_song_or_404(db, song_id, user_id)
    return LikeCountResponse(like_count=song.like_count)
