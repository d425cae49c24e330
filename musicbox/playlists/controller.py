from typing import Optional
from uuid import UUID
from fastapi import APIRouter, HTTPException, Query, Request, status
from ..auth.service import CurrentUserId
from ..database.core import DbSession
from ..exceptions import ValidationError
from ..rate_limiter import limiter, RATE_LIMITS
from ..pagination import PageSize
from . import service
from .models import (
    CreatePlaylistRequest,
    EditPlaylistRequest,
    PlaylistDetail,
    PlaylistPage,
    PlaylistSummary,
)
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/playlists",
    tags=["playlists"]
)

NOT_FOUND_DETAIL = "Playlist not found"


@router.get("", response_model=list[PlaylistSummary])
def list_user_playlists(
    db: DbSession,
    user_id: CurrentUserId,
    search_term: Optional[str] = Query(default=None, alias="searchTerm"),
):
    """The current user's library: Liked Songs first, then playlists by name."""
    return service.list_user_playlists(db, user_id, search_term)


@router.get("/all", response_model=PlaylistPage)
def list_all_playlists(
    db: DbSession,
    user_id: CurrentUserId,
    page_size: PageSize,
    search_term: Optional[str] = Query(default=None, alias="searchTerm"),
    page: int = Query(default=1, ge=1),
):
    """Browse public playlists and the user's own, alphabetically."""
    playlists, total_pages = service.list_all_playlists(db, search_term, page, page_size, user_id)
    return PlaylistPage(playlists=playlists, total_pages=total_pages)


@router.get("/liked", response_model=PlaylistDetail)
def get_liked_songs_playlist(db: DbSession, user_id: CurrentUserId):
    """The user's Liked Songs playlist, created on first access."""
    return service.get_liked_songs_playlist(db, user_id)


@router.get("/{playlist_id}", response_model=PlaylistDetail)
def get_playlist(playlist_id: UUID, db: DbSession, user_id: CurrentUserId):
    playlist = service.get_playlist(db, playlist_id, user_id)
    if playlist is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
    return playlist


@router.post("", response_model=PlaylistDetail, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMITS["playlist_write"])
def create_playlist(request: Request, payload: CreatePlaylistRequest, db: DbSession, user_id: CurrentUserId):
    """Create a playlist; it shows up in the creator's library right away."""
    try:
        playlist = service.create_playlist(db, user_id, payload)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.error(f"{request.method} {request.url.path} failed", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
    return service.get_playlist(db, playlist.id, user_id)


@router.patch("/{playlist_id}", response_model=PlaylistDetail)
@limiter.limit(RATE_LIMITS["playlist_write"])
def edit_playlist(
    request: Request,
    playlist_id: UUID,
    payload: EditPlaylistRequest,
    db: DbSession,
    user_id: CurrentUserId,
):
    """Rename, describe or publish a playlist. Creator only."""
    try:
        playlist = service.edit_playlist(db, playlist_id, user_id, payload)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.error(f"{request.method} {request.url.path} failed", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
    if playlist is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
    return service.get_playlist(db, playlist.id, user_id)


@router.delete("/{playlist_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(RATE_LIMITS["playlist_write"])
def delete_playlist(request: Request, playlist_id: UUID, db: DbSession, user_id: CurrentUserId):
    try:
        deleted = service.delete_playlist(db, playlist_id, user_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.error(f"{request.method} {request.url.path} failed", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
    if not deleted:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)


@router.post("/{playlist_id}/songs/{song_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(RATE_LIMITS["playlist_write"])
def add_song_to_playlist(request: Request, playlist_id: UUID, song_id: UUID, db: DbSession, user_id: CurrentUserId):
    """
    Append a song to a playlist.
    Adding a song that is already there succeeds without changing anything.
    """
    try:
        result = service.add_entry(db, playlist_id, song_id, user_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.error(f"{request.method} {request.url.path} failed", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
    if result is service.AddEntryResult.NOT_FOUND:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)


@router.delete("/{playlist_id}/songs/{song_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(RATE_LIMITS["playlist_write"])
def remove_song_from_playlist(request: Request, playlist_id: UUID, song_id: UUID, db: DbSession, user_id: CurrentUserId):
    try:
        result = service.remove_entry(db, playlist_id, song_id, user_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.error(f"{request.method} {request.url.path} failed", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
    if result is service.RemoveEntryResult.NOT_FOUND:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)


@router.post("/{playlist_id}/library", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(RATE_LIMITS["playlist_library"])
def add_playlist_to_library(request: Request, playlist_id: UUID, db: DbSession, user_id: CurrentUserId):
    try:
        result = service.add_to_library(db, playlist_id, user_id)
    except Exception:
        logger.error(f"{request.method} {request.url.path} failed", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
    if result is service.LibraryResult.NOT_FOUND:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)


@router.delete("/{playlist_id}/library", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(RATE_LIMITS["playlist_library"])
def remove_playlist_from_library(request: Request, playlist_id: UUID, db: DbSession, user_id: CurrentUserId):
    try:
        result = service.remove_from_library(db, playlist_id, user_id)
    except Exception:
        logger.error(f"{request.method} {request.url.path} failed", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
    if result is service.LibraryResult.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Playlist not in library")
