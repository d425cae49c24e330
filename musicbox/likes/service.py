"""
Like registry: the source of truth for who liked what.

Every like/unlike also updates the user's "Liked Songs" playlist in the
same transaction, so the playlist always mirrors the like set.
"""
from enum import Enum
from uuid import UUID
from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from ..entities.like import LikeEntry
from ..exceptions import PlaylistSyncError
from ..playlists import service as playlists_service
from ..audit import log_catalog_event, CatalogEventType
import logging

logger = logging.getLogger(__name__)


class LikeResult(str, Enum):
    ADDED = "added"
    ALREADY_LIKED = "already_liked"
    REMOVED = "removed"
    NOT_LIKED = "not_liked"


def is_liked(db: Session, user_id: UUID, song_id: UUID) -> bool:
    return db.query(
        db.query(LikeEntry)
        .filter(LikeEntry.user_id == user_id, LikeEntry.song_id == song_id)
        .exists()
    ).scalar()


def _like_exists(db: Session, user_id: UUID, song_id: UUID) -> bool:
    return (
        db.query(LikeEntry.id)
        .filter(LikeEntry.user_id == user_id, LikeEntry.song_id == song_id)
        .first()
        is not None
    )


def count_likes(db: Session, song_id: UUID) -> int:
    return db.query(func.count(LikeEntry.id)).filter(LikeEntry.song_id == song_id).scalar() or 0


def liked_song_ids(db: Session, user_id: UUID, song_ids: list[UUID]) -> set[UUID]:
    """Subset of song_ids liked by the user."""
    if not song_ids:
        return set()
    rows = (
        db.query(LikeEntry.song_id)
        .filter(LikeEntry.user_id == user_id, LikeEntry.song_id.in_(song_ids))
        .all()
    )
    return {row.song_id for row in rows}


def like_counts_subquery(db: Session):
    """(song_id, like_count) for every song with at least one like."""
    return (
        db.query(LikeEntry.song_id.label("song_id"), func.count(LikeEntry.id).label("like_count"))
        .group_by(LikeEntry.song_id)
        .subquery()
    )


def user_likes_subquery(db: Session, user_id: UUID):
    return db.query(LikeEntry.song_id).filter(LikeEntry.user_id == user_id).subquery()


def like_song(db: Session, user_id: UUID, song_id: UUID) -> LikeResult:
    """Like a song and append it to the user's Liked Songs playlist."""
    if is_liked(db, user_id, song_id):
        return LikeResult.ALREADY_LIKED

    try:
        with db.begin_nested():
            db.add(LikeEntry(user_id=user_id, song_id=song_id))
    except IntegrityError:
        # Unknown song or user, not a duplicate
        if not _like_exists(db, user_id, song_id):
            raise
        logger.info(f"Concurrent like for user {user_id} on song {song_id}")
        return LikeResult.ALREADY_LIKED

    try:
        liked_playlist = playlists_service.get_or_create_liked_songs_playlist(db, user_id, commit=False)
        outcome = playlists_service.add_entry(
            db, liked_playlist.id, song_id, user_id, allow_reserved=True, commit=False
        )
        if outcome is playlists_service.AddEntryResult.NOT_FOUND:
            raise PlaylistSyncError(f"Could not add song {song_id} to Liked Songs of user {user_id}")
        db.commit()
    except Exception:
        db.rollback()
        logger.error(f"Like of song {song_id} by user {user_id} rolled back", exc_info=True)
        raise

    log_catalog_event(CatalogEventType.SONG_LIKED, user_id=user_id, song_id=song_id)
    return LikeResult.ADDED


def unlike_song(db: Session, user_id: UUID, song_id: UUID) -> LikeResult:
    """Remove a like and drop the song from the user's Liked Songs playlist."""
    try:
        # The row count decides who removed the like when requests race
        deleted = (
            db.query(LikeEntry)
            .filter(LikeEntry.user_id == user_id, LikeEntry.song_id == song_id)
            .delete(synchronize_session=False)
        )
        if deleted == 0:
            db.rollback()
            return LikeResult.NOT_LIKED

        liked_playlist = playlists_service.get_or_create_liked_songs_playlist(db, user_id, commit=False)
        playlists_service.remove_entry(
            db, liked_playlist.id, song_id, user_id, allow_reserved=True, commit=False
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.error(f"Unlike of song {song_id} by user {user_id} rolled back", exc_info=True)
        raise

    log_catalog_event(CatalogEventType.SONG_UNLIKED, user_id=user_id, song_id=song_id)
    return LikeResult.REMOVED
