"""
Library membership: which playlists a user keeps in their collection.

These helpers only stage changes on the session; the calling playlist
operation owns the transaction.
"""
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from ..entities.library_entry import LibraryEntry


def exists(db: Session, user_id: UUID, playlist_id: UUID) -> bool:
    return db.query(
        db.query(LibraryEntry)
        .filter(LibraryEntry.user_id == user_id, LibraryEntry.playlist_id == playlist_id)
        .exists()
    ).scalar()


def add_entry(db: Session, user_id: UUID, playlist_id: UUID) -> bool:
    """Stage a library row; False if the user already has the playlist."""
    if exists(db, user_id, playlist_id):
        return False

    try:
        with db.begin_nested():
            db.add(LibraryEntry(user_id=user_id, playlist_id=playlist_id))
    except IntegrityError:
        # Lost a race against the same request from another session
        return False
    return True


def remove_entry(db: Session, user_id: UUID, playlist_id: UUID) -> bool:
    entry = (
        db.query(LibraryEntry)
        .filter(LibraryEntry.user_id == user_id, LibraryEntry.playlist_id == playlist_id)
        .first()
    )
    if not entry:
        return False

    db.delete(entry)
    db.flush()
    return True


def member_playlist_ids(db: Session, user_id: UUID, playlist_ids: list[UUID]) -> set[UUID]:
    """Subset of playlist_ids that are in the user's library."""
    if not playlist_ids:
        return set()
    rows = (
        db.query(LibraryEntry.playlist_id)
        .filter(LibraryEntry.user_id == user_id, LibraryEntry.playlist_id.in_(playlist_ids))
        .all()
    )
    return {row.playlist_id for row in rows}
