"""
Playlist lifecycle, membership and visibility.

Visibility: a playlist is readable by its creator, and by everyone else
only when it is public. Anything a requester may not see or may not change
is reported exactly like a missing playlist.
"""
import math
from enum import Enum
from typing import Optional
from uuid import UUID
from sqlalchemy import func, or_, and_, select
from sqlalchemy.orm import Session, joinedload, selectinload
from sqlalchemy.exc import IntegrityError
from ..database.core import utcnow
from ..entities.playlist import Playlist, LIKED_SONGS_PLAYLIST_NAME, LIKED_SONGS_DESCRIPTION
from ..entities.playlist_entry import PlaylistEntry
from ..entities.library_entry import LibraryEntry
from ..entities.song import Song
from ..exceptions import ValidationError, ReservedPlaylistError
from ..library import service as library_service
from ..audit import log_catalog_event, CatalogEventType
from ..songs.models import SongResponse
from .models import (
    CreatePlaylistRequest,
    EditPlaylistRequest,
    CreatorInfo,
    PlaylistSummary,
    PlaylistDetail,
    PlaylistSong,
)
import logging

logger = logging.getLogger(__name__)


class AddEntryResult(str, Enum):
    SUCCESS = "success"
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"


class RemoveEntryResult(str, Enum):
    REMOVED = "removed"
    NOT_FOUND = "not_found"


class LibraryResult(str, Enum):
    ADDED = "added"
    ALREADY_PRESENT = "already_present"
    REMOVED = "removed"
    NOT_FOUND = "not_found"


def _is_visible(playlist: Playlist, requester_id: Optional[UUID]) -> bool:
    return playlist.is_public or playlist.creator_id == requester_id


def _check_name_allowed(name: str) -> None:
    if name.strip().casefold() == LIKED_SONGS_PLAYLIST_NAME.casefold():
        raise ValidationError(f"'{LIKED_SONGS_PLAYLIST_NAME}' is a reserved playlist name")


def _matches(term: str, value: str) -> bool:
    return term.casefold() in value.casefold()


def _song_counts(db: Session, playlist_ids: list[UUID]) -> dict[UUID, int]:
    if not playlist_ids:
        return {}
    rows = (
        db.query(PlaylistEntry.playlist_id, func.count(PlaylistEntry.id))
        .filter(PlaylistEntry.playlist_id.in_(playlist_ids))
        .group_by(PlaylistEntry.playlist_id)
        .all()
    )
    return {playlist_id: count for playlist_id, count in rows}


def _to_summary(playlist: Playlist, requester_id: Optional[UUID], in_library: bool, song_count: int) -> PlaylistSummary:
    is_creator = playlist.creator_id == requester_id
    return PlaylistSummary(
        id=playlist.id,
        name=playlist.name,
        description=playlist.description,
        creator_id=playlist.creator_id,
        created_at=playlist.created_at,
        updated_at=playlist.updated_at,
        is_public=playlist.is_public,
        is_creator=is_creator,
        # The creator always has their own playlists in their library
        is_in_library=is_creator or in_library,
        song_count=song_count,
        creator=CreatorInfo(id=playlist.creator.id, name=playlist.creator.name) if playlist.creator else None,
    )


def _summaries(db: Session, playlists: list[Playlist], requester_id: Optional[UUID]) -> list[PlaylistSummary]:
    ids = [p.id for p in playlists]
    counts = _song_counts(db, ids)
    in_library = library_service.member_playlist_ids(db, requester_id, ids) if requester_id else set()
    return [_to_summary(p, requester_id, p.id in in_library, counts.get(p.id, 0)) for p in playlists]


def _entry_exists(db: Session, playlist_id: UUID, song_id: UUID) -> bool:
    return (
        db.query(PlaylistEntry.id)
        .filter(PlaylistEntry.playlist_id == playlist_id, PlaylistEntry.song_id == song_id)
        .first()
        is not None
    )


def _find_liked_songs_playlist(db: Session, user_id: UUID) -> Playlist | None:
    return (
        db.query(Playlist)
        .filter(Playlist.creator_id == user_id, Playlist.name == LIKED_SONGS_PLAYLIST_NAME)
        .first()
    )


def get_or_create_liked_songs_playlist(db: Session, user_id: UUID, commit: bool = True) -> Playlist:
    """
    Return the user's Liked Songs playlist, creating it on first use.

    The insert runs in a SAVEPOINT. If another request created the row in
    the meantime the unique index rejects ours and we read theirs instead.
    """
    playlist = _find_liked_songs_playlist(db, user_id)
    if playlist:
        return playlist

    try:
        with db.begin_nested():
            playlist = Playlist(
                name=LIKED_SONGS_PLAYLIST_NAME,
                description=LIKED_SONGS_DESCRIPTION,
                creator_id=user_id,
                is_public=False,
            )
            db.add(playlist)
    except IntegrityError:
        logger.info(f"Liked Songs playlist for user {user_id} was created concurrently")
        playlist = _find_liked_songs_playlist(db, user_id)
        if playlist is None:
            raise
        return playlist

    if commit:
        db.commit()
        db.refresh(playlist)
    log_catalog_event(CatalogEventType.LIKED_SONGS_PROVISIONED, user_id=user_id, playlist_id=playlist.id)
    return playlist


def create_playlist(db: Session, user_id: UUID, request: CreatePlaylistRequest) -> Playlist:
    """Create a playlist and put it in the creator's library."""
    _check_name_allowed(request.name)

    playlist = Playlist(
        name=request.name,
        description=request.description,
        creator_id=user_id,
        is_public=request.is_public,
    )
    try:
        db.add(playlist)
        db.flush()
        library_service.add_entry(db, user_id, playlist.id)
        db.commit()
        db.refresh(playlist)
    except Exception:
        db.rollback()
        logger.error(f"Failed to create playlist '{request.name}' for user {user_id}", exc_info=True)
        raise

    log_catalog_event(CatalogEventType.PLAYLIST_CREATED, user_id=user_id, playlist_id=playlist.id)
    return playlist


def get_playlist(db: Session, playlist_id: UUID, requester_id: Optional[UUID]) -> PlaylistDetail | None:
    """Playlist with its songs in position order, or None if not visible."""
    playlist = (
        db.query(Playlist)
        .options(
            joinedload(Playlist.creator),
            selectinload(Playlist.entries).joinedload(PlaylistEntry.song),
        )
        .filter(Playlist.id == playlist_id)
        .first()
    )
    if not playlist or not _is_visible(playlist, requester_id):
        return None

    in_library = requester_id is not None and library_service.exists(db, requester_id, playlist.id)
    summary = _to_summary(playlist, requester_id, in_library, len(playlist.entries))
    songs = [
        PlaylistSong(
            **SongResponse.model_validate(entry.song).model_dump(),
            position=entry.position,
            added_at=entry.created_at,
        )
        for entry in playlist.entries
    ]
    return PlaylistDetail(**summary.model_dump(), songs=songs)


def get_liked_songs_playlist(db: Session, user_id: UUID) -> PlaylistDetail:
    playlist = get_or_create_liked_songs_playlist(db, user_id)
    return get_playlist(db, playlist.id, user_id)


def add_entry(
    db: Session,
    playlist_id: UUID,
    song_id: UUID,
    requester_id: UUID,
    allow_reserved: bool = False,
    commit: bool = True,
) -> AddEntryResult:
    """
    Append a song to a playlist.

    Allowed for the creator and for anyone who has the playlist in their
    library. The new entry goes after the current highest position.
    """
    playlist = db.query(Playlist).filter(Playlist.id == playlist_id).first()
    if not playlist:
        return AddEntryResult.NOT_FOUND
    if playlist.creator_id != requester_id and not library_service.exists(db, requester_id, playlist_id):
        return AddEntryResult.NOT_FOUND
    if playlist.is_liked_songs and not allow_reserved:
        raise ReservedPlaylistError()

    if db.query(Song.id).filter(Song.id == song_id).first() is None:
        return AddEntryResult.NOT_FOUND

    if _entry_exists(db, playlist_id, song_id):
        return AddEntryResult.ALREADY_EXISTS

    max_position = (
        db.query(func.max(PlaylistEntry.position))
        .filter(PlaylistEntry.playlist_id == playlist_id)
        .scalar()
    )
    position = 0 if max_position is None else max_position + 1

    try:
        with db.begin_nested():
            db.add(PlaylistEntry(playlist_id=playlist_id, song_id=song_id, position=position))
    except IntegrityError:
        logger.info(f"Song {song_id} was added to playlist {playlist_id} concurrently")
        return AddEntryResult.ALREADY_EXISTS

    if commit:
        db.commit()
    log_catalog_event(
        CatalogEventType.PLAYLIST_SONG_ADDED,
        user_id=requester_id,
        song_id=song_id,
        playlist_id=playlist_id,
        details={"position": position},
    )
    return AddEntryResult.SUCCESS


def remove_entry(
    db: Session,
    playlist_id: UUID,
    song_id: UUID,
    requester_id: UUID,
    allow_reserved: bool = False,
    commit: bool = True,
) -> RemoveEntryResult:
    """Remove a song from a playlist. Creator only; positions are left as they are."""
    playlist = (
        db.query(Playlist)
        .filter(Playlist.id == playlist_id, Playlist.creator_id == requester_id)
        .first()
    )
    if not playlist:
        return RemoveEntryResult.NOT_FOUND
    if playlist.is_liked_songs and not allow_reserved:
        raise ReservedPlaylistError()

    entry = (
        db.query(PlaylistEntry)
        .filter(PlaylistEntry.playlist_id == playlist_id, PlaylistEntry.song_id == song_id)
        .first()
    )
    if not entry:
        return RemoveEntryResult.NOT_FOUND

    db.delete(entry)
    db.flush()
    if commit:
        db.commit()
    log_catalog_event(
        CatalogEventType.PLAYLIST_SONG_REMOVED,
        user_id=requester_id,
        song_id=song_id,
        playlist_id=playlist_id,
    )
    return RemoveEntryResult.REMOVED


def delete_playlist(db: Session, playlist_id: UUID, requester_id: UUID) -> bool:
    """Delete a playlist with its entries and library rows. Creator only."""
    playlist = (
        db.query(Playlist)
        .filter(Playlist.id == playlist_id, Playlist.creator_id == requester_id)
        .first()
    )
    if not playlist:
        return False
    if playlist.is_liked_songs:
        raise ReservedPlaylistError()

    try:
        db.delete(playlist)
        db.commit()
    except Exception:
        db.rollback()
        logger.error(f"Failed to delete playlist {playlist_id}", exc_info=True)
        raise

    log_catalog_event(CatalogEventType.PLAYLIST_DELETED, user_id=requester_id, playlist_id=playlist_id)
    return True


def edit_playlist(db: Session, playlist_id: UUID, requester_id: UUID, request: EditPlaylistRequest) -> Playlist | None:
    """
    Update name, description and visibility. Creator only.

    Only fields present in the request and different from the stored value
    are written; updated_at moves only when something changed.
    """
    playlist = (
        db.query(Playlist)
        .filter(Playlist.id == playlist_id, Playlist.creator_id == requester_id)
        .first()
    )
    if not playlist:
        return None
    if playlist.is_liked_songs:
        raise ReservedPlaylistError()

    changed = []
    if request.name is not None and request.name != playlist.name:
        _check_name_allowed(request.name)
        playlist.name = request.name
        changed.append("name")
    if "description" in request.model_fields_set and request.description != playlist.description:
        playlist.description = request.description
        changed.append("description")
    if request.is_public is not None and request.is_public != playlist.is_public:
        playlist.is_public = request.is_public
        changed.append("is_public")

    if changed:
        playlist.updated_at = utcnow()
        db.commit()
        db.refresh(playlist)
        log_catalog_event(
            CatalogEventType.PLAYLIST_EDITED,
            user_id=requester_id,
            playlist_id=playlist_id,
            details={"fields": changed},
        )
    return playlist


def add_to_library(db: Session, playlist_id: UUID, user_id: UUID) -> LibraryResult:
    """Follow a playlist. Any existing playlist id is accepted."""
    if db.query(Playlist.id).filter(Playlist.id == playlist_id).first() is None:
        return LibraryResult.NOT_FOUND

    if not library_service.add_entry(db, user_id, playlist_id):
        return LibraryResult.ALREADY_PRESENT

    db.commit()
    log_catalog_event(CatalogEventType.LIBRARY_ADDED, user_id=user_id, playlist_id=playlist_id)
    return LibraryResult.ADDED


def remove_from_library(db: Session, playlist_id: UUID, user_id: UUID) -> LibraryResult:
    if not library_service.remove_entry(db, user_id, playlist_id):
        return LibraryResult.NOT_FOUND

    db.commit()
    log_catalog_event(CatalogEventType.LIBRARY_REMOVED, user_id=user_id, playlist_id=playlist_id)
    return LibraryResult.REMOVED


def list_user_playlists(db: Session, user_id: UUID, search_term: Optional[str] = None) -> list[PlaylistSummary]:
    """
    Playlists in the user's library: created ones plus followed public ones,
    ordered by name. The Liked Songs playlist always comes first when it
    matches the search.
    """
    term = (search_term or "").strip()
    result: list[PlaylistSummary] = []

    liked_playlist = get_or_create_liked_songs_playlist(db, user_id)
    if not term or _matches(term, LIKED_SONGS_PLAYLIST_NAME):
        liked_count = _song_counts(db, [liked_playlist.id]).get(liked_playlist.id, 0)
        result.append(_to_summary(liked_playlist, user_id, True, liked_count))

    followed = select(LibraryEntry.playlist_id).where(LibraryEntry.user_id == user_id)
    query = (
        db.query(Playlist)
        .options(joinedload(Playlist.creator))
        .filter(
            Playlist.name != LIKED_SONGS_PLAYLIST_NAME,
            or_(
                Playlist.creator_id == user_id,
                and_(Playlist.is_public.is_(True), Playlist.id.in_(followed)),
            ),
        )
    )
    if term:
        query = query.filter(Playlist.name.icontains(term, autoescape=True))

    playlists = query.order_by(func.lower(Playlist.name), Playlist.created_at).all()
    result.extend(_summaries(db, playlists, user_id))
    return result


def list_all_playlists(
    db: Session,
    search_term: Optional[str] = None,
    page: int = 1,
    page_size: int = 10,
    requester_id: Optional[UUID] = None,
) -> tuple[list[PlaylistSummary], int]:
    """Browse every playlist the requester may see, alphabetically, one page at a time."""
    term = (search_term or "").strip()

    query = db.query(Playlist).filter(
        Playlist.name != LIKED_SONGS_PLAYLIST_NAME,
        or_(Playlist.is_public.is_(True), Playlist.creator_id == requester_id),
    )
    if term:
        query = query.filter(Playlist.name.icontains(term, autoescape=True))

    total_count = query.count()
    total_pages = math.ceil(total_count / page_size)

    playlists = (
        query.options(joinedload(Playlist.creator))
        .order_by(func.lower(Playlist.name), Playlist.created_at, Playlist.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return _summaries(db, playlists, requester_id), total_pages
