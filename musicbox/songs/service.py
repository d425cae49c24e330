import math
from enum import Enum
from typing import Optional
from uuid import UUID
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session
from ..entities.song import Song
from ..likes import service as likes_service
from .models import SongWithLikeInfo


class SongSort(Enum):
    """How a song listing is filtered and ordered."""
    NONE = "none"
    POPULAR = "popular"
    LIKED_BY_USER = "liked"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SongSort":
        """Map the sortBy query value; anything unrecognised means NONE."""
        normalized = (value or "").strip().lower()
        for member in (cls.POPULAR, cls.LIKED_BY_USER):
            if member.value == normalized:
                return member
        return cls.NONE


def _to_song_info(song: Song, like_count: int, is_liked: bool) -> SongWithLikeInfo:
    info = SongWithLikeInfo.model_validate(song)
    info.like_count = like_count
    info.is_liked = is_liked
    return info


def list_songs(
    db: Session,
    search_term: Optional[str] = None,
    page: int = 1,
    page_size: int = 10,
    user_id: Optional[UUID] = None,
    sort: SongSort = SongSort.NONE,
) -> tuple[list[SongWithLikeInfo], int]:
    """
    Search, filter and paginate songs, annotated with like information.

    POPULAR keeps songs with at least one like, most liked first.
    LIKED_BY_USER keeps the user's liked songs by title; without a user it
    behaves like NONE. NONE orders everything by title.
    """
    like_counts = likes_service.like_counts_subquery(db)
    like_count = func.coalesce(like_counts.c.like_count, 0)

    query = (
        db.query(Song, like_count.label("like_count"))
        .outerjoin(like_counts, like_counts.c.song_id == Song.id)
    )

    term = (search_term or "").strip()
    if term:
        query = query.filter(or_(
            Song.title.icontains(term, autoescape=True),
            Song.artist.icontains(term, autoescape=True),
        ))

    if sort is SongSort.POPULAR:
        query = query.filter(like_counts.c.like_count > 0).order_by(
            like_count.desc(), func.lower(Song.title), Song.id
        )
    elif sort is SongSort.LIKED_BY_USER and user_id is not None:
        liked = likes_service.user_likes_subquery(db, user_id)
        query = query.filter(Song.id.in_(select(liked.c.song_id))).order_by(func.lower(Song.title), Song.id)
    else:
        query = query.order_by(func.lower(Song.title), Song.id)

    total_count = query.count()
    total_pages = math.ceil(total_count / page_size)

    rows = query.offset((page - 1) * page_size).limit(page_size).all()

    liked_ids = likes_service.liked_song_ids(db, user_id, [song.id for song, _ in rows]) if user_id else set()
    songs = [_to_song_info(song, count, song.id in liked_ids) for song, count in rows]
    return songs, total_pages


def get_song(db: Session, song_id: UUID, user_id: Optional[UUID] = None) -> SongWithLikeInfo | None:
    song = db.query(Song).filter(Song.id == song_id).first()
    if song is None:
        return None

    like_count = likes_service.count_likes(db, song_id)
    is_liked = user_id is not None and likes_service.is_liked(db, user_id, song_id)
    return _to_song_info(song, like_count, is_liked)


def song_exists(db: Session, song_id: UUID) -> bool:
    return db.query(Song.id).filter(Song.id == song_id).first() is not None
