from datetime import datetime
from typing import Optional
from uuid import UUID
from ..schemas import CamelModel


class SongResponse(CamelModel):
    id: UUID
    title: str
    artist: str
    album: Optional[str] = None
    genre: Optional[str] = None
    file_path: str
    duration_ms: int
    album_art_url: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class SongWithLikeInfo(SongResponse):
    """A song annotated with the requesting user's like state."""
    is_liked: bool = False
    like_count: int = 0


class SongPage(CamelModel):
    songs: list[SongWithLikeInfo]
    total_pages: int


class StreamUrlResponse(CamelModel):
    stream_url: str


class LikeStatusResponse(CamelModel):
    is_liked: bool


class LikeCountResponse(CamelModel):
    like_count: int
