from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import Field, field_validator
from ..schemas import CamelModel
from ..songs.models import SongResponse


class CreatorInfo(CamelModel):
    id: UUID
    name: Optional[str] = None


class PlaylistSummary(CamelModel):
    id: UUID
    name: str
    description: Optional[str] = None
    creator_id: UUID
    created_at: datetime
    updated_at: Optional[datetime] = None
    is_public: bool
    is_creator: bool
    is_in_library: bool
    song_count: int = 0
    creator: Optional[CreatorInfo] = None


class PlaylistSong(SongResponse):
    position: int
    added_at: datetime


class PlaylistDetail(PlaylistSummary):
    songs: list[PlaylistSong] = []


class PlaylistPage(CamelModel):
    playlists: list[PlaylistSummary]
    total_pages: int


class CreatePlaylistRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=500)
    is_public: bool = False

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError('Playlist name cannot be empty')
        return v.strip()


class EditPlaylistRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=500)
    is_public: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Playlist name cannot be empty')
        return v.strip() if v is not None else v
