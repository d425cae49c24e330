"""
Playlist entity model for user-created playlists and the per-user
"Liked Songs" playlist.
"""
from sqlalchemy import Column, String, Boolean, ForeignKey, DateTime, Index, Uuid, text
from sqlalchemy.orm import relationship
import uuid

from ..database.core import Base, utcnow

LIKED_SONGS_PLAYLIST_NAME = "Liked Songs"
LIKED_SONGS_DESCRIPTION = "Your liked songs"


class Playlist(Base):
    """Playlist entity model."""

    __tablename__ = "playlists"

    # Primary key
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Playlist details
    name = Column(String(200), nullable=False)
    description = Column(String(500), nullable=True)
    is_public = Column(Boolean, nullable=False, default=False)

    # Ownership
    creator_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    creator = relationship("User", back_populates="playlists")
    entries = relationship(
        "PlaylistEntry",
        back_populates="playlist",
        order_by="PlaylistEntry.position",
        cascade="all, delete",
        passive_deletes=True,
    )
    library_entries = relationship("LibraryEntry", back_populates="playlist", cascade="all, delete", passive_deletes=True)

    # One "Liked Songs" playlist per user; other names may repeat
    __table_args__ = (
        Index(
            "uq_playlists_liked_songs_creator",
            "creator_id",
            unique=True,
            postgresql_where=text(f"name = '{LIKED_SONGS_PLAYLIST_NAME}'"),
            sqlite_where=text(f"name = '{LIKED_SONGS_PLAYLIST_NAME}'"),
        ),
    )

    @property
    def is_liked_songs(self) -> bool:
        return self.name == LIKED_SONGS_PLAYLIST_NAME

    def __repr__(self):
        return f"<Playlist(id={self.id}, name='{self.name}', creator_id={self.creator_id})>"
