"""
Song entity model. Songs are ingested by an external pipeline and are
read-only for the catalog API.
"""
from sqlalchemy import Column, String, Text, BigInteger, DateTime, Uuid
from sqlalchemy.orm import relationship
import uuid

from ..database.core import Base, utcnow


class Song(Base):
    """Catalog song entity model."""

    __tablename__ = "songs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Song metadata
    title = Column(String(200), nullable=False, index=True)
    artist = Column(String(200), nullable=False)
    album = Column(String(200), nullable=True)
    genre = Column(String(100), nullable=True)

    # Audio file location inside the blob container
    file_path = Column(Text, nullable=False)
    duration_ms = Column(BigInteger, nullable=False)
    album_art_url = Column(String(1000), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    # Relationships
    likes = relationship("LikeEntry", back_populates="song", cascade="all, delete", passive_deletes=True)
    playlist_entries = relationship("PlaylistEntry", back_populates="song", cascade="all, delete", passive_deletes=True)

    def __repr__(self):
        return f"<Song(id={self.id}, title='{self.title}', artist='{self.artist}')>"
