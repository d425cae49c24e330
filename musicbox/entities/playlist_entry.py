from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
import uuid
from ..database.core import Base, utcnow


class PlaylistEntry(Base):
    __tablename__ = "playlist_songs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    playlist_id = Column(Uuid(as_uuid=True), ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False)
    song_id = Column(Uuid(as_uuid=True), ForeignKey("songs.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)  # max + 1 on insert, never renumbered
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    playlist = relationship("Playlist", back_populates="entries")
    song = relationship("Song", back_populates="playlist_entries")

    # A song appears at most once per playlist
    __table_args__ = (
        UniqueConstraint('playlist_id', 'song_id', name='uq_playlist_songs_playlist_song'),
    )
