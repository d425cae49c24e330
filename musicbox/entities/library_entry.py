from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
import uuid
from ..database.core import Base, utcnow


class LibraryEntry(Base):
    __tablename__ = "user_library_playlists"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    playlist_id = Column(Uuid(as_uuid=True), ForeignKey("playlists.id", ondelete="CASCADE"), nullable=False, index=True)
    added_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="library_entries")
    playlist = relationship("Playlist", back_populates="library_entries")

    __table_args__ = (
        UniqueConstraint('user_id', 'playlist_id', name='uq_user_library_user_playlist'),
    )
