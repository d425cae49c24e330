from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
import uuid
from ..database.core import Base, utcnow


class LikeEntry(Base):
    __tablename__ = "song_likes"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    song_id = Column(Uuid(as_uuid=True), ForeignKey("songs.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="likes")
    song = relationship("Song", back_populates="likes")

    # A user can like a song only once
    __table_args__ = (
        UniqueConstraint('user_id', 'song_id', name='uq_song_likes_user_song'),
    )
