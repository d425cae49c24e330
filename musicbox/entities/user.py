from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.orm import relationship
import uuid
from ..database.core import Base, utcnow


class User(Base):
    __tablename__ = 'users'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    external_id = Column(String(255), unique=True, nullable=False)  # Identity provider 'sub' claim
    email = Column(String, nullable=False)
    name = Column(String, nullable=True)
    picture = Column(String, nullable=True)        # Optional profile picture

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    # Relationships
    likes = relationship("LikeEntry", back_populates="user", cascade="all, delete", passive_deletes=True)
    playlists = relationship("Playlist", back_populates="creator", cascade="all, delete", passive_deletes=True)
    library_entries = relationship("LibraryEntry", back_populates="user", cascade="all, delete", passive_deletes=True)

    def __repr__(self):
        return f"<User(email='{self.email}', external_id='{self.external_id}')>"
