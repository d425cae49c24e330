from datetime import datetime
from typing import Optional
from uuid import UUID
from ..schemas import CamelModel


class UserResponse(CamelModel):
    """Response model for user data."""
    id: UUID
    email: str
    name: Optional[str] = None
    picture: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
