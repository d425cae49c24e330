from fastapi import HTTPException
from starlette import status


class AuthenticationError(HTTPException):
    """Raised when a request carries no usable identity."""

    def __init__(self, message: str = "Could not validate user"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=message,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ValidationError(Exception):
    """A request that is well-formed but not allowed in the current state."""


class ReservedPlaylistError(ValidationError):
    """The 'Liked Songs' playlist is managed through likes only."""

    def __init__(self, message: str = "The Liked Songs playlist is managed through likes"):
        super().__init__(message)


class PlaylistSyncError(Exception):
    """Keeping the Liked Songs playlist in step with a like failed."""


class StorageError(Exception):
    """Blob storage could not produce a streaming URL."""
