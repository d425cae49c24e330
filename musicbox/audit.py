import json
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from uuid import UUID
from .logging import get_logger

# Create dedicated audit logger
audit_logger = get_logger("audit")

class CatalogEventType:
    """Constants for catalog mutation event types"""
    SONG_LIKED = "song_liked"
    SONG_UNLIKED = "song_unliked"
    LIKED_SONGS_PROVISIONED = "liked_songs_provisioned"
    PLAYLIST_CREATED = "playlist_created"
    PLAYLIST_EDITED = "playlist_edited"
    PLAYLIST_DELETED = "playlist_deleted"
    PLAYLIST_SONG_ADDED = "playlist_song_added"
    PLAYLIST_SONG_REMOVED = "playlist_song_removed"
    LIBRARY_ADDED = "library_added"
    LIBRARY_REMOVED = "library_removed"
    USER_CREATED = "user_created"
    USER_UPDATED = "user_updated"
    USER_DELETED = "user_deleted"

def log_catalog_event(
    event_type: str,
    user_id: Optional[UUID] = None,
    song_id: Optional[UUID] = None,
    playlist_id: Optional[UUID] = None,
    details: Optional[Dict[str, Any]] = None,
    success: bool = True
):
    """
    Log catalog mutations with structured data for later analysis.

    Args:
        event_type: Type of catalog event (use CatalogEventType constants)
        user_id: UUID of the acting user (if available)
        song_id: UUID of the affected song (if any)
        playlist_id: UUID of the affected playlist (if any)
        details: Additional details specific to the event
        success: Whether the event was successful or not
    """
    event_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_type": event_type,
        "success": success,
        "user_id": str(user_id) if user_id else None,
        "song_id": str(song_id) if song_id else None,
        "playlist_id": str(playlist_id) if playlist_id else None,
        "details": details or None
    }

    # Remove None values for cleaner logs
    event_data = {k: v for k, v in event_data.items() if v is not None}

    # Log at INFO level for successful events, WARNING for failures
    log_level = logging.INFO if success else logging.WARNING

    audit_logger.log(
        log_level,
        f"CATALOG_EVENT: {event_type}",
        extra={
            "audit_event": True,
            "event_data": json.dumps(event_data, default=str)
        }
    )
