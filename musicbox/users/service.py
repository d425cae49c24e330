from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from ..entities.user import User
from ..auth.models import TokenData
from ..audit import log_catalog_event, CatalogEventType
import logging

logger = logging.getLogger(__name__)


def resolve_user_id(db: Session, subject: str | None) -> UUID | None:
    """Map an identity-provider subject to the internal user id."""
    if not subject:
        return None
    return db.query(User.id).filter(User.external_id == subject).scalar()


def get_user_by_id(db: Session, user_id: UUID) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def sync_user(db: Session, token_data: TokenData) -> User:
    """
    Create the user for a token subject, or refresh its profile fields.
    A concurrent first sync for the same subject resolves to the existing row.
    """
    subject = token_data.get_subject()
    user = db.query(User).filter(User.external_id == subject).first()

    if user is None:
        user = User(
            external_id=subject,
            email=token_data.email or "",
            name=token_data.name,
            picture=token_data.picture,
        )
        try:
            db.add(user)
            db.commit()
        except IntegrityError:
            db.rollback()
            user = db.query(User).filter(User.external_id == subject).one()
            logger.info(f"User for subject {subject} was created concurrently")
            return user
        db.refresh(user)
        log_catalog_event(CatalogEventType.USER_CREATED, user_id=user.id)
        return user

    changed = False
    for field in ("email", "name", "picture"):
        value = getattr(token_data, field)
        if value is not None and value != getattr(user, field):
            setattr(user, field, value)
            changed = True

    if changed:
        db.commit()
        db.refresh(user)
        log_catalog_event(CatalogEventType.USER_UPDATED, user_id=user.id)
    return user


def delete_user(db: Session, user_id: UUID) -> bool:
    """Delete an account; likes, playlists and library rows go with it."""
    user = get_user_by_id(db, user_id)
    if not user:
        return False

    try:
        db.delete(user)
        db.commit()
    except Exception:
        db.rollback()
        logger.error(f"Failed to delete user {user_id}", exc_info=True)
        raise
    log_catalog_event(CatalogEventType.USER_DELETED, user_id=user_id)
    return True
