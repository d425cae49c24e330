"""
Database initialization utilities
"""

import logging
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from .core import engine, Base
from ..entities import song, user, like, playlist, playlist_entry, library_entry  # noqa: F401  register tables

logger = logging.getLogger(__name__)


def init_database() -> bool:
    """
    Create every catalog table that does not exist yet.
    Used at startup in development instead of running migrations.
    """
    try:
        Base.metadata.create_all(bind=engine)
        logger.info(f"Database initialized with tables: {', '.join(sorted(Base.metadata.tables))}")
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database initialization failed: {e}")
        return False


def check_database_connection() -> bool:
    """Check if database connection is working"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            return True
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")
        return False


if __name__ == "__main__":
    # When run directly, initialize the database
    if check_database_connection():
        init_database()
    else:
        logger.error("Please check your database connection and try again.")
