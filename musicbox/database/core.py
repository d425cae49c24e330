from datetime import datetime, timezone
from typing import Annotated
from fastapi import Depends
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from ..config import get_settings

settings = get_settings()

# Use the validated DATABASE_URL from settings
DATABASE_URL = settings.database.url


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def configure_sqlite(engine: Engine) -> Engine:
    """
    Make SQLite enforce foreign keys and open transactions explicitly.

    pysqlite defers BEGIN until the first DML statement, which breaks
    SAVEPOINT handling; emitting BEGIN ourselves gives the same
    transactional behaviour as PostgreSQL.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


engine = create_engine(DATABASE_URL)
if DATABASE_URL.startswith("sqlite"):
    configure_sqlite(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

DbSession = Annotated[Session, Depends(get_db)]
