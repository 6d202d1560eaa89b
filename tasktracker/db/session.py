import sqlite3

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import create_engine, Session, SQLModel
from ..core.config import settings

# Helper function to ensure URL format is correct
def get_db_url():
    url = settings.DATABASE_URL
    if not url:
        return "sqlite:///./tasktracker.db"
    # Migrations and the API share one synchronous engine
    return url.replace("+aiosqlite", "").replace("+asyncpg", "")

db_url = get_db_url()

# --- CONFIGURATION FOR SQLITE ---
if db_url.startswith("sqlite"):
    engine = create_engine(
        db_url,
        echo=settings.SQL_ECHO,
        connect_args={"check_same_thread": False}
    )

# --- CONFIGURATION FOR POSTGRESQL ---
else:
    # Ensure URL starts with postgresql:// (uses psycopg2-binary)
    engine = create_engine(
        db_url.replace("postgres://", "postgresql://"),
        echo=settings.SQL_ECHO,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10
    )


def create_db_and_tables(bind=None):
    # Import models so every table is registered on the metadata
    from .. import models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


# SQLite's built-in lower() only folds ASCII; keyword search folds like str.lower()
@event.listens_for(Engine, "connect")
def _register_unicode_lower(dbapi_connection, connection_record):
    if isinstance(dbapi_connection, sqlite3.Connection):
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session
