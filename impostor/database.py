# impostor/database.py
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from impostor.config import DATABASE_URL


def make_engine(url: str = DATABASE_URL, **kwargs):
    """
    Create an engine for the given URL.
    SQLite connections get foreign keys switched on so cascades behave like Postgres.
    """
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    engine = create_engine(url, **kwargs)

    if url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


# Create the database engine
engine = make_engine()

# Create a session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all models
Base = declarative_base()


def init_db(bind=engine):
    """Create all tables that don't exist yet."""
    # Models must be imported so they register on Base.metadata
    from impostor import db_models  # noqa: F401
    Base.metadata.create_all(bind=bind)
