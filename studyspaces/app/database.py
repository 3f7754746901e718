"""Database configuration for the study spaces document store."""

from pathlib import Path

from sqlmodel import Session, SQLModel, create_engine

from . import settings
from .storage import models  # noqa: F401  (registers the kv_entry table)

DATABASE_PATH = Path(settings.DATA_DIR) / 'studyspaces.db'

DATABASE_URL = f'sqlite:///{DATABASE_PATH}'

engine = create_engine(
    DATABASE_URL, echo=False, connect_args={'check_same_thread': False}
)


def create_db_and_tables():
    """Create database tables if they don't exist."""
    DATABASE_PATH.parent.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(engine)


def get_session():
    """Get a database session."""
    with Session(engine) as session:
        yield session
