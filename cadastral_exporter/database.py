"""SQLAlchemy base and session utilities for the source database."""
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session

from cadastral_exporter.exceptions import SourceUnavailable

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for source tables."""
    pass


def create_source_engine(database_url: str):
    """Create an engine and check that the database answers.

    Raises SourceUnavailable when the connection cannot be established.
    """
    engine = create_engine(database_url)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        engine.dispose()
        raise SourceUnavailable(f"failed to connect to source database: {e}") from e
    logger.debug("Connected to source database %s", engine.url.render_as_string(hide_password=True))
    return engine


@contextmanager
def source_session(database_url: str):
    """Context manager yielding a session bound to the source database.

    Usage:
        with source_session(settings.database_url) as db:
            for row in iter_source_rows(db):
                ...
    """
    engine = create_source_engine(database_url)
    try:
        with Session(engine) as session:
            yield session
    finally:
        engine.dispose()
