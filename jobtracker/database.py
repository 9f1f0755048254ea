"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for job and note storage.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from sqlalchemy import Column, ForeignKey, Integer, Text, create_engine, event
from sqlalchemy import text as sa_text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

MEMORY_PATH = ":memory:"

# Seconds SQLite waits on a locked database file before raising
BUSY_TIMEOUT = 5.0

Base = declarative_base()


class JobRow(Base):
    """A tracked application."""

    __tablename__ = "jobs"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    company = Column(Text, nullable=False)
    role = Column(Text, nullable=False)
    url = Column(Text, nullable=True)
    status = Column(Text, nullable=False)  # applied, interviewing, offer, rejected
    created_at = Column(Text, nullable=False, server_default=sa_text("(datetime('now'))"))


class NoteRow(Base):
    """Free-text note owned by a job."""

    __tablename__ = "notes"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(Text, nullable=False, server_default=sa_text("(datetime('now'))"))


def _on_connect(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    # SQLAlchemy emits BEGIN itself, see _begin_immediate
    dbapi_connection.isolation_level = None


def _begin_immediate(conn) -> None:
    # Take the write lock up front so reads and writes in one unit of work
    # see the same database state
    conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(db_path: Union[Path, str]) -> Engine:
    """
    Create an engine for the SQLite file at db_path.

    Foreign key enforcement is switched on for every connection the
    engine opens, so ON DELETE CASCADE is always active. Every
    transaction starts with BEGIN IMMEDIATE, so concurrent writers are
    serialized by SQLite for the whole transaction.

    Args:
        db_path: Path to SQLite database file, or ":memory:"

    Returns:
        SQLAlchemy engine
    """
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"timeout": BUSY_TIMEOUT},
    )
    event.listen(engine, "connect", _on_connect)
    event.listen(engine, "begin", _begin_immediate)
    return engine


def init_database(db_path: Union[Path, str]) -> Engine:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file

    Returns:
        Engine bound to the initialized database
    """
    if str(db_path) != MEMORY_PATH:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(db_path)
    Base.metadata.create_all(engine)
    return engine


def get_session(engine: Engine) -> Session:
    """
    Get database session.

    Args:
        engine: Engine returned by init_database

    Returns:
        SQLAlchemy session
    """
    Session = sessionmaker(bind=engine)
    return Session()


@contextmanager
def session_scope(engine: Engine) -> Iterator[Session]:
    """
    Run a unit of work in one transaction.

    Commits when the block exits normally, rolls back on any exception
    and re-raises it.
    """
    session = get_session(engine)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
