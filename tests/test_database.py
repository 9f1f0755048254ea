"""
Tests for database.py - SQLite schema and session handling.
"""

import sqlite3

import pytest
from sqlalchemy import inspect, text

from jobtracker.database import (
    JobRow,
    NoteRow,
    create_db_engine,
    get_session,
    init_database,
    session_scope,
)


class TestDatabaseInit:
    """Test database initialization."""

    def test_init_creates_database_file(self, tmp_path):
        """Test that init_database creates the database file."""
        db_path = tmp_path / "test.db"
        assert not db_path.exists()

        init_database(db_path)

        assert db_path.exists()

    def test_init_creates_tables(self, tmp_path):
        """Test that init_database creates the jobs and notes tables."""
        engine = init_database(tmp_path / "test.db")

        tables = set(inspect(engine).get_table_names())
        assert {"jobs", "notes"} <= tables

    def test_init_creates_parent_directories(self, tmp_path):
        """Test that init_database creates parent directories if missing."""
        db_path = tmp_path / "nested" / "dir" / "test.db"
        assert not db_path.parent.exists()

        init_database(db_path)

        assert db_path.exists()

    def test_init_is_idempotent(self, tmp_path):
        """Running init twice keeps existing rows."""
        db_path = tmp_path / "test.db"
        engine = init_database(db_path)
        with session_scope(engine) as session:
            session.add(JobRow(company="acme", role="engineer", status="applied"))

        engine = init_database(db_path)
        with session_scope(engine) as session:
            assert session.query(JobRow).count() == 1

    def test_in_memory_database(self):
        """':memory:' works and does not touch the filesystem."""
        engine = init_database(":memory:")
        with session_scope(engine) as session:
            session.add(JobRow(company="acme", role="engineer", status="applied"))
        with session_scope(engine) as session:
            assert session.query(JobRow).count() == 1

    def test_notes_foreign_key_cascades(self, tmp_path):
        """notes.job_id references jobs.id with ON DELETE CASCADE."""
        engine = init_database(tmp_path / "test.db")
        fks = inspect(engine).get_foreign_keys("notes")

        assert len(fks) == 1
        assert fks[0]["referred_table"] == "jobs"
        assert fks[0]["constrained_columns"] == ["job_id"]
        assert fks[0]["options"].get("ondelete") == "CASCADE"

    def test_engine_enables_foreign_keys(self, tmp_path):
        engine = create_db_engine(tmp_path / "test.db")
        with engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1


class TestSessionScope:
    """Test transactional session handling."""

    @pytest.fixture
    def engine(self, tmp_path):
        return init_database(tmp_path / "test.db")

    def test_commits_on_success(self, engine):
        with session_scope(engine) as session:
            session.add(JobRow(company="acme", role="engineer", status="applied"))

        session = get_session(engine)
        assert session.query(JobRow).count() == 1
        session.close()

    def test_rolls_back_on_error(self, engine):
        """Nothing from a failed unit of work is persisted."""
        with pytest.raises(RuntimeError):
            with session_scope(engine) as session:
                job = JobRow(company="acme", role="engineer", status="applied")
                session.add(job)
                session.flush()
                session.add(NoteRow(job_id=job.id, text="note"))
                session.flush()
                raise RuntimeError("boom")

        session = get_session(engine)
        assert session.query(JobRow).count() == 0
        assert session.query(NoteRow).count() == 0
        session.close()

    def test_created_at_default(self, engine):
        """created_at is filled in by SQLite when not supplied."""
        with session_scope(engine) as session:
            job = JobRow(company="acme", role="engineer", status="applied")
            session.add(job)
            session.flush()
            session.refresh(job)
            assert job.created_at is not None

    def test_note_created_at_default(self, engine):
        """Notes also get created_at from SQLite when not supplied."""
        with session_scope(engine) as session:
            job = JobRow(company="acme", role="engineer", status="applied")
            session.add(job)
            session.flush()
            note = NoteRow(job_id=job.id, text="hello")
            session.add(note)
            session.flush()
            session.refresh(note)
            assert note.created_at is not None
            assert note.text == "hello"

    def test_session_holds_write_lock(self, engine, tmp_path):
        """A unit of work locks out other writers from its first statement."""
        with session_scope(engine) as session:
            session.query(JobRow).count()

            other = sqlite3.connect(str(tmp_path / "test.db"), timeout=0)
            try:
                with pytest.raises(sqlite3.OperationalError, match="locked"):
                    other.execute(
                        "INSERT INTO jobs (company, role, status) VALUES ('beta', 'analyst', 'applied')"
                    )
            finally:
                other.close()

    def test_write_lock_released_after_commit(self, engine, tmp_path):
        with session_scope(engine) as session:
            session.query(JobRow).count()

        other = sqlite3.connect(str(tmp_path / "test.db"), timeout=0)
        try:
            other.execute("INSERT INTO jobs (company, role, status) VALUES ('beta', 'analyst', 'applied')")
            other.commit()
        finally:
            other.close()

        with session_scope(engine) as session:
            assert session.query(JobRow).count() == 1
