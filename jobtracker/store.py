"""
Durable job store backed by SQLite.

Responsibilities:
- CRUD and status lifecycle for jobs, add/list for notes.
- One transaction per operation; cascade delete of notes with their job.
- NotFound for every operation that references a missing job.

Non-Responsibilities:
- No input validation (see schema.py).
- No retries; SQLAlchemy errors propagate to the caller.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Union

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .database import JobRow, NoteRow, init_database, session_scope
from .errors import NotFound
from .logger import StructuredLogger, get_logger
from .model import InvalidStatus, Job, Note, Status

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_job(row: JobRow) -> Job:
    return Job(
        id=row.id,
        company=row.company,
        role=row.role,
        url=row.url,
        status=Status.from_token(row.status),
        created_at=row.created_at,
    )


def _to_note(row: NoteRow) -> Note:
    return Note(
        id=row.id,
        job_id=row.job_id,
        text=row.text,
        created_at=row.created_at,
    )


def _job_exists(session: Session, job_id: int) -> bool:
    return session.query(JobRow.id).filter(JobRow.id == job_id).first() is not None


class Store:
    """
    Job and note store over one SQLite database.

    Every public method is a single transaction: it either applies its
    whole effect or none of it.
    """

    def __init__(
        self,
        engine: Engine,
        clock: Clock = utc_now,
        logger: Optional[StructuredLogger] = None,
    ):
        self.engine = engine
        self.clock = clock
        self.logger = logger or get_logger()

    @classmethod
    def open(cls, db_path: Union[Path, str], **kwargs) -> "Store":
        """Create parent directories and schema, then return a store for db_path."""
        return cls(init_database(db_path), **kwargs)

    def close(self) -> None:
        self.engine.dispose()

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _timestamp(self) -> str:
        return self.clock().strftime(TIMESTAMP_FORMAT)

    def _not_found(self, operation: str, job_id: int) -> NotFound:
        self.logger.record_failure(operation, "NotFound")
        self.logger.debug("Job not found", operation=operation, job_id=job_id)
        return NotFound(job_id)

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[Session]:
        """Count the operation and run it in one session, recording storage failures."""
        self.logger.record_operation(operation)
        try:
            with session_scope(self.engine) as session:
                yield session
        except (SQLAlchemyError, InvalidStatus) as e:
            self.logger.record_failure(operation, type(e).__name__)
            self.logger.debug("Store operation failed", operation=operation, error=str(e))
            raise

    # Jobs

    def add_job(
        self,
        company: str,
        role: str,
        url: Optional[str] = None,
        status: Status = Status.APPLIED,
    ) -> int:
        """
        Insert a new job and return its id.

        Ids come from SQLite AUTOINCREMENT, so they only ever grow and are
        never handed out twice, even after the newest job is deleted.
        """
        with self._transaction("add_job") as session:
            row = JobRow(
                company=company,
                role=role,
                url=url,
                status=status.token,
                created_at=self._timestamp(),
            )
            session.add(row)
            session.flush()
            job_id = row.id

        self.logger.info("Added job", job_id=job_id, company=company, status=status.token)
        return job_id

    def get_job(self, job_id: int) -> Job:
        """Return the job with job_id or raise NotFound."""
        with self._transaction("get_job") as session:
            row = session.get(JobRow, job_id)
            if row is None:
                raise self._not_found("get_job", job_id)
            return _to_job(row)

    def list_jobs(self) -> List[Job]:
        """Return every job, newest (highest id) first."""
        with self._transaction("list_jobs") as session:
            rows = session.query(JobRow).order_by(JobRow.id.desc()).all()
            jobs = [_to_job(r) for r in rows]

        self.logger.debug("Listed jobs", count=len(jobs))
        return jobs

    def update_status(self, job_id: int, status: Status) -> None:
        """Set the status of an existing job. Other fields are left as they are."""
        with self._transaction("update_status") as session:
            updated = (
                session.query(JobRow)
                .filter(JobRow.id == job_id)
                .update({JobRow.status: status.token}, synchronize_session=False)
            )
            if updated == 0:
                raise self._not_found("update_status", job_id)

        self.logger.info("Updated job status", job_id=job_id, status=status.token)

    def delete_job(self, job_id: int) -> None:
        """
        Delete a job together with all of its notes.

        The notes are removed explicitly in the same transaction as the
        job, on top of the ON DELETE CASCADE foreign key.
        """
        with self._transaction("delete_job") as session:
            notes_deleted = (
                session.query(NoteRow)
                .filter(NoteRow.job_id == job_id)
                .delete(synchronize_session=False)
            )
            jobs_deleted = (
                session.query(JobRow)
                .filter(JobRow.id == job_id)
                .delete(synchronize_session=False)
            )
            if jobs_deleted == 0:
                raise self._not_found("delete_job", job_id)

        self.logger.info("Deleted job", job_id=job_id, notes_deleted=notes_deleted)

    # Notes

    def add_note(self, job_id: int, text: str) -> int:
        """Attach a note to an existing job and return the note id."""
        with self._transaction("add_note") as session:
            if not _job_exists(session, job_id):
                raise self._not_found("add_note", job_id)

            row = NoteRow(job_id=job_id, text=text, created_at=self._timestamp())
            session.add(row)
            session.flush()
            note_id = row.id

        self.logger.info("Added note", job_id=job_id, note_id=note_id)
        return note_id

    def list_notes(self, job_id: int) -> List[Note]:
        """
        Return the notes of a job, newest first.

        A job with no notes gives an empty list; a missing job raises
        NotFound.
        """
        with self._transaction("list_notes") as session:
            if not _job_exists(session, job_id):
                raise self._not_found("list_notes", job_id)

            rows = (
                session.query(NoteRow)
                .filter(NoteRow.job_id == job_id)
                .order_by(NoteRow.id.desc())
                .all()
            )
            notes = [_to_note(r) for r in rows]

        self.logger.debug("Listed notes", job_id=job_id, count=len(notes))
        return notes
