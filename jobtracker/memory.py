"""
In-memory job store.

Same operations, errors and ordering as store.Store, with all state held
on the instance. Used as a test double and for throwaway sessions.
"""

from dataclasses import replace
from typing import Dict, List, Optional

from .errors import NotFound
from .model import Job, Note, Status
from .store import TIMESTAMP_FORMAT, Clock, utc_now


class MemoryStore:
    """Dict-backed store; nothing survives the process."""

    def __init__(self, clock: Clock = utc_now):
        self.clock = clock
        self._jobs: Dict[int, Job] = {}
        self._notes: Dict[int, Note] = {}
        self._next_job_id = 1
        self._next_note_id = 1

    def close(self) -> None:
        pass

    def __enter__(self) -> "MemoryStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _timestamp(self) -> str:
        return self.clock().strftime(TIMESTAMP_FORMAT)

    def _require_job(self, job_id: int) -> Job:
        job = self._jobs.get(job_id)
        if job is None:
            raise NotFound(job_id)
        return job

    def add_job(
        self,
        company: str,
        role: str,
        url: Optional[str] = None,
        status: Status = Status.APPLIED,
    ) -> int:
        job_id = self._next_job_id
        self._next_job_id += 1
        self._jobs[job_id] = Job(
            id=job_id,
            company=company,
            role=role,
            url=url,
            status=status,
            created_at=self._timestamp(),
        )
        return job_id

    def get_job(self, job_id: int) -> Job:
        return self._require_job(job_id)

    def list_jobs(self) -> List[Job]:
        return sorted(self._jobs.values(), key=lambda j: j.id, reverse=True)

    def update_status(self, job_id: int, status: Status) -> None:
        job = self._require_job(job_id)
        self._jobs[job_id] = replace(job, status=status)

    def delete_job(self, job_id: int) -> None:
        self._require_job(job_id)
        self._notes = {nid: n for nid, n in self._notes.items() if n.job_id != job_id}
        del self._jobs[job_id]

    def add_note(self, job_id: int, text: str) -> int:
        self._require_job(job_id)
        note_id = self._next_note_id
        self._next_note_id += 1
        self._notes[note_id] = Note(
            id=note_id,
            job_id=job_id,
            text=text,
            created_at=self._timestamp(),
        )
        return note_id

    def list_notes(self, job_id: int) -> List[Note]:
        self._require_job(job_id)
        notes = [n for n in self._notes.values() if n.job_id == job_id]
        return sorted(notes, key=lambda n: n.id, reverse=True)
