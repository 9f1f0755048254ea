"""Domain errors raised by the store."""


class JobTrackerError(Exception):
    """Base class for job tracker domain errors."""
    pass


class NotFound(JobTrackerError):
    """Raised when an operation references a job id that does not exist."""

    def __init__(self, job_id: int):
        self.job_id = job_id
        super().__init__(f"job not found: {job_id}")
