"""
Domain types for the job tracker.

Jobs and notes are plain value objects; the store hands out copies and
never exposes its own rows.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional, Dict, Any


class InvalidStatus(ValueError):
    """Raised when a status token is not one of the known values."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"invalid status: {token!r}")


class Status(Enum):
    APPLIED = "applied"
    INTERVIEWING = "interviewing"
    OFFER = "offer"
    REJECTED = "rejected"

    @property
    def token(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_token(cls, token: str) -> "Status":
        """
        Parse a lowercase status token.

        Matching is case-sensitive. Unknown tokens raise InvalidStatus.
        """
        for status in cls:
            if status.value == token:
                return status
        raise InvalidStatus(token)

    @classmethod
    def from_token_lenient(cls, token: str) -> "Status":
        """Parse a token, treating anything unrecognized as APPLIED (lossy)."""
        try:
            return cls.from_token(token)
        except InvalidStatus:
            return cls.APPLIED

    @classmethod
    def tokens(cls) -> list:
        return [s.value for s in cls]


@dataclass(frozen=True)
class Job:
    id: int
    company: str
    role: str
    url: Optional[str]
    status: Status
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.token
        return data


@dataclass(frozen=True)
class Note:
    id: int
    job_id: int
    text: str
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
