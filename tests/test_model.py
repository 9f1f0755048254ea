"""
Tests for model.py - status tokens and value types.
"""

import pytest

from jobtracker.model import InvalidStatus, Job, Note, Status


class TestStatusTokens:
    """Status serialization."""

    @pytest.mark.parametrize("status,token", [
        (Status.APPLIED, "applied"),
        (Status.INTERVIEWING, "interviewing"),
        (Status.OFFER, "offer"),
        (Status.REJECTED, "rejected"),
    ])
    def test_token_mapping(self, status, token):
        assert status.token == token
        assert str(status) == token
        assert Status.from_token(token) is status

    @pytest.mark.parametrize("token", ["Applied", "OFFER", "", "archived", " offer"])
    def test_strict_parse_rejects_unknown(self, token):
        """Matching is case-sensitive and exact."""
        with pytest.raises(InvalidStatus) as exc:
            Status.from_token(token)
        assert exc.value.token == token

    def test_invalid_status_is_value_error(self):
        with pytest.raises(ValueError):
            Status.from_token("nope")

    def test_lenient_parse_falls_back_to_applied(self):
        assert Status.from_token_lenient("Offer") is Status.APPLIED
        assert Status.from_token_lenient("offer") is Status.OFFER

    def test_tokens_in_declaration_order(self):
        assert Status.tokens() == ["applied", "interviewing", "offer", "rejected"]


class TestValueTypes:
    """Jobs and notes compare by value."""

    def _job(self, **overrides):
        fields = dict(
            id=1,
            company="Acme",
            role="Engineer",
            url=None,
            status=Status.APPLIED,
            created_at="2024-03-01 09:30:00",
        )
        fields.update(overrides)
        return Job(**fields)

    def test_equal_when_all_fields_match(self):
        assert self._job() == self._job()

    def test_id_participates_in_equality(self):
        assert self._job() != self._job(id=2)

    def test_jobs_are_immutable(self):
        job = self._job()
        with pytest.raises(AttributeError):
            job.status = Status.OFFER

    def test_job_to_dict_uses_token(self):
        data = self._job(status=Status.REJECTED).to_dict()
        assert data == {
            "id": 1,
            "company": "Acme",
            "role": "Engineer",
            "url": None,
            "status": "rejected",
            "created_at": "2024-03-01 09:30:00",
        }

    def test_note_to_dict(self):
        note = Note(id=3, job_id=1, text="hi", created_at="2024-03-01 09:30:00")
        assert note.to_dict()["text"] == "hi"
        assert note == Note(id=3, job_id=1, text="hi", created_at="2024-03-01 09:30:00")
