from typing import List, Optional
from urllib.parse import urlparse


class ValidationError(ValueError):
    """Raised by the CLI when user input fails validation."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


def _is_non_empty_str(v) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _valid_url(v: str) -> bool:
    try:
        p = urlparse(v)
        return bool(p.scheme and p.netloc)
    except ValueError:
        return False


def validate_job(company: str, role: str, url: Optional[str] = None) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    The store accepts anything; these checks only guard the command line.
    """
    errors: List[str] = []

    if not _is_non_empty_str(company):
        errors.append("Field 'company' must be a non-empty string")
    if not _is_non_empty_str(role):
        errors.append("Field 'role' must be a non-empty string")

    if url is not None:
        if not _is_non_empty_str(url):
            errors.append("Field 'url' must be a non-empty string if provided")
        elif not _valid_url(url):
            errors.append("Field 'url' must be a valid absolute URL (scheme + host)")

    return errors


def validate_note(text: str) -> List[str]:
    errors: List[str] = []
    if not _is_non_empty_str(text):
        errors.append("Field 'text' must be a non-empty string")
    return errors


def ensure_valid(errors: List[str]) -> None:
    """Raise ValidationError if errors is not empty."""
    if errors:
        raise ValidationError(errors)
