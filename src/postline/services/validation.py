"""Field validation for account and post input.

Every function returns the complete, ordered list of violations instead of
stopping at the first problem, so a caller can report all of them at once.
None of them raise.
"""

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Any

from email_validator import EmailNotValidError, validate_email

MIN_PASSWORD_LENGTH = 5
MIN_TITLE_LENGTH = 5
MIN_CONTENT_LENGTH = 5


@dataclass(frozen=True)
class Violation:
    """A single rejected field."""

    field: str
    message: str

    def as_dict(self) -> dict[str, Any]:
        return {"field": self.field, "message": self.message}


def _is_email(value: str | None) -> bool:
    if not value:
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def _check_email(email: str | None) -> list[Violation]:
    if not _is_email(email):
        return [Violation("email", "Invalid email.")]
    return []


def _check_password(password: str | None) -> list[Violation]:
    if (
        not password
        or len(password) < MIN_PASSWORD_LENGTH
        or not (password.isascii() and password.isalnum())
    ):
        return [
            Violation(
                "password",
                f"Password must have a minimum length of {MIN_PASSWORD_LENGTH} "
                "letters or digits.",
            )
        ]
    return []


def validate_signup(email: str | None, name: str | None, password: str | None) -> list[Violation]:
    """Validate the fields submitted at signup."""
    violations = _check_email(email)
    if not name or not name.strip():
        violations.append(Violation("name", "Name must not be empty."))
    violations.extend(_check_password(password))
    return violations


def validate_login(email: str | None, password: str | None) -> list[Violation]:
    """Validate the fields submitted at login."""
    return _check_email(email) + _check_password(password)


def validate_post_fields(title: str | None, content: str | None) -> list[Violation]:
    """Validate a post's title and content; each must have at least five characters."""
    violations: list[Violation] = []
    if title is None or len(title.strip()) < MIN_TITLE_LENGTH:
        violations.append(Violation("title", "Invalid title."))
    if content is None or len(content.strip()) < MIN_CONTENT_LENGTH:
        violations.append(Violation("content", "Invalid content."))
    return violations


def validate_status(status: str | None) -> list[Violation]:
    if status is None or not status.strip():
        return [Violation("status", "Status must not be empty.")]
    return []


def sanitize(value: str) -> str:
    """Trim and HTML-escape user text before it is stored."""
    return html.escape(value.strip())


def normalize_email(email: str) -> str:
    return email.strip().lower()
