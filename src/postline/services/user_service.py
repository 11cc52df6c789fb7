"""Account signup, login and status management."""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from postline.core import security
from postline.core.errors import (
    Conflict,
    NotAuthenticated,
    NotFound,
    StorageUnavailable,
    ValidationFailed,
)
from postline.models.user import User
from postline.repositories.user_repo import UserRepository
from postline.schemas.user import LoginResponse
from postline.services.auth import Identity, TokenSigner
from postline.services.validation import (
    normalize_email,
    sanitize,
    validate_login,
    validate_signup,
    validate_status,
)

logger = logging.getLogger(__name__)

__all__ = ["AccountService"]


class AccountService:
    """Operations on the caller's own account."""

    def __init__(self, session: Session, signer: TokenSigner | None = None) -> None:
        self.session = session
        self.users = UserRepository(session)
        self.signer = signer or TokenSigner()

    def signup(self, email: str, name: str, password: str) -> User:
        """Create an account after validating every field.

        Raises:
            ValidationFailed: With one violation per invalid field.
            Conflict: If the email is already registered, in any letter case.
        """
        violations = validate_signup(email, name, password)
        if violations:
            raise ValidationFailed(violations)

        normalized = normalize_email(email)
        if self.users.get_by_email(normalized) is not None:
            raise Conflict("User exists.")

        try:
            user = self.users.create(
                email=normalized,
                name=sanitize(name),
                password_hash=security.hash_password(password),
            )
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise Conflict("User exists.") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageUnavailable("Could not create user.") from exc

        logger.info("Created user %s", user.id)
        return user

    def login(self, email: str, password: str) -> LoginResponse:
        """Exchange credentials for a bearer token."""
        violations = validate_login(email, password)
        if violations:
            raise ValidationFailed(violations)

        user = self.users.get_by_email(normalize_email(email))
        if user is None:
            raise NotAuthenticated("No user found with this email.")
        if not security.verify_password(user.password_hash, password):
            raise NotAuthenticated("Wrong password.")

        return LoginResponse(token=self.signer.sign(user.id), user_id=user.id)

    def get_status(self, identity: Identity) -> str:
        return self._require_user(identity).status

    def update_status(self, identity: Identity, status: str) -> str:
        user = self._require_user(identity)
        violations = validate_status(status)
        if violations:
            raise ValidationFailed(violations)
        user.status = sanitize(status)
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageUnavailable("Could not update status.") from exc
        return user.status

    def _require_user(self, identity: Identity) -> User:
        if not identity.is_authenticated:
            raise NotAuthenticated()
        user = self.users.get_by_id(identity.subject_id)
        if user is None:
            raise NotFound("User not found.")
        return user
