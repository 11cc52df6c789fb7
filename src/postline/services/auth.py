"""Bearer-token signing and request authentication.

``TokenAuthenticator.authenticate`` never raises: whatever arrives in the
``Authorization`` header, the caller gets an ``Identity`` back. Anything short
of a well-formed, correctly signed, unexpired token yields ``ANONYMOUS``;
endpoints that mutate state check ``is_authenticated`` themselves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from postline.core.settings import settings

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer"


@dataclass(frozen=True)
class Identity:
    """Who is making the request, resolved once per request."""

    subject_id: int | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.subject_id is not None


ANONYMOUS = Identity()


class TokenSigner:
    """Issue and verify HMAC-signed JWTs carrying a user id claim."""

    def __init__(
        self,
        secret_key: str | None = None,
        algorithm: str | None = None,
        ttl: timedelta | None = None,
    ) -> None:
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm or settings.jwt_algorithm
        self.ttl = ttl or timedelta(minutes=settings.access_token_expire_minutes)

    def sign(self, subject_id: int, ttl: timedelta | None = None) -> str:
        """Return a token for ``subject_id`` that expires after ``ttl``."""
        issued_at = datetime.now(UTC)
        claims: dict[str, Any] = {
            "sub": str(subject_id),
            "iat": issued_at,
            "exp": issued_at + (ttl or self.ttl),
        }
        token: str = jwt.encode(claims, self.secret_key, algorithm=self.algorithm)
        return token

    def verify(self, token: str) -> dict[str, Any] | None:
        """Return the decoded claims, or None for a bad signature or expired token."""
        try:
            claims: dict[str, Any] = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
            )
        except JWTError:
            return None
        return claims


class TokenAuthenticator:
    """Turn a raw ``Authorization`` header value into an ``Identity``."""

    def __init__(self, signer: TokenSigner | None = None) -> None:
        self.signer = signer or TokenSigner()

    def authenticate(self, raw_header: str | None) -> Identity:
        token = _extract_bearer_token(raw_header)
        if token is None:
            return ANONYMOUS

        claims = self.signer.verify(token)
        if claims is None:
            logger.debug("Rejected bearer token that failed verification")
            return ANONYMOUS

        subject_id = _parse_subject(claims.get("sub"))
        if subject_id is None:
            return ANONYMOUS
        return Identity(subject_id=subject_id)


def _extract_bearer_token(raw_header: str | None) -> str | None:
    if not raw_header or not isinstance(raw_header, str):
        return None
    parts = raw_header.strip().split()
    if len(parts) != 2 or parts[0].lower() != BEARER_PREFIX:
        return None
    return parts[1]


def _parse_subject(subject: Any) -> int | None:
    if not isinstance(subject, str):
        return None
    try:
        return int(subject)
    except ValueError:
        return None
