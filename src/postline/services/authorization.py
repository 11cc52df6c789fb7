"""Ownership check guarding post mutations."""

from __future__ import annotations

from dataclasses import dataclass

from postline.core.errors import ErrorKind, error_for_kind
from postline.services.auth import Identity


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of an authorization check; ``reason`` is set only on denial."""

    allowed: bool
    reason: ErrorKind | None = None

    def raise_for_denial(self) -> None:
        """Raise the error matching ``reason`` if access was denied."""
        if not self.allowed:
            raise error_for_kind(self.reason or ErrorKind.NOT_AUTHORIZED)


ALLOW = AccessDecision(allowed=True)


class AuthorizationGuard:
    """Allow a mutation only when the caller owns the resource."""

    def authorize(self, identity: Identity, resource_owner_id: int | None) -> AccessDecision:
        if not identity.is_authenticated:
            return AccessDecision(allowed=False, reason=ErrorKind.NOT_AUTHENTICATED)
        if resource_owner_id is None:
            return AccessDecision(allowed=False, reason=ErrorKind.NOT_AUTHORIZED)
        if identity.subject_id != resource_owner_id:
            return AccessDecision(allowed=False, reason=ErrorKind.NOT_AUTHORIZED)
        return ALLOW
