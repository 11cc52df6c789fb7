# src/postline/services/__init__.py
"""Business logic services for the Postline application."""

from .auth import ANONYMOUS, Identity, TokenAuthenticator, TokenSigner
from .authorization import AccessDecision, AuthorizationGuard
from .broadcast import MutationAction, MutationBroadcaster, MutationEvent
from .feed import FeedPaginator
from .post_service import UNCHANGED, PostLifecycleManager
from .storage import AttachmentJanitor, FilesystemObjectStorage, S3ObjectStorage
from .user_service import AccountService

__all__ = [
    "ANONYMOUS",
    "AccessDecision",
    "AccountService",
    "AttachmentJanitor",
    "AuthorizationGuard",
    "FeedPaginator",
    "FilesystemObjectStorage",
    "Identity",
    "MutationAction",
    "MutationBroadcaster",
    "MutationEvent",
    "PostLifecycleManager",
    "S3ObjectStorage",
    "TokenAuthenticator",
    "TokenSigner",
    "UNCHANGED",
]
