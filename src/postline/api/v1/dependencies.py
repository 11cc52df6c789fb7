"""Shared API dependencies for authentication and service wiring."""

from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from postline.core.settings import settings
from postline.db.session import get_db
from postline.services.auth import Identity, TokenAuthenticator, TokenSigner
from postline.services.broadcast import MutationBroadcaster
from postline.services.feed import FeedPaginator
from postline.services.post_service import PostLifecycleManager
from postline.services.storage import AttachmentJanitor, ObjectStorage
from postline.services.user_service import AccountService

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_token_signer() -> TokenSigner:
    """Return a signer configured from application settings."""
    return TokenSigner()


TokenSignerDep = Annotated[TokenSigner, Depends(get_token_signer)]


def get_identity(
    signer: TokenSignerDep,
    authorization: Annotated[str | None, Header()] = None,
) -> Identity:
    """Resolve the caller's identity; missing or bad tokens yield the anonymous identity."""
    return TokenAuthenticator(signer).authenticate(authorization)


IdentityDep = Annotated[Identity, Depends(get_identity)]


def get_broadcaster(request: Request) -> MutationBroadcaster:
    """Return the broadcaster owned by the running application."""
    broadcaster: MutationBroadcaster = request.app.state.broadcaster
    return broadcaster


def get_object_storage(request: Request) -> ObjectStorage:
    """Return the attachment storage backend owned by the running application."""
    storage: ObjectStorage = request.app.state.storage
    return storage


BroadcasterDep = Annotated[MutationBroadcaster, Depends(get_broadcaster)]
StorageDep = Annotated[ObjectStorage, Depends(get_object_storage)]


def get_post_manager(
    db: SessionDep,
    storage: StorageDep,
    broadcaster: BroadcasterDep,
) -> PostLifecycleManager:
    return PostLifecycleManager(db, AttachmentJanitor(storage), broadcaster)


def get_feed(db: SessionDep) -> FeedPaginator:
    return FeedPaginator(db, settings.posts_per_page)


def get_account_service(db: SessionDep, signer: TokenSignerDep) -> AccountService:
    return AccountService(db, signer)


PostManagerDep = Annotated[PostLifecycleManager, Depends(get_post_manager)]
FeedDep = Annotated[FeedPaginator, Depends(get_feed)]
AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]
