"""Post lifecycle: create, read, update and delete with attachment ownership.

A post is either absent or live. While live it always references exactly one
stored attachment, and no other live post references the same key. The
manager keeps that true across every outcome:

* an attachment uploaded for a request that is then rejected is deleted,
  since it never became a live reference;
* an attachment replaced by an update, or belonging to a deleted post, is
  deleted once the database change has been committed.

Attachment deletion goes through ``AttachmentJanitor`` and never affects the
result returned to the caller. Events are published only after a commit.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum
from typing import Final

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from postline.core.errors import NotAuthenticated, NotFound, StorageUnavailable, ValidationFailed
from postline.db.time import as_utc
from postline.models.post import Post
from postline.models.user import User
from postline.repositories.post_repo import PostRepository
from postline.repositories.user_repo import UserRepository
from postline.schemas.post import OwnerSummary, PostResponse
from postline.services.auth import Identity
from postline.services.authorization import AuthorizationGuard
from postline.services.broadcast import MutationAction, MutationBroadcaster, MutationEvent
from postline.services.storage import AttachmentJanitor
from postline.services.validation import Violation, sanitize, validate_post_fields

logger = logging.getLogger(__name__)


class Unchanged(Enum):
    """Marker for "keep the current attachment" on update."""

    UNCHANGED = "unchanged"


UNCHANGED: Final = Unchanged.UNCHANGED

NO_IMAGE = Violation("image", "No image provided.")


def to_post_response(post: Post, owner: User | None) -> PostResponse:
    """Convert a Post ORM instance to an API schema, substituting a placeholder owner."""
    creator = (
        OwnerSummary(id=owner.id, name=owner.name)
        if owner is not None
        else OwnerSummary.placeholder()
    )
    return PostResponse(
        id=post.id,
        title=post.title,
        content=post.content,
        image_key=post.image_key,
        creator=creator,
        created_at=as_utc(post.created_at),
        updated_at=as_utc(post.updated_at),
    )


class PostLifecycleManager:
    """Apply post mutations and their after-effects."""

    def __init__(
        self,
        session: Session,
        janitor: AttachmentJanitor,
        broadcaster: MutationBroadcaster,
        guard: AuthorizationGuard | None = None,
    ) -> None:
        self.session = session
        self.posts = PostRepository(session)
        self.users = UserRepository(session)
        self.janitor = janitor
        self.broadcaster = broadcaster
        self.guard = guard or AuthorizationGuard()

    def create_post(
        self,
        identity: Identity,
        *,
        title: str | None,
        content: str | None,
        image_key: str | None,
        image_violations: Sequence[Violation] = (),
    ) -> PostResponse:
        """Create a post owned by the caller.

        ``image_violations`` are problems found with a rejected upload; they
        are reported together with the title and content violations.

        Raises:
            NotAuthenticated: If the caller is anonymous or their account is gone.
            ValidationFailed: If the image is missing or title/content are too short.
            StorageUnavailable: If the post cannot be persisted.
        """
        with self._discard_on_failure(image_key):
            if not identity.is_authenticated:
                raise NotAuthenticated()

            violations = validate_post_fields(title, content)
            violations.extend(image_violations)
            if not image_key and not image_violations:
                violations.append(NO_IMAGE)
            if violations:
                raise ValidationFailed(violations)

            owner = self.users.get_by_id(identity.subject_id)
            if owner is None:
                raise NotAuthenticated("Invalid user.")

            try:
                post = self.posts.create(
                    title=sanitize(title or ""),
                    content=sanitize(content or ""),
                    image_key=image_key or "",
                    owner_id=owner.id,
                )
                owner.add_post_id(post.id)
                self._commit()
            except SQLAlchemyError as exc:
                self.session.rollback()
                raise StorageUnavailable("Could not save post.") from exc

        logger.info("User %s created post %s", owner.id, post.id)
        snapshot = to_post_response(post, owner)
        self._publish(MutationAction.CREATE, snapshot.model_dump(mode="json"))
        return snapshot

    def get_post(self, post_id: int) -> PostResponse:
        """Return a post with its owner; reading requires no authorization."""
        found = self.posts.get_with_owner(post_id)
        if found is None:
            raise NotFound("Post not found.")
        return to_post_response(*found)

    def update_post(
        self,
        identity: Identity,
        post_id: int,
        *,
        title: str | None,
        content: str | None,
        image_key: str | Unchanged | None = UNCHANGED,
        image_violations: Sequence[Violation] = (),
    ) -> PostResponse:
        """Overwrite a post's title and content and, optionally, its attachment.

        ``image_key`` is ``UNCHANGED`` to keep the current attachment. A new
        key that is rejected for any reason is deleted from storage; the key
        it would have replaced is deleted only after the update commits.
        """
        new_key = image_key if isinstance(image_key, str) else None
        with self._discard_on_failure(new_key):
            found = self.posts.get_with_owner(post_id)
            if found is None:
                raise NotFound("Post not found.")
            post, owner = found

            self.guard.authorize(identity, owner.id if owner else None).raise_for_denial()

            violations = validate_post_fields(title, content)
            violations.extend(image_violations)
            if image_key is not UNCHANGED and not new_key and not image_violations:
                violations.append(NO_IMAGE)
            if violations:
                raise ValidationFailed(violations)

            superseded: str | None = None
            post.title = sanitize(title or "")
            post.content = sanitize(content or "")
            if new_key and new_key != post.image_key:
                superseded = post.image_key
                post.image_key = new_key
            try:
                self._commit()
            except SQLAlchemyError as exc:
                self.session.rollback()
                raise StorageUnavailable("Could not save post.") from exc

        if superseded:
            self.janitor.discard(superseded)
        logger.info("User %s updated post %s", identity.subject_id, post.id)
        snapshot = to_post_response(post, owner)
        self._publish(MutationAction.UPDATE, snapshot.model_dump(mode="json"))
        return snapshot

    def delete_post(self, identity: Identity, post_id: int) -> None:
        """Remove a post, its attachment and its entry in the owner's post list."""
        found = self.posts.get_with_owner(post_id)
        if found is None:
            raise NotFound("Post not found.")
        post, owner = found

        self.guard.authorize(identity, owner.id if owner else None).raise_for_denial()

        image_key = post.image_key
        try:
            self.posts.delete(post)
            if owner is not None:
                owner.remove_post_id(post_id)
            self._commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageUnavailable("Could not delete post.") from exc

        self.janitor.discard(image_key)
        logger.info("User %s deleted post %s", identity.subject_id, post_id)
        self._publish(MutationAction.DELETE, post_id)

    def _commit(self) -> None:
        self.session.commit()

    def _publish(self, action: MutationAction, subject: object) -> None:
        try:
            self.broadcaster.publish(MutationEvent(action=action, subject=subject))
        except Exception:
            logger.warning("Failed to publish %s event", action.value, exc_info=True)

    def _discard_on_failure(self, image_key: str | None) -> _DiscardOnFailure:
        return _DiscardOnFailure(self.janitor, image_key)


class _DiscardOnFailure:
    """Context manager that deletes ``image_key`` if the block raises."""

    def __init__(self, janitor: AttachmentJanitor, image_key: str | None) -> None:
        self.janitor = janitor
        self.image_key = image_key

    def __enter__(self) -> None:
        return None

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None and self.image_key:
            self.janitor.discard(self.image_key)
        return False
