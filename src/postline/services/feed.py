"""Paginated, newest-first listing of posts."""
from __future__ import annotations

from sqlalchemy.orm import Session

from postline.repositories.post_repo import PostRepository
from postline.schemas.post import FeedPage
from postline.services.post_service import to_post_response


def normalize_page(page: int | str | None) -> int:
    """Return ``page`` as a positive page number, falling back to 1."""
    if page is None:
        return 1
    try:
        number = int(page)
    except ValueError:
        return 1
    return number if number >= 1 else 1


class FeedPaginator:
    """Fixed-size windows over all live posts ordered by creation time."""

    def __init__(self, session: Session, page_size: int) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.posts = PostRepository(session)
        self.page_size = page_size

    def list(self, page: int | str | None = None) -> FeedPage:
        number = normalize_page(page)
        rows = self.posts.list_page(offset=(number - 1) * self.page_size, limit=self.page_size)
        return FeedPage(
            posts=[to_post_response(post, owner) for post, owner in rows],
            total_items=self.posts.count(),
        )
