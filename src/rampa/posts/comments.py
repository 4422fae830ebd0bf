"""Comment threads, one persisted list per post.

Threads live under ``comments_<postId>``, independent of the post list
blob. Each mutation re-reads the thread, changes it and writes the whole
thread back.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pydantic

from rampa.core.errors import DecodeError
from rampa.posts.codec import decode_list, encode
from rampa.posts.models import EPOCH, Comment

if TYPE_CHECKING:
    from rampa.storage.base import KeyValueStore

logger = logging.getLogger(__name__)

COMMENTS_PREFIX = "comments_"


def decode_comments(key: str, raw: str) -> list[Comment]:
    """Parse a stored thread. Raises DecodeError for malformed JSON."""
    comments: list[Comment] = []
    for index, record in enumerate(decode_list(key, raw)):
        if isinstance(record, str):
            comments.append(Comment(text=record, created_at=EPOCH))
            continue
        try:
            comments.append(Comment.model_validate(record))
        except pydantic.ValidationError as e:
            logger.warning("Skipping undecodable comment #%d in %s: %s", index, key, e)
    return comments


class CommentThreadStore:
    """Append/remove operations on per-post comment threads."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    @staticmethod
    def key_for(post_id: str) -> str:
        return f"{COMMENTS_PREFIX}{post_id}"

    async def load(self, post_id: str) -> list[Comment]:
        """Comments for *post_id* in append order; empty if none or unreadable."""
        key = self.key_for(post_id)
        raw = await self._store.get(key)
        if raw is None:
            return []
        try:
            return decode_comments(key, raw)
        except DecodeError as e:
            logger.warning("Discarding unreadable comment thread: %s", e)
            return []

    async def _save(self, post_id: str, comments: list[Comment]) -> None:
        await self._store.set(
            self.key_for(post_id), encode([c.to_record() for c in comments])
        )

    async def append(
        self, post_id: str, text: str, *, author: str | None = None
    ) -> Comment | None:
        """Add a comment. Blank text is ignored and returns None."""
        if not text.strip():
            return None
        comments = await self.load(post_id)
        comment = Comment(text=text, author=author)
        comments.append(comment)
        await self._save(post_id, comments)
        return comment

    async def remove_at(self, post_id: str, index: int) -> Comment | None:
        """Delete the comment at *index*.

        Out-of-range indexes (negative included) change nothing and
        return None.
        """
        comments = await self.load(post_id)
        if not 0 <= index < len(comments):
            return None
        removed = comments.pop(index)
        await self._save(post_id, comments)
        return removed
