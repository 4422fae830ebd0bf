"""Post repository: the canonical, persisted list of accessibility reports.

The whole list lives under one key as a single JSON array. Every
mutation rewrites that array from the in-memory copy; there is no
locking, so two overlapping writers race and the last one wins.
Presentation code should ``load()`` on each focus/request rather than
keep a repository alive across them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import pydantic

from rampa.core.errors import DecodeError, PostNotFoundError, ValidationError
from rampa.posts.codec import decode_list, encode
from rampa.posts.models import Post
from rampa.posts.rating import cast_vote, recompute
from rampa.posts.seed import seed_posts

if TYPE_CHECKING:
    from collections.abc import Callable

    from rampa.storage.base import KeyValueStore

logger = logging.getLogger(__name__)

POSTS_KEY = "posts"
SEEDED_SUFFIX = "_seeded"


@dataclass(frozen=True, slots=True)
class VoteOutcome:
    """Result of :meth:`PostRepository.vote`."""

    post: Post
    changed: bool


def decode_posts(key: str, raw: str) -> list[Post]:
    """Normalize a stored post array into Post records.

    Raises DecodeError for malformed JSON. Individual records that cannot
    be decoded are skipped with a warning.
    """
    posts: list[Post] = []
    for index, record in enumerate(decode_list(key, raw)):
        if not isinstance(record, dict):
            logger.warning("Skipping non-object post #%d in %s", index, key)
            continue
        try:
            post = Post.model_validate(record)
        except pydantic.ValidationError as e:
            logger.warning("Skipping undecodable post #%d in %s: %s", index, key, e)
            continue
        if post.votes:
            recompute(post)
        posts.append(post)
    return posts


class PostRepository:
    """Async repository for accessibility reports."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = POSTS_KEY,
        seed: bool = True,
        seed_factory: Callable[[], list[Post]] = seed_posts,
    ) -> None:
        self._store = store
        self._key = key
        self._seed = seed
        self._seed_factory = seed_factory
        self._seed_checked = False
        self._marked = False
        self._loaded = False
        self.posts: list[Post] = []

    @property
    def key(self) -> str:
        return self._key

    @property
    def seed_marker_key(self) -> str:
        return self._key + SEEDED_SUFFIX

    # ── Bootstrap ────────────────────────────────────────────────

    async def ensure_seeded(self) -> bool:
        """Write the demo posts if the store has never held any posts.

        Returns True when the seed set was written. Once the post key has
        held any value, even an empty list, the marker is written so that
        removing the key later never brings the demo posts back.
        """
        self._marked = await self._store.get(self.seed_marker_key) is not None
        if await self._store.get(self._key) is not None:
            if not self._marked:
                await self._mark_seeded()
            self._seed_checked = True
            return False
        if self._marked or not self._seed:
            self._seed_checked = True
            return False
        seeded = self._seed_factory()
        await self._store.set(self._key, encode([p.to_record() for p in seeded]))
        await self._mark_seeded()
        self._seed_checked = True
        logger.info("Seeded %s with %d demo posts", self._key, len(seeded))
        return True

    async def _mark_seeded(self) -> None:
        await self._store.set(self.seed_marker_key, "true")
        self._marked = True

    # ── Read ─────────────────────────────────────────────────────

    async def load(self) -> list[Post]:
        """Re-read every post from the store, in insertion order.

        Corrupted data yields an empty list instead of an error.
        Raises PersistenceError if the store cannot be read.
        """
        if not self._seed_checked:
            await self.ensure_seeded()
        raw = await self._store.get(self._key)
        if raw is None:
            posts: list[Post] = []
        else:
            try:
                posts = decode_posts(self._key, raw)
            except DecodeError as e:
                logger.warning("Discarding unreadable post list: %s", e)
                posts = []
        self.posts = posts
        self._loaded = True
        return list(posts)

    def get(self, post_id: str) -> Post | None:
        """Return the loaded post with *post_id*, or None."""
        for post in self.posts:
            if post.id == post_id:
                return post
        return None

    def resolve(self, ref: str) -> Post:
        """Find a loaded post by full id or unique id prefix.

        Raises PostNotFoundError when nothing matches and ValidationError
        when a prefix matches several posts.
        """
        exact = self.get(ref)
        if exact is not None:
            return exact
        matches = [p for p in self.posts if p.id.startswith(ref)] if ref else []
        if not matches:
            raise PostNotFoundError(ref)
        if len(matches) > 1:
            msg = f"Ambiguous post prefix '{ref}' matches {len(matches)} posts"
            raise ValidationError(msg)
        return matches[0]

    # ── Write ────────────────────────────────────────────────────

    async def save(self) -> None:
        """Persist the in-memory list as one write.

        Raises PersistenceError on failure.
        """
        await self._store.set(self._key, encode([p.to_record() for p in self.posts]))
        if not self._marked:
            await self._mark_seeded()
        logger.debug("Saved %d posts to %s", len(self.posts), self._key)

    async def append(self, post: Post) -> Post:
        """Add a post and persist the full list.

        Raises ValidationError (before any I/O) when a required field is
        blank or the id is taken. If the write fails with
        PersistenceError the post stays in the in-memory list.
        """
        missing = [
            name
            for name, value in (
                ("id", post.id),
                ("title", post.title),
                ("description", post.description),
            )
            if not value.strip()
        ]
        if not post.accessibility_tags:
            missing.append("accessibility_tags")
        if missing:
            msg = f"Missing required fields: {', '.join(missing)}"
            raise ValidationError(msg)

        if not self._loaded:
            await self.load()
        if self.get(post.id) is not None:
            msg = f"Duplicate post id: {post.id}"
            raise ValidationError(msg)

        self.posts.append(post)
        await self.save()
        logger.info("Added post %s (%s)", post.id, post.title)
        return post

    async def vote(self, post_id: str, voter_id: str, is_useful: bool) -> VoteOutcome:
        """Cast a vote on a loaded post and persist if it changed anything.

        Raises PostNotFoundError if the post is not in the loaded list.
        """
        post = self.get(post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        changed = cast_vote(post, voter_id, is_useful)
        if changed:
            await self.save()
        return VoteOutcome(post=post, changed=changed)

    async def clear(self) -> None:
        """Delete every post. Demo posts are not re-seeded afterwards."""
        await self._store.remove(self._key)
        await self._mark_seeded()
        self.posts = []
        self._loaded = True
        logger.info("Cleared %s", self._key)
