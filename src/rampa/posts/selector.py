"""Filtered, newest-first views of a post collection."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rampa.posts.models import Post

ALL_TAGS = "all"


def select_posts(posts: Iterable[Post], tag_filter: str = ALL_TAGS) -> list[Post]:
    """Posts carrying *tag_filter* (or every post for ``"all"``), newest first.

    Posts with equal ``created_at`` keep their input order.
    """
    if tag_filter == ALL_TAGS:
        chosen = list(posts)
    else:
        chosen = [p for p in posts if tag_filter in p.accessibility_tags]
    return sorted(chosen, key=lambda p: p.created_at, reverse=True)


def known_tags(posts: Iterable[Post]) -> list[str]:
    """Distinct tags in first-seen order."""
    seen: dict[str, None] = {}
    for post in posts:
        for tag in post.accessibility_tags:
            seen.setdefault(tag, None)
    return list(seen)
