"""Accessibility reports: records, repository, votes, comments, views."""

from rampa.posts.comments import CommentThreadStore
from rampa.posts.models import (
    ACCESSIBILITY_OPTIONS,
    OTHER_TAG,
    Comment,
    Coordinates,
    Post,
    new_post,
    resolve_tags,
)
from rampa.posts.rating import VoteTally, cast_vote, recompute, tally
from rampa.posts.repository import PostRepository, VoteOutcome
from rampa.posts.selector import ALL_TAGS, known_tags, select_posts

__all__ = [
    "ACCESSIBILITY_OPTIONS",
    "ALL_TAGS",
    "OTHER_TAG",
    "Comment",
    "CommentThreadStore",
    "Coordinates",
    "Post",
    "PostRepository",
    "VoteOutcome",
    "VoteTally",
    "cast_vote",
    "known_tags",
    "new_post",
    "recompute",
    "resolve_tags",
    "select_posts",
    "tally",
]
