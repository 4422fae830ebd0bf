"""Integration test: a full session against the SQLite store.

register -> login -> create -> focus reload -> vote -> comment -> reopen.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rampa.config.schema import StorageConfig
from rampa.posts.comments import CommentThreadStore
from rampa.posts.models import new_post
from rampa.posts.repository import PostRepository
from rampa.posts.selector import select_posts
from rampa.session.profile import ProfileStore
from rampa.storage.sql import create_sql_store

if TYPE_CHECKING:
    from pathlib import Path

    from rampa.storage.sql import SqlStore


# ── Tests ────────────────────────────────────────────────────────


class TestFeedSession:
    """Every screen focus reloads from the store."""

    async def test_full_cycle(self, sql_store: SqlStore) -> None:
        profiles = ProfileStore(sql_store)
        await profiles.register("Ana", "ana@x.com", "pw", "pw")
        me = await profiles.login("ana@x.com", "pw")

        # Create screen
        post = new_post(
            "Padaria da esquina",
            "Degrau na entrada, sem rampa.",
            ["Outro"],
            other_tag="Degrau",
        )
        await PostRepository(sql_store).append(post)

        # Home screen focus
        home = PostRepository(sql_store)
        feed = select_posts(await home.load())
        assert feed[0].id == post.id
        assert len(feed) == 5

        outcome = await home.vote(post.id, me.email, False)
        assert outcome.changed is True

        threads = CommentThreadStore(sql_store)
        await threads.append(post.id, "Confirmo, tem degrau.", author=me.name)

        # Next focus sees the vote and the comment
        again = PostRepository(sql_store)
        await again.load()
        reloaded = again.resolve(post.id[:8])
        assert reloaded.votes == {"ana@x.com": 0}
        assert (reloaded.useful_percent, reloaded.not_useful_percent) == (0, 100)
        (comment,) = await threads.load(post.id)
        assert comment.author == "Ana"

        assert select_posts(again.posts, "Degrau") == [reloaded]

    async def test_state_survives_reopen(self, tmp_path: Path) -> None:
        config = StorageConfig(url=f"sqlite+aiosqlite:///{tmp_path / 'rampa.db'}")

        store = await create_sql_store(config)
        try:
            repo = PostRepository(store)
            await repo.load()
            await repo.vote("seed-2", "bia@x.com", True)
            await repo.clear()
            await CommentThreadStore(store).append("seed-2", "ainda aqui")
        finally:
            await store.close()

        store = await create_sql_store(config)
        try:
            assert await PostRepository(store).load() == []
            comments = await CommentThreadStore(store).load("seed-2")
            assert [c.text for c in comments] == ["ainda aqui"]
        finally:
            await store.close()
