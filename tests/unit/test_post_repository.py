"""Tests for PostRepository: seeding, load/save, append, votes, clear."""

from __future__ import annotations

import json

import pytest

from rampa.core.errors import PersistenceError, PostNotFoundError, ValidationError
from rampa.posts.repository import POSTS_KEY, PostRepository, decode_posts
from rampa.storage.memory import MemoryStore
from tests.fixtures.stores import FlakyStore

# ── Seeding ──────────────────────────────────────────────────────


class TestSeeding:
    async def test_empty_store_gets_demo_posts(self, memory_store: MemoryStore):
        repo = PostRepository(memory_store)
        posts = await repo.load()

        assert [p.id for p in posts] == ["seed-1", "seed-2", "seed-3", "seed-4"]
        assert await memory_store.get("posts_seeded") == "true"

    async def test_seeding_happens_once(self, memory_store: MemoryStore):
        assert await PostRepository(memory_store).ensure_seeded() is True
        assert await PostRepository(memory_store).ensure_seeded() is False
        posts = await PostRepository(memory_store).load()
        assert len(posts) == 4

    async def test_existing_posts_are_not_overwritten(
        self, memory_store: MemoryStore, make_post
    ):
        await memory_store.set(POSTS_KEY, json.dumps([make_post().to_record()]))
        posts = await PostRepository(memory_store).load()
        assert [p.id for p in posts] == ["post-1"]

    async def test_no_reseed_after_clear(self, memory_store: MemoryStore):
        repo = PostRepository(memory_store)
        await repo.load()
        await repo.clear()

        fresh = PostRepository(memory_store)
        assert await fresh.load() == []
        assert await memory_store.get(POSTS_KEY) is None

    async def test_no_reseed_after_existing_value_removed(self):
        store = MemoryStore({POSTS_KEY: "[]"})
        assert await PostRepository(store).load() == []
        await store.remove(POSTS_KEY)

        assert await PostRepository(store).load() == []
        assert await store.get("posts_seeded") == "true"

    async def test_save_marks_store_as_seeded(self, make_post):
        store = MemoryStore()
        await PostRepository(store, seed=False).append(make_post())
        await store.remove(POSTS_KEY)
        assert await PostRepository(store).load() == []

    async def test_retry_after_read_failure_still_seeds(self):
        store = FlakyStore()
        repo = PostRepository(store)
        store.fail_reads = True
        with pytest.raises(PersistenceError):
            await repo.load()

        store.fail_reads = False
        assert len(await repo.load()) == 4

    async def test_seeding_disabled(self, memory_store: MemoryStore):
        repo = PostRepository(memory_store, seed=False)
        assert await repo.load() == []
        assert memory_store.writes == 0

    async def test_custom_key(self, memory_store: MemoryStore):
        repo = PostRepository(memory_store, key="feed")
        await repo.load()
        assert repo.seed_marker_key == "feed_seeded"
        assert set(memory_store.keys()) == {"feed", "feed_seeded"}


# ── Load ─────────────────────────────────────────────────────────


class TestLoad:
    async def test_missing_key_is_empty(self, repo: PostRepository):
        assert await repo.load() == []

    async def test_malformed_json_is_empty(
        self, memory_store: MemoryStore, repo: PostRepository
    ):
        await memory_store.set(POSTS_KEY, "{not json")
        assert await repo.load() == []

    async def test_non_list_is_empty(
        self, memory_store: MemoryStore, repo: PostRepository
    ):
        await memory_store.set(POSTS_KEY, '{"id": "x"}')
        assert await repo.load() == []

    async def test_legacy_string_accessibility(
        self, memory_store: MemoryStore, repo: PostRepository
    ):
        record = {
            "id": "old",
            "title": "Praça",
            "description": "Tem rampa.",
            "accessibility": "Rampa",
        }
        await memory_store.set(POSTS_KEY, json.dumps([record]))
        (post,) = await repo.load()
        assert post.accessibility_tags == ["Rampa"]

    async def test_undecodable_record_is_skipped(
        self, memory_store: MemoryStore, repo: PostRepository, make_post
    ):
        good = make_post().to_record()
        await memory_store.set(POSTS_KEY, json.dumps([{"title": 3}, 7, good]))
        posts = await repo.load()
        assert [p.id for p in posts] == ["post-1"]

    async def test_stale_percentages_recomputed(
        self, memory_store: MemoryStore, repo: PostRepository, make_post
    ):
        record = make_post(votes={"a": 1, "b": 0}).to_record()
        record["usefulPercent"] = 90
        record["notUsefulPercent"] = 90
        await memory_store.set(POSTS_KEY, json.dumps([record]))
        (post,) = await repo.load()
        assert (post.useful_percent, post.not_useful_percent) == (50, 50)

    async def test_load_rereads_store(
        self, memory_store: MemoryStore, repo: PostRepository, make_post
    ):
        await repo.load()
        other = PostRepository(memory_store, seed=False)
        await other.append(make_post())
        assert len(await repo.load()) == 1

    async def test_read_failure_propagates(self):
        store = FlakyStore()
        store.fail_reads = True
        with pytest.raises(PersistenceError):
            await PostRepository(store).load()


class TestLegacyRecord:
    """Records written by the original app survive a load/save cycle."""

    async def test_bundled_asset_image_survives_append(
        self, memory_store: MemoryStore, repo: PostRepository, make_post
    ):
        legacy = {
            "id": "1700000000000",
            "title": "Praça",
            "description": "Tem rampa.",
            "accessibility": "Rampa",
            "image": 12,
            "date": "2024-03-04T10:00:00.000Z",
            "ratings": {},
            "positive": "n/a",
        }
        await memory_store.set(POSTS_KEY, json.dumps([legacy]))
        (old,) = await repo.load()
        assert old.image_ref == 12

        await repo.append(make_post())
        stored = json.loads(await memory_store.get(POSTS_KEY))
        assert [r["id"] for r in stored] == ["1700000000000", "post-1"]
        assert stored[0]["imageRef"] == 12

        reloaded = await PostRepository(memory_store, seed=False).load()
        assert len(reloaded) == 2


class TestDecodePosts:
    def test_insertion_order(self, make_post):
        records = [make_post(minutes=m).to_record() for m in (5, 1, 9)]
        posts = decode_posts(POSTS_KEY, json.dumps(records))
        assert [p.id for p in posts] == ["post-1", "post-2", "post-3"]


# ── Append ───────────────────────────────────────────────────────


class TestAppend:
    async def test_round_trip(
        self, memory_store: MemoryStore, repo: PostRepository, make_post
    ):
        first = make_post()
        second = make_post(accessibility_tags=["Elevador", "Outro lugar"])
        await repo.append(first)
        await repo.append(second)

        loaded = await PostRepository(memory_store, seed=False).load()
        assert [p.model_dump() for p in loaded] == [
            first.model_dump(),
            second.model_dump(),
        ]

    async def test_append_loads_before_writing(
        self, memory_store: MemoryStore, make_post
    ):
        await PostRepository(memory_store, seed=False).append(make_post())
        await PostRepository(memory_store, seed=False).append(make_post())
        assert len(await PostRepository(memory_store, seed=False).load()) == 2

    @pytest.mark.parametrize(
        ("overrides", "missing"),
        [
            ({"title": "  "}, "title"),
            ({"description": ""}, "description"),
            ({"accessibility_tags": []}, "accessibility_tags"),
            ({"id": ""}, "id"),
        ],
    )
    async def test_missing_fields_rejected_without_io(
        self,
        memory_store: MemoryStore,
        repo: PostRepository,
        make_post,
        overrides,
        missing,
    ):
        with pytest.raises(ValidationError, match=missing):
            await repo.append(make_post(**overrides))
        assert memory_store.writes == 0
        assert memory_store.keys() == []

    async def test_duplicate_id_rejected(self, repo: PostRepository, make_post):
        await repo.append(make_post(id="same"))
        with pytest.raises(ValidationError, match="Duplicate post id"):
            await repo.append(make_post(id="same"))
        assert len(repo.posts) == 1

    async def test_write_failure_keeps_post_in_memory(self, make_post):
        store = FlakyStore()
        repo = PostRepository(store, seed=False)
        await repo.load()
        store.fail_writes = True

        post = make_post()
        with pytest.raises(PersistenceError):
            await repo.append(post)
        assert repo.get(post.id) is post
        assert await store.get(POSTS_KEY) is None


# ── Lookup ───────────────────────────────────────────────────────


class TestResolve:
    async def test_exact_and_prefix(self, repo: PostRepository, make_post):
        await repo.append(make_post(id="abc123"))
        await repo.append(make_post(id="xyz789"))
        assert repo.resolve("abc123").id == "abc123"
        assert repo.resolve("xy").id == "xyz789"

    async def test_not_found(self, repo: PostRepository):
        await repo.load()
        with pytest.raises(PostNotFoundError, match="Post not found: nope"):
            repo.resolve("nope")

    async def test_empty_ref_not_found(self, repo: PostRepository, make_post):
        await repo.append(make_post())
        with pytest.raises(PostNotFoundError):
            repo.resolve("")

    async def test_ambiguous_prefix(self, repo: PostRepository, make_post):
        await repo.append(make_post(id="abc1"))
        await repo.append(make_post(id="abc2"))
        with pytest.raises(ValidationError, match="Ambiguous"):
            repo.resolve("abc")

    async def test_get_missing_is_none(self, repo: PostRepository):
        assert repo.get("missing") is None


# ── Votes ────────────────────────────────────────────────────────


class TestVote:
    async def test_vote_persists(
        self, memory_store: MemoryStore, repo: PostRepository, make_post
    ):
        post = await repo.append(make_post())
        outcome = await repo.vote(post.id, "ana@x.com", True)
        assert outcome.changed is True
        assert outcome.post.useful_percent == 100

        (reloaded,) = await PostRepository(memory_store, seed=False).load()
        assert reloaded.votes == {"ana@x.com": 1}
        assert reloaded.useful_percent == 100

    async def test_repeat_vote_does_not_write(
        self, memory_store: MemoryStore, repo: PostRepository, make_post
    ):
        post = await repo.append(make_post())
        await repo.vote(post.id, "ana@x.com", False)
        writes = memory_store.writes

        outcome = await repo.vote(post.id, "ana@x.com", False)
        assert outcome.changed is False
        assert memory_store.writes == writes

    async def test_unknown_post(self, repo: PostRepository):
        await repo.load()
        with pytest.raises(PostNotFoundError):
            await repo.vote("ghost", "ana@x.com", True)

    async def test_overlapping_writers_last_one_wins(
        self, memory_store: MemoryStore, make_post
    ):
        seed = PostRepository(memory_store, seed=False)
        await seed.append(make_post(id="p1"))

        first = PostRepository(memory_store, seed=False)
        second = PostRepository(memory_store, seed=False)
        await first.load()
        await second.load()
        await first.vote("p1", "ana@x.com", True)
        await second.vote("p1", "bia@x.com", False)

        (post,) = await PostRepository(memory_store, seed=False).load()
        assert post.votes == {"bia@x.com": 0}


# ── Clear ────────────────────────────────────────────────────────


class TestClear:
    async def test_clear_removes_everything(
        self, memory_store: MemoryStore, repo: PostRepository, make_post
    ):
        await repo.append(make_post())
        await repo.clear()
        assert repo.posts == []
        assert await memory_store.get(POSTS_KEY) is None
        assert await repo.load() == []
