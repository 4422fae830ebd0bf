"""Main CLI application.

Click commands for rampa: posts, show, create, vote, comments, comment,
uncomment, register, login, logout, profile, clear-posts, serve.

Every command opens the store, reloads what it needs and closes the
store again, so each invocation sees the latest persisted state.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import TYPE_CHECKING, Any

import click

from rampa import __version__
from rampa.config.loader import load_config
from rampa.core.errors import AuthenticationError, ConfigError, RampaError
from rampa.posts.models import ACCESSIBILITY_OPTIONS
from rampa.storage import open_store

if TYPE_CHECKING:
    from collections.abc import Coroutine

    from rampa.config.schema import LoggingConfig, RampaConfig
    from rampa.posts.repository import PostRepository
    from rampa.storage.base import KeyValueStore


# ── Helpers ──────────────────────────────────────────────────────


def _error(msg: str) -> None:
    """Print an error message to stderr and exit."""
    click.echo(f"Error: {msg}", err=True)
    sys.exit(1)


def _setup_logging(config: LoggingConfig) -> None:
    """Configure the root logger from the ``[logging]`` section."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.file:
        handlers.append(logging.FileHandler(config.file, encoding="utf-8"))
    logging.basicConfig(
        level=config.level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


def _load_config(config_path: str | None) -> RampaConfig:
    """Load config with user-friendly error handling."""
    try:
        config = load_config(path=config_path)
    except ConfigError as e:
        _error(str(e))
        raise  # unreachable, keeps mypy happy
    _setup_logging(config.logging)
    return config


def _post_repository(store: KeyValueStore, config: RampaConfig) -> PostRepository:
    from rampa.posts.repository import PostRepository

    return PostRepository(
        store,
        key=config.storage.posts_key,
        seed=config.feed.seed_demo_posts,
    )


def _run(coro: Coroutine[Any, Any, None]) -> None:
    """Run an async command body, turning rampa errors into exit 1."""
    try:
        asyncio.run(coro)
    except RampaError as e:
        _error(str(e))


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="rampa")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True),
    default=None,
    help="Path to config file.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None) -> None:
    """rampa - Accessibility reports for public places.

    Publish, browse, vote on and discuss how accessible places are.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ── posts ────────────────────────────────────────────────────────


@cli.command()
@click.option(
    "--tag",
    "tag_filter",
    default=None,
    help="Only posts with this accessibility tag ('all' for every post).",
)
@click.pass_context
def posts(ctx: click.Context, tag_filter: str | None) -> None:
    """List posts, newest first."""
    config = _load_config(ctx.obj["config_path"])
    _run(_posts_async(config, tag_filter or config.feed.default_filter))


async def _posts_async(config: RampaConfig, tag_filter: str) -> None:
    """Async implementation for the posts command."""
    from rampa.cli.display import FeedDisplay
    from rampa.posts.selector import select_posts

    store = await open_store(config)
    try:
        repo = _post_repository(store, config)
        loaded = await repo.load()
    finally:
        await store.close()

    FeedDisplay().show_posts(select_posts(loaded, tag_filter), tag_filter)


# ── show ─────────────────────────────────────────────────────────


@cli.command()
@click.argument("post_id")
@click.pass_context
def show(ctx: click.Context, post_id: str) -> None:
    """Show a post with its comments.

    POST_ID can be the full id or a unique prefix.
    """
    config = _load_config(ctx.obj["config_path"])
    _run(_show_async(config, post_id))


async def _show_async(config: RampaConfig, post_id: str) -> None:
    """Async implementation for the show command."""
    from rampa.cli.display import FeedDisplay
    from rampa.posts.comments import CommentThreadStore

    store = await open_store(config)
    try:
        repo = _post_repository(store, config)
        await repo.load()
        post = repo.resolve(post_id)
        comments = await CommentThreadStore(store).load(post.id)
    finally:
        await store.close()

    FeedDisplay().show_post(post, comments)


# ── create ───────────────────────────────────────────────────────


@cli.command()
@click.option("--title", prompt=True, help="Short title of the report.")
@click.option("--description", prompt=True, help="What is (or is not) accessible.")
@click.option(
    "--tag",
    "tags",
    multiple=True,
    type=click.Choice(ACCESSIBILITY_OPTIONS),
    help="Accessibility tag; repeat for several. 'Outro' uses --other.",
)
@click.option("--other", default="", help="Free-text tag used for 'Outro'.")
@click.option("--location-name", default=None, help="Name of the place.")
@click.option("--street", default=None, help="Street address.")
@click.option("--image", default=None, help="Image URI or path.")
@click.option("--lat", type=float, default=None, help="Latitude.")
@click.option("--lon", type=float, default=None, help="Longitude.")
@click.pass_context
def create(
    ctx: click.Context,
    title: str,
    description: str,
    tags: tuple[str, ...],
    other: str,
    location_name: str | None,
    street: str | None,
    image: str | None,
    lat: float | None,
    lon: float | None,
) -> None:
    """Publish a new accessibility report."""
    if (lat is None) != (lon is None):
        _error("--lat and --lon must be given together")
    config = _load_config(ctx.obj["config_path"])
    coordinates = (lat, lon) if lat is not None and lon is not None else None

    from rampa.posts.models import new_post

    try:
        post = new_post(
            title,
            description,
            list(tags),
            other_tag=other,
            location_name=location_name,
            street_name=street,
            image_ref=image,
            coordinates=coordinates,
        )
    except RampaError as e:
        _error(str(e))
        return  # unreachable

    async def _create_async() -> None:
        store = await open_store(config)
        try:
            repo = _post_repository(store, config)
            await repo.load()
            await repo.append(post)
        finally:
            await store.close()

    _run(_create_async())
    click.echo(f"Post created: {post.id}")


# ── vote ─────────────────────────────────────────────────────────


@cli.command()
@click.argument("post_id")
@click.option(
    "--useful/--not-useful",
    "useful",
    required=True,
    help="Mark the post useful or not useful.",
)
@click.pass_context
def vote(ctx: click.Context, post_id: str, useful: bool) -> None:
    """Vote a post useful or not useful (requires login)."""
    config = _load_config(ctx.obj["config_path"])
    _run(_vote_async(config, post_id, useful))


async def _vote_async(config: RampaConfig, post_id: str, useful: bool) -> None:
    """Async implementation for the vote command."""
    from rampa.cli.display import FeedDisplay
    from rampa.session.profile import ProfileStore

    store = await open_store(config)
    try:
        profile = await ProfileStore(store).current()
        if profile is None:
            msg = "Log in first: rampa login EMAIL"
            raise AuthenticationError(msg)
        repo = _post_repository(store, config)
        await repo.load()
        post = repo.resolve(post_id)
        outcome = await repo.vote(post.id, profile.email, useful)
    finally:
        await store.close()

    FeedDisplay().show_vote(outcome)


# ── comments ─────────────────────────────────────────────────────


@cli.command()
@click.argument("post_id")
@click.pass_context
def comments(ctx: click.Context, post_id: str) -> None:
    """List the comments on a post."""
    config = _load_config(ctx.obj["config_path"])
    _run(_comments_async(config, post_id))


async def _comments_async(config: RampaConfig, post_id: str) -> None:
    """Async implementation for the comments command."""
    from rampa.cli.display import FeedDisplay
    from rampa.posts.comments import CommentThreadStore

    store = await open_store(config)
    try:
        repo = _post_repository(store, config)
        await repo.load()
        post = repo.resolve(post_id)
        thread = await CommentThreadStore(store).load(post.id)
    finally:
        await store.close()

    FeedDisplay().show_comments(thread)


@cli.command()
@click.argument("post_id")
@click.argument("text")
@click.pass_context
def comment(ctx: click.Context, post_id: str, text: str) -> None:
    """Add a comment to a post."""
    config = _load_config(ctx.obj["config_path"])
    _run(_comment_async(config, post_id, text))


async def _comment_async(config: RampaConfig, post_id: str, text: str) -> None:
    """Async implementation for the comment command."""
    from rampa.posts.comments import CommentThreadStore
    from rampa.session.profile import ProfileStore

    store = await open_store(config)
    try:
        repo = _post_repository(store, config)
        await repo.load()
        post = repo.resolve(post_id)
        profile = await ProfileStore(store).current()
        author = profile.name if profile is not None else None
        added = await CommentThreadStore(store).append(post.id, text, author=author)
    finally:
        await store.close()

    if added is None:
        click.echo("Empty comment ignored.")
    else:
        click.echo(f"Comment added to {post.id[:8]}.")


@cli.command()
@click.argument("post_id")
@click.argument("index", type=int)
@click.pass_context
def uncomment(ctx: click.Context, post_id: str, index: int) -> None:
    """Delete the comment at INDEX (as numbered by 'comments')."""
    config = _load_config(ctx.obj["config_path"])
    _run(_uncomment_async(config, post_id, index))


async def _uncomment_async(config: RampaConfig, post_id: str, index: int) -> None:
    """Async implementation for the uncomment command."""
    from rampa.posts.comments import CommentThreadStore

    store = await open_store(config)
    try:
        repo = _post_repository(store, config)
        await repo.load()
        post = repo.resolve(post_id)
        removed = await CommentThreadStore(store).remove_at(post.id, index)
    finally:
        await store.close()

    if removed is None:
        click.echo(f"No comment at index {index}.")
    else:
        click.echo(f"Comment {index} deleted.")


# ── session ──────────────────────────────────────────────────────


@cli.command()
@click.option("--name", prompt=True, help="Display name.")
@click.option("--email", prompt=True, help="Email (also your voter id).")
@click.option(
    "--password",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Password.",
)
@click.option("--disability", default="", help="Optional disability note.")
@click.pass_context
def register(
    ctx: click.Context, name: str, email: str, password: str, disability: str
) -> None:
    """Create the local account."""
    config = _load_config(ctx.obj["config_path"])

    async def _register_async() -> None:
        from rampa.session.profile import ProfileStore

        store = await open_store(config)
        try:
            await ProfileStore(store).register(
                name, email, password, password, disability=disability
            )
        finally:
            await store.close()

    _run(_register_async())
    click.echo(f"Account created for {email}. Now run: rampa login {email}")


@cli.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True, help="Password.")
@click.pass_context
def login(ctx: click.Context, email: str, password: str) -> None:
    """Log in with the local account."""
    config = _load_config(ctx.obj["config_path"])

    async def _login_async() -> None:
        from rampa.session.profile import ProfileStore

        store = await open_store(config)
        try:
            profile = await ProfileStore(store).login(email, password)
        finally:
            await store.close()
        click.echo(f"Welcome, {profile.name}!")

    _run(_login_async())


@cli.command()
@click.pass_context
def logout(ctx: click.Context) -> None:
    """End the current session."""
    config = _load_config(ctx.obj["config_path"])

    async def _logout_async() -> None:
        from rampa.session.profile import ProfileStore

        store = await open_store(config)
        try:
            await ProfileStore(store).logout()
        finally:
            await store.close()

    _run(_logout_async())
    click.echo("Logged out.")


@cli.command()
@click.option("--name", default=None, help="New display name.")
@click.option("--disability", default=None, help="New disability note.")
@click.pass_context
def profile(ctx: click.Context, name: str | None, disability: str | None) -> None:
    """Show or edit the logged-in profile."""
    config = _load_config(ctx.obj["config_path"])
    _run(_profile_async(config, name, disability))


async def _profile_async(
    config: RampaConfig, name: str | None, disability: str | None
) -> None:
    """Async implementation for the profile command."""
    from rampa.cli.display import FeedDisplay
    from rampa.session.profile import ProfileStore

    store = await open_store(config)
    try:
        profiles = ProfileStore(store)
        current = await profiles.current()
        if current is None:
            raise AuthenticationError("Not logged in")
        if name is not None or disability is not None:
            current = await profiles.update(
                name if name is not None else current.name,
                disability if disability is not None else current.disability,
            )
    finally:
        await store.close()

    FeedDisplay().show_profile(current)


# ── clear-posts ──────────────────────────────────────────────────


@cli.command(name="clear-posts")
@click.option("--yes", is_flag=True, default=False, help="Skip confirmation.")
@click.pass_context
def clear_posts(ctx: click.Context, yes: bool) -> None:
    """Delete every post (comments are kept)."""
    if not yes:
        click.confirm("Delete all posts?", abort=True)
    config = _load_config(ctx.obj["config_path"])

    async def _clear_async() -> None:
        store = await open_store(config)
        try:
            await _post_repository(store, config).clear()
        finally:
            await store.close()

    _run(_clear_async())
    click.echo("Posts cleared.")


# ── serve ────────────────────────────────────────────────────────


@cli.command()
@click.option("--host", default=None, help="Host to bind to (overrides config).")
@click.option(
    "--port", type=int, default=None, help="Port to bind to (overrides config)."
)
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Start the REST API server."""
    import uvicorn

    from rampa.api.app import create_app

    config = _load_config(ctx.obj["config_path"])
    app = create_app(config)
    uvicorn.run(
        app,
        host=host or config.api.host,
        port=port or config.api.port,
    )
