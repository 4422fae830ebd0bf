"""Rich display for the post feed.

Renders the feed as a table, a single post as a panel with its votes and
comments, and short status lines for mutations. Accepts an optional
:class:`~rich.console.Console` for dependency injection in tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rampa.posts.models import Comment, Post
    from rampa.posts.repository import VoteOutcome
    from rampa.session.profile import UserProfile

_TRUNCATE_LEN = 60
_UNSPECIFIED = "Não especificado"


def _truncate(text: str, limit: int = _TRUNCATE_LEN) -> str:
    """Truncate text to *limit* characters with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + " ..."


def format_tags(post: Post) -> str:
    return ", ".join(post.accessibility_tags) or _UNSPECIFIED


def format_rating(post: Post) -> str:
    return f"Útil: {post.useful_percent}% | Não útil: {post.not_useful_percent}%"


class FeedDisplay:
    """Rich rendering of posts, comments and profile."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    # ── Feed ──────────────────────────────────────────────────

    def show_posts(self, posts: Sequence[Post], tag_filter: str) -> None:
        """Print the filtered feed, newest first."""
        if not posts:
            self._console.print("Nenhum post cadastrado ainda!", style="bold")
            self._console.print("Seja o primeiro a publicar: rampa create", style="dim")
            return

        table = Table(title=f"Posts ({tag_filter})", title_style="bold cyan")
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("Data", no_wrap=True)
        table.add_column("Título", style="bold")
        table.add_column("Local")
        table.add_column("Acessibilidade", style="cyan")
        table.add_column("Útil", justify="right")
        table.add_column("Votos", justify="right")
        for post in posts:
            table.add_row(
                post.id[:8],
                post.created_at.strftime("%Y-%m-%d"),
                _truncate(post.title),
                post.location_name or "",
                format_tags(post),
                f"{post.useful_percent}%",
                str(len(post.votes)),
            )
        self._console.print(table)

    def show_post(self, post: Post, comments: Sequence[Comment]) -> None:
        """Print one post with its details and comment thread."""
        body = Text()
        if post.location_name:
            body.append(post.location_name + "\n", style="bold")
        if post.street_name:
            body.append(post.street_name + "\n", style="dim")
        body.append(post.description + "\n\n")
        body.append(f"Acessibilidade: {format_tags(post)}\n", style="cyan")
        body.append(format_rating(post) + f" ({len(post.votes)} votos)\n")
        if post.coordinates is not None:
            body.append(
                f"Mapa: {post.coordinates.latitude:.5f}, "
                f"{post.coordinates.longitude:.5f}\n",
                style="dim",
            )
        if post.image_ref:
            body.append(f"Imagem: {post.image_ref}\n", style="dim")
        body.append(f"Publicado em {post.created_at:%Y-%m-%d %H:%M}", style="dim")

        self._console.print(
            Panel(
                body,
                title=f"[bold cyan]{post.title}[/bold cyan]",
                subtitle=post.id,
                border_style="cyan",
            )
        )
        self.show_comments(comments)

    # ── Comments ──────────────────────────────────────────────

    def show_comments(self, comments: Sequence[Comment]) -> None:
        """Print a numbered comment thread."""
        if not comments:
            self._console.print("Sem comentários.", style="dim")
            return
        for index, comment in enumerate(comments):
            author = comment.author or "anônimo"
            line = Text(f"[{index}] ", style="dim")
            line.append(author, style="bold")
            line.append(f" ({comment.created_at:%Y-%m-%d %H:%M}): ", style="dim")
            line.append(comment.text)
            self._console.print(line)

    # ── Mutations ─────────────────────────────────────────────

    def show_vote(self, outcome: VoteOutcome) -> None:
        """Report the vote and the updated percentages."""
        if not outcome.changed:
            self._console.print("Voto já registrado.", style="dim")
        self._console.print(format_rating(outcome.post))

    def show_profile(self, profile: UserProfile) -> None:
        """Print the logged-in profile."""
        self._console.print(
            Panel(
                f"Nome: {profile.name}\n"
                f"Email: {profile.email}\n"
                f"Deficiência: {profile.disability or _UNSPECIFIED}",
                title="[bold]Perfil[/bold]",
                border_style="bright_white",
            )
        )
