"""Comment thread endpoints."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel

from rampa.api.routes.posts import load_repository
from rampa.posts.comments import CommentThreadStore
from rampa.posts.models import Comment

router = APIRouter(prefix="/api/posts/{post_id}/comments", tags=["comments"])


class CommentResponse(BaseModel):
    index: int
    text: str
    author: str | None = None
    created_at: datetime


class CommentListResponse(BaseModel):
    post_id: str
    comments: list[CommentResponse]
    total: int


def _thread_response(post_id: str, thread: list[Comment]) -> CommentListResponse:
    return CommentListResponse(
        post_id=post_id,
        comments=[
            CommentResponse(
                index=i, text=c.text, author=c.author, created_at=c.created_at
            )
            for i, c in enumerate(thread)
        ],
        total=len(thread),
    )


async def _resolve_post_id(request: Request, post_id: str) -> str:
    repo = await load_repository(request)
    return repo.resolve(post_id).id


# -- GET /api/posts/{post_id}/comments -----------------------------------------


@router.get("", response_model=CommentListResponse)
async def list_comments(post_id: str, request: Request) -> CommentListResponse:
    """The post's comments in append order."""
    resolved = await _resolve_post_id(request, post_id)
    thread = await CommentThreadStore(request.app.state.store).load(resolved)
    return _thread_response(resolved, thread)


# -- POST /api/posts/{post_id}/comments ----------------------------------------


class CommentRequest(BaseModel):
    text: str
    author: str | None = None


class CommentMutationResponse(BaseModel):
    changed: bool
    thread: CommentListResponse


@router.post("", response_model=CommentMutationResponse)
async def add_comment(
    post_id: str, body: CommentRequest, request: Request
) -> CommentMutationResponse:
    """Append a comment; blank text is ignored."""
    resolved = await _resolve_post_id(request, post_id)
    threads = CommentThreadStore(request.app.state.store)
    added = await threads.append(resolved, body.text, author=body.author)
    thread = await threads.load(resolved)
    return CommentMutationResponse(
        changed=added is not None, thread=_thread_response(resolved, thread)
    )


# -- DELETE /api/posts/{post_id}/comments/{index} ------------------------------


@router.delete("/{index}", response_model=CommentMutationResponse)
async def delete_comment(
    post_id: str, index: int, request: Request
) -> CommentMutationResponse:
    """Remove the comment at *index*; out-of-range indexes change nothing."""
    resolved = await _resolve_post_id(request, post_id)
    threads = CommentThreadStore(request.app.state.store)
    removed = await threads.remove_at(resolved, index)
    thread = await threads.load(resolved)
    return CommentMutationResponse(
        changed=removed is not None, thread=_thread_response(resolved, thread)
    )
