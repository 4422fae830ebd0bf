"""Post endpoints: feed, detail, create, vote."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from rampa.core.errors import ValidationError
from rampa.posts.models import Coordinates, Post, new_post
from rampa.posts.repository import PostRepository
from rampa.posts.selector import ALL_TAGS, select_posts

router = APIRouter(prefix="/api", tags=["posts"])


class CoordinatesBody(BaseModel):
    latitude: float
    longitude: float


class PostResponse(BaseModel):
    id: str
    title: str
    description: str
    accessibility_tags: list[str]
    location_name: str | None = None
    street_name: str | None = None
    image_ref: str | int | None = None
    coordinates: CoordinatesBody | None = None
    created_at: datetime
    useful_percent: int
    not_useful_percent: int
    vote_count: int


class PostListResponse(BaseModel):
    posts: list[PostResponse]
    total: int
    tag: str


def post_response(post: Post) -> PostResponse:
    """Convert a Post record to the API schema."""
    coords = post.coordinates
    return PostResponse(
        id=post.id,
        title=post.title,
        description=post.description,
        accessibility_tags=list(post.accessibility_tags),
        location_name=post.location_name,
        street_name=post.street_name,
        image_ref=post.image_ref,
        coordinates=(
            CoordinatesBody(latitude=coords.latitude, longitude=coords.longitude)
            if coords is not None
            else None
        ),
        created_at=post.created_at,
        useful_percent=post.useful_percent,
        not_useful_percent=post.not_useful_percent,
        vote_count=len(post.votes),
    )


async def load_repository(request: Request) -> PostRepository:
    """Fresh repository over the app's store, loaded from storage."""
    config = request.app.state.config
    repo = PostRepository(
        request.app.state.store,
        key=config.storage.posts_key,
        seed=config.feed.seed_demo_posts,
    )
    await repo.load()
    return repo


# -- GET /api/posts ------------------------------------------------------------


@router.get("/posts", response_model=PostListResponse)
async def list_posts(request: Request, tag: str = ALL_TAGS) -> PostListResponse:
    """Posts with *tag* (or all), newest first."""
    repo = await load_repository(request)
    selected = select_posts(repo.posts, tag)
    return PostListResponse(
        posts=[post_response(p) for p in selected],
        total=len(selected),
        tag=tag,
    )


# -- GET /api/posts/{post_id} --------------------------------------------------


@router.get("/posts/{post_id}", response_model=PostResponse)
async def get_post(post_id: str, request: Request) -> PostResponse:
    """One post by id or unique prefix."""
    repo = await load_repository(request)
    return post_response(repo.resolve(post_id))


# -- POST /api/posts -----------------------------------------------------------


class CreatePostRequest(BaseModel):
    title: str
    description: str
    tags: list[str] = Field(default_factory=list)
    other_tag: str = ""
    location_name: str | None = None
    street_name: str | None = None
    image_ref: str | None = None
    coordinates: CoordinatesBody | None = None


@router.post("/posts", response_model=PostResponse, status_code=201)
async def create_post(body: CreatePostRequest, request: Request) -> PostResponse:
    """Publish a new accessibility report."""
    post = new_post(
        body.title,
        body.description,
        body.tags,
        other_tag=body.other_tag,
        location_name=body.location_name,
        street_name=body.street_name,
        image_ref=body.image_ref,
        coordinates=(
            Coordinates(
                latitude=body.coordinates.latitude,
                longitude=body.coordinates.longitude,
            )
            if body.coordinates is not None
            else None
        ),
    )
    repo = await load_repository(request)
    await repo.append(post)
    return post_response(post)


# -- POST /api/posts/{post_id}/votes -------------------------------------------


class VoteRequest(BaseModel):
    voter_id: str
    useful: bool


class VoteResponse(BaseModel):
    post: PostResponse
    changed: bool


@router.post("/posts/{post_id}/votes", response_model=VoteResponse)
async def vote_post(post_id: str, body: VoteRequest, request: Request) -> VoteResponse:
    """Vote a post useful or not useful; repeating a vote changes nothing."""
    if not body.voter_id.strip():
        raise ValidationError("voter_id is required")
    repo = await load_repository(request)
    post = repo.resolve(post_id)
    outcome = await repo.vote(post.id, body.voter_id, body.useful)
    return VoteResponse(post=post_response(outcome.post), changed=outcome.changed)
