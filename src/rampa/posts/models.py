"""Post and comment records.

Records are decoded from whatever shape earlier versions of the app
wrote: the accessibility field was once a bare string, votes were once a
list, and the original keys (``accessibility``, ``ratings``,
``positive``, ``negative``, ``date``, ``image``, ``location``) are still
accepted. Records are always written back with the canonical camelCase
keys.
"""

from __future__ import annotations

import math
import uuid
from datetime import UTC, datetime
from typing import Any

import pydantic
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from rampa.core.errors import ValidationError

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

OTHER_TAG = "Outro"
ACCESSIBILITY_OPTIONS: tuple[str, ...] = (
    "Rampa",
    "Banheiro Acessível",
    "Elevador",
    OTHER_TAG,
)


def _uuid() -> str:
    """Generate a UUID4 string for post identifiers."""
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    """Current UTC time for timestamps."""
    return datetime.now(UTC)


def _as_utc(value: Any) -> Any:
    """Attach UTC to naive datetimes; leave everything else to pydantic."""
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class Coordinates(BaseModel):
    """A point on the map, stored verbatim."""

    latitude: float
    longitude: float


class Post(BaseModel):
    """An accessibility report."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: str
    accessibility_tags: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("accessibilityTags", "accessibility"),
        serialization_alias="accessibilityTags",
    )
    location_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("locationName", "location_name"),
        serialization_alias="locationName",
    )
    street_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("streetName", "street_name"),
        serialization_alias="streetName",
    )
    image_ref: str | int | None = Field(
        default=None,
        validation_alias=AliasChoices("imageRef", "image"),
        serialization_alias="imageRef",
    )
    coordinates: Coordinates | None = Field(
        default=None,
        validation_alias=AliasChoices("coordinates", "location"),
    )
    created_at: datetime = Field(
        default=EPOCH,
        validation_alias=AliasChoices("createdAt", "date"),
        serialization_alias="createdAt",
    )
    votes: dict[str, int] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("votes", "ratings"),
    )
    useful_percent: int = Field(
        default=0,
        validation_alias=AliasChoices("usefulPercent", "positive"),
        serialization_alias="usefulPercent",
    )
    not_useful_percent: int = Field(
        default=0,
        validation_alias=AliasChoices("notUsefulPercent", "negative"),
        serialization_alias="notUsefulPercent",
    )

    @field_validator("accessibility_tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value else []
        if isinstance(value, list | tuple | set):
            return [str(tag) for tag in value if tag]
        return []

    @field_validator("votes", mode="before")
    @classmethod
    def _normalize_votes(cls, value: Any) -> dict[str, int]:
        # Pre-map versions stored ratings as a list; those carry no voter ids.
        if not isinstance(value, dict):
            return {}
        return {str(voter): 1 if v == 1 else 0 for voter, v in value.items()}

    @field_validator("useful_percent", "not_useful_percent", mode="before")
    @classmethod
    def _normalize_percent(cls, value: Any) -> int:
        # Derived from votes on load; a garbage value must not drop the record.
        if isinstance(value, bool):
            return 0
        if isinstance(value, str):
            try:
                value = float(value)
            except ValueError:
                return 0
        if isinstance(value, int):
            return value
        if isinstance(value, float) and math.isfinite(value):
            return round(value)
        return 0

    @field_validator("created_at", mode="wrap")
    @classmethod
    def _normalize_created_at(
        cls, value: Any, handler: ValidatorFunctionWrapHandler
    ) -> datetime:
        if value is None or value == "":
            return EPOCH
        try:
            return handler(value)
        except pydantic.ValidationError:
            return EPOCH

    @field_validator("coordinates", mode="wrap")
    @classmethod
    def _normalize_coordinates(
        cls, value: Any, handler: ValidatorFunctionWrapHandler
    ) -> Coordinates | None:
        try:
            return handler(value)
        except pydantic.ValidationError:
            return None

    @field_validator("image_ref", mode="before")
    @classmethod
    def _opaque_image_ref(cls, value: Any) -> Any:
        # URIs and bundled-asset handles are kept verbatim.
        if isinstance(value, bool) or not isinstance(value, str | int):
            return None
        return value

    @field_validator("created_at", mode="after")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @field_validator("location_name", "street_name", "image_ref", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_record(self) -> dict[str, Any]:
        """JSON-ready dict with the canonical persisted keys."""
        return self.model_dump(mode="json", by_alias=True)


class Comment(BaseModel):
    """One entry in a post's comment thread."""

    model_config = ConfigDict(populate_by_name=True)

    text: str
    author: str | None = None
    created_at: datetime = Field(
        default_factory=_utcnow,
        validation_alias=AliasChoices("createdAt", "date"),
        serialization_alias="createdAt",
    )

    @field_validator("created_at", mode="after")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)

    def to_record(self) -> dict[str, Any]:
        """JSON-ready dict with the canonical persisted keys."""
        return self.model_dump(mode="json", by_alias=True)


# ── Creation ─────────────────────────────────────────────────────


def resolve_tags(selected: list[str], other: str = "") -> list[str]:
    """Turn the chosen options into the stored tag list.

    ``"Outro"`` stands for the free-text entry in *other*; it is replaced
    by that text, or dropped when the text is blank. Duplicates keep
    their first position.
    """
    tags: list[str] = []
    for option in selected:
        tag = other.strip() if option == OTHER_TAG else option.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def new_post(
    title: str,
    description: str,
    tags: list[str],
    *,
    other_tag: str = "",
    location_name: str | None = None,
    street_name: str | None = None,
    image_ref: str | None = None,
    coordinates: Coordinates | tuple[float, float] | None = None,
    created_at: datetime | None = None,
) -> Post:
    """Build a new post from user input.

    Raises ValidationError when the title or description is blank or no
    accessibility tag remains after resolving ``"Outro"``.
    """
    missing: list[str] = []
    if not title.strip():
        missing.append("title")
    if not description.strip():
        missing.append("description")
    resolved = resolve_tags(tags, other_tag)
    if not resolved:
        missing.append("accessibility")
    if missing:
        msg = f"Missing required fields: {', '.join(missing)}"
        raise ValidationError(msg)

    if isinstance(coordinates, tuple):
        coordinates = Coordinates(latitude=coordinates[0], longitude=coordinates[1])

    return Post(
        id=_uuid(),
        title=title.strip(),
        description=description.strip(),
        accessibility_tags=resolved,
        location_name=location_name,
        street_name=street_name,
        image_ref=image_ref,
        coordinates=coordinates,
        created_at=created_at or _utcnow(),
    )
