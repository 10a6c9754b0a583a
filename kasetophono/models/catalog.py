"""Pydantic v2 models for the cassette catalog.

All models are frozen (immutable).  A published catalog is never mutated;
refreshes build new ``Cassette`` instances and swap the whole map.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class Category(BaseModel):
    """A top-level navigation entry of the site, pointing at a blog page."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Normalized display name, e.g. 'Ξενα'.")
    url: str = Field(description="URL of the category page (identity).")


class LabelKind(BaseModel):
    """Subcategory that selects every cassette carrying a label."""

    model_config = ConfigDict(frozen=True)

    type: Literal["label"] = "label"
    label: str = Field(description="Decoded label term, matched exactly.")


class CassetteKind(BaseModel):
    """Subcategory that points at one specific cassette post."""

    model_config = ConfigDict(frozen=True)

    type: Literal["cassette"] = "cassette"
    url: str = Field(description="Post URL, matched by exact string equality.")


SubcategoryKind = Annotated[Union[LabelKind, CassetteKind], Field(discriminator="type")]


class Subcategory(BaseModel):
    """A named grouping listed on a category page."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Anchor text, trimmed.")
    kind: SubcategoryKind = Field(description="How cassettes are matched.")


class Song(BaseModel):
    """One track of a cassette's playlist."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Video id on the video host.")
    title: str | None = Field(default=None, description="Video title.")
    duration: int | None = Field(default=None, description="Length in seconds, if known.")


class Cassette(BaseModel):
    """A playable playlist post discovered in the feed.

    ``uuid``, ``safe_name`` and ``path`` are derived from ``url`` and
    ``name`` only, so the same post yields the same record on every crawl.
    """

    model_config = ConfigDict(frozen=True)

    uuid: UUID = Field(description="uuid5(NAMESPACE_URL, url).")
    name: str = Field(description="Post title, trimmed.")
    safe_name: str = Field(description="Name with '/' replaced by '-'.")
    path: str = Field(description="cassettes/<year>/<month>/<safe_name>.")
    url: str = Field(description="Canonical post URL.")
    yt_url: str = Field(description="Embedded playlist URL handed to the player.")
    image_url: str | None = Field(default=None, description="First image of the post.")
    labels: list[str] = Field(default_factory=list, description="Post labels, in feed order.")
    subcategories: list[Subcategory] = Field(
        default_factory=list, description="Subcategories matched by classification."
    )
    created_at: str = Field(description="Feed 'published' timestamp, verbatim.")
