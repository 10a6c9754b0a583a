"""Domain models: the cassette catalog and the upstream feed schema."""

from kasetophono.models.blogger import FeedDocument, FeedEntry
from kasetophono.models.catalog import (
    Cassette,
    CassetteKind,
    Category,
    LabelKind,
    Song,
    Subcategory,
)

__all__ = [
    "Cassette",
    "CassetteKind",
    "Category",
    "FeedDocument",
    "FeedEntry",
    "LabelKind",
    "Song",
    "Subcategory",
]
