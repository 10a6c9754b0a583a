"""Subcategory assignment for extracted cassettes.

Runs once per crawl, after both the subcategory crawl and the feed crawl
have finished, because every cassette has to be checked against the
complete subcategory list.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from kasetophono.models.catalog import Cassette, CassetteKind, LabelKind, Subcategory


def matches(cassette: Cassette, subcategory: Subcategory) -> bool:
    """Exact match: label membership, or string equality of post URLs."""
    kind = subcategory.kind
    if isinstance(kind, LabelKind):
        return kind.label in cassette.labels
    if isinstance(kind, CassetteKind):
        return kind.url == cassette.url
    return False


def classify(cassette: Cassette, subcategories: Sequence[Subcategory]) -> list[Subcategory]:
    """Return the subcategories matching *cassette*, in input order."""
    return [sc for sc in subcategories if matches(cassette, sc)]


def apply_subcategories(
    cassettes: Iterable[Cassette],
    subcategories: Sequence[Subcategory],
) -> list[Cassette]:
    """Return copies of *cassettes* with ``subcategories`` filled in."""
    return [
        c.model_copy(update={"subcategories": classify(c, subcategories)})
        for c in cassettes
    ]
