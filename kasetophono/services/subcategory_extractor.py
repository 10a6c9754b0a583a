"""Category page parsing: the subcategory headings of one category."""

from __future__ import annotations

from bs4 import BeautifulSoup

from kasetophono.models.catalog import CassetteKind, LabelKind, Subcategory
from kasetophono.utils.errors import ScrapeError
from kasetophono.utils.text_normalizer import decode_label

_SUBCATEGORY_SELECTOR = "div.post-body h1.favourite-posts-title a"
_LABEL_MARKER = "/label/"


def extract_subcategories(html: str) -> list[Subcategory]:
    """Return every subcategory heading link of a category page, in order.

    A link into a label search (``.../search/label/Balkan``) becomes a
    :class:`LabelKind`; any other link is taken verbatim as a single
    cassette post.  Duplicates are kept.

    Raises:
        ScrapeError: a heading link has no ``href`` or its label is not
            valid percent-encoded UTF-8.
    """
    soup = BeautifulSoup(html, "html.parser")

    subcategories: list[Subcategory] = []
    for anchor in soup.select(_SUBCATEGORY_SELECTOR):
        href = anchor.get("href")
        if not href:
            raise ScrapeError(message=f"Subcategory link without href: {anchor}")

        name = next(iter(anchor.strings), "").strip()

        if _LABEL_MARKER in href:
            try:
                kind: LabelKind | CassetteKind = LabelKind(label=decode_label(href))
            except UnicodeDecodeError as exc:
                raise ScrapeError(message=f"Undecodable label in {href}") from exc
        else:
            kind = CassetteKind(url=href)

        subcategories.append(Subcategory(name=name, kind=kind))

    return subcategories
