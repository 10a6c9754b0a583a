"""Front page parsing: the top-level category list.

The navigation menu looks like::

    <ul id='nav2'>
      <li><a href='https://www.kasetophono.com/p/blog-page_28.html'>Ξενα</a></li>
      <li><a href='http://www.kasetophono.com/search/label/Playlist'>_Νέες</a></li>
      ...

A leading underscore nests an item under the previous menu entry.
Categories are blog pages (``/p/``); label searches are not.  A few nested
items point at a blog page anyway (e.g. "4 Εποχές"); those are hoisted to
categories unless a category with the same URL was already seen.
"""

from __future__ import annotations

from bs4 import BeautifulSoup

from kasetophono.models.catalog import Category
from kasetophono.utils.errors import ScrapeError
from kasetophono.utils.text_normalizer import normalize_category_name

_NAV_SELECTOR = "ul#nav2"
_ANCHOR_SELECTOR = "li a"
_BLOG_PAGE_MARKER = "/p/"


def extract_categories(html: str) -> list[Category]:
    """Return the unique categories of the front page in menu order.

    Raises:
        ScrapeError: the navigation list is missing, or a menu anchor has
            no ``href`` or no text.
    """
    soup = BeautifulSoup(html, "html.parser")
    nav = soup.select_one(_NAV_SELECTOR)
    if nav is None:
        raise ScrapeError(message="Front page has no navigation menu (ul#nav2)")

    categories: list[Category] = []
    seen_urls: set[str] = set()
    for anchor in nav.select(_ANCHOR_SELECTOR):
        url = anchor.get("href")
        if not url:
            raise ScrapeError(message=f"Navigation anchor without href: {anchor}")

        if _BLOG_PAGE_MARKER not in url or url in seen_urls:
            continue
        seen_urls.add(url)

        raw_name = next(iter(anchor.strings), None)
        if raw_name is None:
            raise ScrapeError(message=f"Navigation anchor without text: {url}")

        categories.append(Category(name=normalize_category_name(raw_name), url=url))

    return categories
