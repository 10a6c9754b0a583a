"""Text normalization helpers for names and labels scraped from the site.

The blog marks drop-down children in its navigation menu with a leading
underscore and writes most menu entries in lower case Greek, so category
names are cleaned up before display.  Label search links carry the label
percent-encoded in the last path component.
"""

from urllib.parse import unquote

_MEDIAL_SIGMA = "σ"
_FINAL_SIGMA = "ς"


def normalize_category_name(raw: str) -> str:
    """Normalize a navigation menu entry into a category name.

    Strips whitespace and leading underscores, upper-cases the first
    character and lower-cases the rest.  A trailing medial sigma is
    rewritten to the word-final form, since ``str.lower`` cannot know the
    position of the letter in a word.

    Examples:
        "_ξενα" -> "Ξενα"
        "ΜΕΡΕΣ" -> "Μερες"
    """
    text = raw.strip().lstrip("_").strip()
    if not text:
        return text

    normalized = text[0].upper() + text[1:].lower()
    if normalized.endswith(_MEDIAL_SIGMA):
        normalized = normalized[:-1] + _FINAL_SIGMA
    return normalized


def decode_label(href: str) -> str:
    """Return the percent-decoded last path component of a label search URL.

    Raises:
        UnicodeDecodeError: when the escaped bytes are not valid UTF-8.
    """
    component = href.rstrip("/").rsplit("/", 1)[-1]
    # Query strings such as "?max-results=20" are not part of the label.
    component = component.split("?", 1)[0]
    return unquote(component, encoding="utf-8", errors="strict")
