"""Cleaning of user-supplied note text and tags."""

import html

import nh3

MAX_TAGS = 10
MAX_TAG_LENGTH = 30

# Formatting that survives in note bodies; everything else is stripped
CONTENT_TAGS = {"b", "i", "u", "strong", "em", "br", "p"}


def strip_markup(text: str) -> str:
    """Remove all HTML from plain-text fields such as titles and tags.

    The result is plain text, so entities nh3 produces are decoded again and
    ``Tom & Jerry`` is stored as typed.
    """
    return html.unescape(nh3.clean(text, tags=set(), attributes={}))


def sanitize_content(text: str) -> str:
    """Keep basic formatting tags in a note body and drop the rest.

    ``script`` and ``style`` elements are removed together with their text.
    Bare ampersands are left alone; stray ``<`` and ``>`` stay escaped.
    """
    return nh3.clean(text, tags=CONTENT_TAGS, attributes={}).replace("&amp;", "&")


def normalize_tags(tags: list[str]) -> list[str]:
    """Trim, lowercase, drop empty or over-long tags, de-duplicate, cap the count.

    First occurrence wins, so the stored order follows the input.
    """
    normalized: list[str] = []
    for tag in tags:
        cleaned = strip_markup(tag).strip().lower()
        if not cleaned or len(cleaned) > MAX_TAG_LENGTH or cleaned in normalized:
            continue
        normalized.append(cleaned)
        if len(normalized) == MAX_TAGS:
            break
    return normalized
