"""Text normalization helpers for titles and status phrases.

Titles typed by users arrive wrapped in quotes, padded with spaces and often
followed by the list they should land in ("... to my wishlist"). Everything
that touches the store goes through ``normalize_title`` first so the same
movie always maps to the same key.
"""

from __future__ import annotations

import re
import unicodedata
from typing import List, Optional


QUOTE_GLYPHS = "\"“”«»"

_QUOTES_RE = re.compile(f"[{QUOTE_GLYPHS}]")
_WHITESPACE_RE = re.compile(r"\s+")
_SEPARATORS_RE = re.compile(r"[,\r\n]")
_TRAILING_PUNCT_RE = re.compile(r"[\s.!?;…]+$")

# "... to my wishlist", "... dans ma liste d'envie", "... in the list"
_LIST_CLAUSE_RE = re.compile(
    r"\s+(?:to|into|in|on|dans|à|a|sur)\s+(?:(?:my|the|ma|la|mon)\s+)?"
    r"(?:wish\s*list|watch\s*list|envie\s+list|liste\s+d['’]\s*envie|liste|list)"
    r"[\s.!?;…]*$",
    re.IGNORECASE,
)

# "... as seen", "... en pas_interesse", "... comme déjà vu"
_STATUS_CLAUSE_RE = re.compile(
    r"\s+(?:as|en|comme)\s+"
    r"(?:seen|watched|d[ée]j[àa][\s_-]*vu|pas[\s_-]*int[ée]ress[ée]e?s?"
    r"|not[\s_-]*interested|envie|wish\s*list)"
    r"[\s.!?;…]*$",
    re.IGNORECASE,
)


def strip_quotes(raw: Optional[str]) -> str:
    """Remove every quote glyph and trim the result."""

    if raw is None:
        return ""
    return _QUOTES_RE.sub("", raw).strip()


def collapse_whitespace(raw: str) -> str:
    return _WHITESPACE_RE.sub(" ", raw).strip()


def normalize_title(raw: Optional[str]) -> str:
    """Return the canonical display form of a title fragment.

    Strips quote glyphs, collapses whitespace, removes a trailing clause
    naming the target list or the target status and drops trailing sentence
    punctuation. Returns ``""`` when nothing usable is left.
    """

    if raw is None:
        return ""

    text = collapse_whitespace(strip_quotes(raw))

    # Clauses can stack ("Heat as seen in my list."), strip until stable.
    while text:
        previous = text
        text = _TRAILING_PUNCT_RE.sub("", text)
        text = _LIST_CLAUSE_RE.sub("", text)
        text = _STATUS_CLAUSE_RE.sub("", text)
        text = text.strip()
        if text == previous:
            break

    return text


def title_key(title: Optional[str]) -> str:
    """Comparison key used by the store.

    Quotes are stripped, whitespace runs collapse to one space and the
    result is case-folded. The key is not trimmed so that blank entries of
    different shapes ("" and "  ") stay distinct.
    """

    if title is None:
        return ""
    return _WHITESPACE_RE.sub(" ", _QUOTES_RE.sub("", title)).casefold()


def is_blank_title(title: Optional[str]) -> bool:
    return normalize_title(title) == ""


def has_title_separator(raw: Optional[str]) -> bool:
    """True when ``raw`` holds several titles (comma or newline separated)."""

    if not raw:
        return False
    return "," in raw or "\n" in raw


def split_titles(raw: Optional[str]) -> List[str]:
    """Split a CSV/newline list into normalized, non-blank titles.

    Duplicates are kept; the store's upsert collapses them.
    """

    if not raw:
        return []
    titles: List[str] = []
    for part in _SEPARATORS_RE.split(raw):
        title = normalize_title(part)
        if title:
            titles.append(title)
    return titles


def normalize_status_phrase(raw: Optional[str]) -> str:
    """Fold a status phrase for matching.

    Lowercases, turns curly apostrophes into straight ones, removes
    diacritics (NFD + mark stripping) and replaces hyphens, underscores and
    whitespace runs with a single space. "déjà-vu", "deja vu" and "DÉJÀ_VU"
    all become "deja vu".
    """

    if raw is None:
        return ""

    text = raw.lower().replace("’", "'")
    text = unicodedata.normalize("NFD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = re.sub(r"[\s_\-]+", " ", text)
    return text.strip()


def fold_text(raw: Optional[str]) -> str:
    """Lowercase and strip diacritics, keeping separators intact."""

    if raw is None:
        return ""
    text = unicodedata.normalize("NFD", raw.lower().replace("’", "'"))
    return "".join(ch for ch in text if not unicodedata.combining(ch))
