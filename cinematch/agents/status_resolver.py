"""Status resolver for free-text status phrases.

Maps French/English phrases ("déjà vu", "wish list", "pas intéressés",
"not interested", ...) to one of the three canonical statuses. Resolution is
deterministic: three pattern groups evaluated in a fixed order, first match
wins.
"""

from __future__ import annotations

import re
from typing import Optional, Union

from cinematch.models.status import Status
from cinematch.utils.text import normalize_status_phrase


_RULES = (
    (re.compile(r"envie|wish\s*list"), Status.ENVIE),
    (re.compile(r"deja\s*vu|seen"), Status.DEJA_VU),
    (
        re.compile(r"pas\s*interess(?:e|es)?|pas\s*interet|dislike|not\s*interested"),
        Status.PAS_INTERESSE,
    ),
)


def resolve_status(free_text: Union[Status, str, None]) -> Optional[Status]:
    """Resolve a status phrase, or return ``None`` when nothing matches.

    Never defaults: callers that need a status must report the failure to
    the user themselves.

    Examples:
        >>> resolve_status("DÉJÀ_VU")
        <Status.DEJA_VU: 'deja_vu'>
        >>> resolve_status("my wish list")
        <Status.ENVIE: 'envie'>
        >>> resolve_status("tomorrow") is None
        True
    """

    if isinstance(free_text, Status):
        return free_text

    text = normalize_status_phrase(free_text)
    if not text:
        return None

    for pattern, status in _RULES:
        if pattern.search(text):
            return status
    return None


def status_or_default(value: Union[Status, str, None]) -> Status:
    """Resolve ``value`` and fall back to ``Status.ENVIE`` when unresolved.

    Only listing and maintenance call sites use this variant
    (``list_by_status``, ``sorted_list``, ``prune_blanks``).
    """

    return resolve_status(value) or Status.ENVIE
