"""Mutation operations over the movie list.

These are the verbs shared by the intent router and by the fallback agent's
tool calls. Every operation normalizes its titles before touching the store
and reports its outcome as a short, stable result string:

- ``ADDED:<title>`` / ``ADDED_MANY:<n>``
- ``REMOVED:<title>``, ``SEEN:<title>``, ``DISLIKED:<title>``
- ``STATUS_CHANGED:<title>:<status>`` / ``STATUS_MANY:<n>-><status>``
- ``PRUNED:<n> in <status>``, ``RENAMED:<old>-><new> (<status>)``
- ``ERROR:EMPTY_TITLE`` / ``ERROR:BAD_STATUS``

``clear`` is the exception: it answers with a human sentence because the
router returns it to the user as-is.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Dict, List, Optional, Union

from cinematch.agents.status_resolver import resolve_status, status_or_default
from cinematch.models.status import LOOKUP_ORDER, SOFT_CLEAR_SUCCESSOR, Status
from cinematch.services.list_store import ListStore
from cinematch.utils.format import pluralize, quote_status
from cinematch.utils.text import (
    has_title_separator,
    is_blank_title,
    normalize_title,
    split_titles,
    title_key,
)


logger = logging.getLogger("cinematch.operations")

ERROR_EMPTY_TITLE = "ERROR:EMPTY_TITLE"
ERROR_BAD_STATUS = "ERROR:BAD_STATUS"
NEXT_EMPTY = "NEXT:EMPTY"

INVALID_STATUS_MESSAGE = (
    "Invalid status. Use “envie”, “deja_vu” or “pas_interesse”."
)

StatusLike = Union[Status, str, None]


def _wants_description(value: Union[bool, str, None]) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() == "true"


class ListOperations:
    """All list mutations and queries, bound to one store.

    Args:
        store: The list store to read and write.
        rng: Random source for ``pick_next``; injectable for tests.
    """

    def __init__(self, store: ListStore, rng: Optional[random.Random] = None) -> None:
        self.store = store
        self._rng = rng or random.Random()

    def _write(self, title: str, status: Status) -> None:
        self.store.upsert(title, status)
        logger.info("Stored %r as %s", title, status.value)

    def _write_many(self, titles: List[str], status: Status) -> None:
        self.store.upsert_many(titles, status)
        logger.info("Stored %d titles as %s", len(titles), status.value)

    def _mark(self, title: Optional[str], status: Status, prefix: str) -> str:
        cleaned = normalize_title(title)
        if not cleaned:
            return ERROR_EMPTY_TITLE
        self._write(cleaned, status)
        return f"{prefix}:{cleaned}"

    # ------------------------------------------------------------------
    # Single-title verbs
    # ------------------------------------------------------------------

    def add(self, title: Optional[str]) -> str:
        """Add one title, or several when ``title`` holds commas/newlines."""

        if has_title_separator(title):
            titles = split_titles(title)
            if not titles:
                return ERROR_EMPTY_TITLE
            self._write_many(titles, Status.ENVIE)
            return f"ADDED_MANY:{len(titles)}"

        return self._mark(title, Status.ENVIE, "ADDED")

    def remove(self, title: Optional[str]) -> str:
        """Take a title off the wishlist. The entry is kept as not interested."""

        return self._mark(title, Status.PAS_INTERESSE, "REMOVED")

    def mark_seen(self, title: Optional[str]) -> str:
        return self._mark(title, Status.DEJA_VU, "SEEN")

    def mark_disliked(self, title: Optional[str]) -> str:
        return self._mark(title, Status.PAS_INTERESSE, "DISLIKED")

    def set_status(self, title: Optional[str], status: StatusLike) -> str:
        cleaned = normalize_title(title)
        resolved = resolve_status(status)
        if not cleaned:
            return ERROR_EMPTY_TITLE
        if resolved is None:
            return ERROR_BAD_STATUS
        self._write(cleaned, resolved)
        return f"STATUS_CHANGED:{cleaned}:{resolved.value}"

    # ------------------------------------------------------------------
    # Bulk verbs
    # ------------------------------------------------------------------

    def add_many(self, titles: Optional[str]) -> str:
        """Add every non-blank title of a CSV/newline list."""

        items = split_titles(titles)
        self._write_many(items, Status.ENVIE)
        return f"ADDED_MANY:{len(items)}"

    def bulk_set_status(self, titles: Optional[str], status: StatusLike) -> str:
        resolved = resolve_status(status)
        if resolved is None:
            return ERROR_BAD_STATUS

        items = split_titles(titles)
        self._write_many(items, resolved)
        return f"STATUS_MANY:{len(items)}->{resolved.value}"

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def clear(self, status: StatusLike, mode: Optional[str] = "hard") -> str:
        """Empty a bucket.

        ``hard`` deletes every entry of the bucket. Any other mode is a soft
        clear: non-blank titles move to the bucket's successor status
        (wishlist -> not interested -> already seen -> not interested).
        """

        resolved = resolve_status(status)
        if resolved is None:
            return INVALID_STATUS_MESSAGE

        hard = mode is None or mode.strip().lower() == "hard"
        if hard:
            removed = self.store.remove_all_by_status(resolved)
            logger.info("Hard-cleared %d entries from %s", removed, resolved.value)
            if removed == 0:
                return f"Nothing to remove from {quote_status(resolved)}."
            return f"Removed {pluralize(removed, 'movie')} from {quote_status(resolved)}."

        target = SOFT_CLEAR_SUCCESSOR[resolved]
        moved = 0
        for title in self.store.by_status(resolved):
            if is_blank_title(title):
                continue
            with self.store.title_lock(title):
                if self.store.status_of(title) != resolved:
                    continue
                self.store.upsert(title, target)
            moved += 1

        logger.info("Soft-cleared %d entries from %s to %s", moved, resolved.value, target.value)
        if moved == 0:
            return f"Nothing to move from {quote_status(resolved)}."
        return (
            f"Moved {pluralize(moved, 'movie')} from {quote_status(resolved)} "
            f"to {quote_status(target)}."
        )

    def prune_blanks(self, status: StatusLike) -> str:
        """Move entries whose title is empty once normalized to not interested."""

        resolved = status_or_default(status)
        pruned = 0
        for title in self.store.by_status(resolved):
            if is_blank_title(title):
                self.store.upsert(title, Status.PAS_INTERESSE)
                pruned += 1
        return f"PRUNED:{pruned} in {resolved.value}"

    def _find_status(self, title: str) -> Optional[Status]:
        key = title_key(title)
        for status in LOOKUP_ORDER:
            for stored in self.store.by_status(status):
                if title_key(normalize_title(stored)) == key:
                    return status
        return None

    def rename(self, old_title: Optional[str], new_title: Optional[str]) -> str:
        """Copy a title's status to a new spelling and retire the old one.

        The old title is kept as not interested. Unknown old titles are
        treated as wishlist entries.
        """

        old_clean = normalize_title(old_title)
        new_clean = normalize_title(new_title)
        if not old_clean or not new_clean:
            return ERROR_EMPTY_TITLE

        # Lock both titles in key order so crossed renames cannot deadlock.
        first, second = sorted((old_clean, new_clean), key=title_key)
        with self.store.title_lock(first), self.store.title_lock(second):
            status = self._find_status(old_clean) or Status.ENVIE
            self._write(new_clean, status)
            if title_key(old_clean) != title_key(new_clean):
                self._write(old_clean, Status.PAS_INTERESSE)

        return f"RENAMED:{old_clean}->{new_clean} ({status.value})"

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_by_status(self, status: StatusLike) -> List[str]:
        """Distinct non-blank titles of a bucket, most recent first."""

        resolved = status_or_default(status)
        seen_keys = set()
        titles: List[str] = []
        for stored in self.store.by_status(resolved):
            title = normalize_title(stored)
            key = title_key(title)
            if not title or key in seen_keys:
                continue
            seen_keys.add(key)
            titles.append(title)
        return titles

    def sorted_list(self, status: StatusLike, order: Optional[str] = "asc") -> List[str]:
        """Non-blank titles of a bucket, case-insensitive, ``asc`` or ``desc``."""

        titles = sorted(self.list_by_status(status), key=str.casefold)
        if (order or "").strip().lower() == "desc":
            titles.reverse()
        return titles

    def counts(self) -> Dict[Status, int]:
        return {status: len(self.store.by_status(status)) for status in Status}

    def stats(self) -> str:
        counts = self.counts()
        total = sum(counts.values())
        return (
            f"STATS: total={total} | envie={counts[Status.ENVIE]} | "
            f"pas_interesse={counts[Status.PAS_INTERESSE]} | "
            f"deja_vu={counts[Status.DEJA_VU]}"
        )

    def pick_next(
        self,
        strategy: Optional[str] = "random",
        with_description: Union[bool, str, None] = False,
        describe: Optional[Callable[[str], str]] = None,
    ) -> str:
        """Suggest the next wishlist title to watch.

        ``strategy`` is ``first`` (most recently added) or ``random``.
        """

        titles = self.list_by_status(Status.ENVIE)
        if not titles:
            return NEXT_EMPTY

        if (strategy or "").strip().lower() == "first":
            pick = titles[0]
        else:
            pick = self._rng.choice(titles)

        if _wants_description(with_description) and describe is not None:
            return f"NEXT:{pick} | {describe(pick)}"
        return f"NEXT:{pick}"
