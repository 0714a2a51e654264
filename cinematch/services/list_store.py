"""Movie list store for CineMatch.

Keeps one ``TitleEntry`` per normalized title and persists the whole list to
a JSON file. The file is an array of ``{"title", "status", "updatedAt"}``
objects; a missing or unreadable file loads as an empty list.

Writers touching the same title are serialized through a per-title lock;
writers touching different titles only share the short lock that guards the
in-memory map and the file write.
"""

from __future__ import annotations

import json
import logging
from contextlib import ExitStack, contextmanager
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock, RLock
from typing import Dict, Iterable, Iterator, List, Optional, Protocol, Sequence, Union

from pydantic import ValidationError

from cinematch.models.entry import TitleEntry
from cinematch.models.status import Status
from cinematch.utils.text import title_key


logger = logging.getLogger("cinematch.store")


class ListStore(Protocol):
    """Read/write contract the mutation operations rely on."""

    def upsert(self, title: str, status: Status) -> None: ...

    def upsert_many(self, titles: Sequence[str], status: Status) -> None: ...

    def by_status(self, status: Status) -> List[str]: ...

    def remove_all_by_status(self, status: Status) -> int: ...

    def status_of(self, title: str) -> Optional[Status]: ...

    def entries(self) -> List[TitleEntry]: ...

    def title_lock(self, title: str): ...


class _LockSlot:
    """A per-title lock plus the number of threads holding or awaiting it."""

    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = RLock()
        self.users = 0


class JsonListStore:
    """JSON-file backed list store.

    Args:
        path: Location of the storage file. ``None`` keeps the list in memory
            only, which is what the tests use.
    """

    def __init__(self, path: Union[str, Path, None] = None) -> None:
        self._path = Path(path) if path is not None else None
        self._entries: Dict[str, TitleEntry] = {}
        self._data_lock = Lock()
        self._registry_lock = Lock()
        self._title_locks: Dict[str, _LockSlot] = {}
        self._load()

    @property
    def path(self) -> Optional[Path]:
        return self._path

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> None:
        if self._path is None or not self._path.exists():
            return

        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.error("Failed to read list storage %s: %r", self._path, exc)
            return

        if not raw.strip():
            return

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("Failed to parse list storage %s: %r", self._path, exc)
            return

        if not isinstance(data, list):
            logger.error("List storage contains invalid data type: %s", type(data))
            return

        for item in data:
            if not isinstance(item, dict):
                continue
            try:
                entry = TitleEntry(
                    title=str(item.get("title") or ""),
                    status=str(item.get("status") or "").strip().lower(),
                    updated_at=item.get("updatedAt") or datetime.now(tz=timezone.utc),
                )
            except ValidationError:
                logger.warning("Skipping invalid list entry: %r", item)
                continue
            if entry.updated_at.tzinfo is None:
                entry.updated_at = entry.updated_at.replace(tzinfo=timezone.utc)
            key = title_key(entry.title)
            current = self._entries.get(key)
            # Older files may hold several rows per title: keep the newest.
            if current is None or entry.updated_at >= current.updated_at:
                self._entries[key] = entry

        logger.info("Loaded %d list entries from %s", len(self._entries), self._path)

    def _save_locked(self) -> None:
        """Write the list to disk. Caller holds ``_data_lock``."""

        if self._path is None:
            return

        payload = [
            {
                "title": entry.title,
                "status": entry.status.value,
                "updatedAt": entry.updated_at.isoformat(),
            }
            for entry in self._entries.values()
        ]
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(payload, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as exc:
            logger.error("Failed to save list storage %s: %r", self._path, exc)

    # ------------------------------------------------------------------
    # Locking
    # ------------------------------------------------------------------

    @contextmanager
    def title_lock(self, title: str) -> Iterator[None]:
        """Hold the writer lock for one normalized title.

        Re-entrant, so an operation holding it may call ``upsert`` on the
        same title. The lock is dropped from the registry once no thread
        holds or waits for it.
        """

        key = title_key(title)
        with self._registry_lock:
            slot = self._title_locks.get(key)
            if slot is None:
                slot = self._title_locks[key] = _LockSlot()
            slot.users += 1
        try:
            with slot.lock:
                yield
        finally:
            with self._registry_lock:
                slot.users -= 1
                if slot.users == 0:
                    del self._title_locks[key]

    @contextmanager
    def _title_locks_for(self, titles: Iterable[str]) -> Iterator[None]:
        """Hold the writer locks of several titles, taken in key order."""

        ordered = sorted({title_key(title): title for title in titles}.items())
        with ExitStack() as stack:
            for _key, title in ordered:
                stack.enter_context(self.title_lock(title))
            yield

    @property
    def active_title_locks(self) -> int:
        """Number of per-title locks currently held or awaited."""

        with self._registry_lock:
            return len(self._title_locks)

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    def upsert(self, title: str, status: Status) -> None:
        """Create or overwrite the entry for ``title``.

        The display title, status and timestamp are all replaced.
        """

        self.upsert_many([title], status)

    def upsert_many(self, titles: Sequence[str], status: Status) -> None:
        """Upsert several titles with one status and a single file write."""

        status = Status(status)
        if not titles:
            return
        with self._title_locks_for(titles):
            with self._data_lock:
                for title in titles:
                    self._entries[title_key(title)] = TitleEntry(title=title, status=status)
                self._save_locked()

    def by_status(self, status: Status) -> List[str]:
        """Titles in one bucket, most recently updated first."""

        status = Status(status)
        with self._data_lock:
            bucket = [entry for entry in self._entries.values() if entry.status == status]
        bucket.sort(key=lambda entry: entry.updated_at, reverse=True)
        return [entry.title for entry in bucket]

    def remove_all_by_status(self, status: Status) -> int:
        """Physically delete a bucket and return how many entries it removed.

        Takes the writer lock of every doomed title first, so a concurrent
        read-modify-write on one of them either completes before the delete
        or sees the entry gone.
        """

        status = Status(status)
        with self._data_lock:
            doomed = [entry.title for entry in self._entries.values() if entry.status == status]

        removed = 0
        with self._title_locks_for(doomed):
            with self._data_lock:
                for title in doomed:
                    key = title_key(title)
                    entry = self._entries.get(key)
                    # Re-checked under the lock: the entry may have moved since.
                    if entry is not None and entry.status == status:
                        del self._entries[key]
                        removed += 1
                if removed:
                    self._save_locked()
        return removed

    def status_of(self, title: str) -> Optional[Status]:
        with self._data_lock:
            entry = self._entries.get(title_key(title))
        return entry.status if entry is not None else None

    def entries(self) -> List[TitleEntry]:
        """Snapshot of every entry, oldest write first."""

        with self._data_lock:
            snapshot = list(self._entries.values())
        snapshot.sort(key=lambda entry: entry.updated_at)
        return snapshot

    def __len__(self) -> int:
        with self._data_lock:
            return len(self._entries)
