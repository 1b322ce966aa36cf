"""In-process progress store."""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic

from contest_media.commons.telemetry import get_logger
from contest_media.infrastructure.progress.base import ProgressStoreBase, RecordT

logger = get_logger(__name__)


@dataclass
class _Entry(Generic[RecordT]):
    record: RecordT
    expires_at: float | None


class InMemoryProgressStore(ProgressStoreBase[RecordT]):
    """Dictionary-backed progress store.

    Guarded by a `threading.Lock` because storage clients report transfer
    progress from executor threads.
    """

    def __init__(
        self,
        retention_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
        name: str = "progress",
    ) -> None:
        """Initialize the store.

        Args:
            retention_seconds: How long terminal records stay readable.
            clock: Monotonic time source in seconds.
            name: Label used in log messages.
        """
        self._retention = retention_seconds
        self._clock = clock
        self._name = name
        self._entries: dict[str, _Entry[RecordT]] = {}
        self._lock = threading.Lock()

    def _live(self, key: str) -> _Entry[RecordT] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and entry.expires_at <= self._clock():
            return None
        return entry

    def _entry_for(self, record: RecordT) -> _Entry[RecordT]:
        expires_at = self._clock() + self._retention if record.is_terminal else None
        return _Entry(record=record, expires_at=expires_at)

    def get(self, key: str) -> RecordT | None:
        with self._lock:
            entry = self._live(key)
            return entry.record if entry else None

    def set(self, key: str, record: RecordT) -> None:
        with self._lock:
            self._entries[key] = self._entry_for(record)

    def claim(self, key: str, record: RecordT) -> bool:
        with self._lock:
            entry = self._live(key)
            if entry is not None and not entry.record.is_terminal:
                return False
            self._entries[key] = self._entry_for(record)
            return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def purge_expired(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [
                key
                for key, entry in self._entries.items()
                if entry.expires_at is not None and entry.expires_at <= now
            ]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.debug(
                f"Purged {len(expired)} expired {self._name} records",
                extra={"store": self._name, "purged": len(expired)},
            )
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
