"""Ephemeral progress tracking."""

from contest_media.infrastructure.progress.base import ProgressRecord, ProgressStoreBase
from contest_media.infrastructure.progress.memory import InMemoryProgressStore
from contest_media.infrastructure.progress.sweeper import ProgressSweeper

__all__ = [
    "ProgressRecord",
    "ProgressStoreBase",
    "InMemoryProgressStore",
    "ProgressSweeper",
]
