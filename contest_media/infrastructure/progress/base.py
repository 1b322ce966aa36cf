"""Abstract base class for ephemeral progress stores."""

from abc import ABC, abstractmethod
from typing import Generic, Protocol, TypeVar


class ProgressRecord(Protocol):
    """Anything with a notion of having finished."""

    @property
    def is_terminal(self) -> bool: ...


RecordT = TypeVar("RecordT", bound=ProgressRecord)


class ProgressStoreBase(ABC, Generic[RecordT]):
    """Keyed store of progress records with post-completion retention.

    A record that reaches a terminal state stays readable for a grace
    period so pollers can observe the outcome, then becomes invisible and
    is removed by `purge_expired`.
    """

    @abstractmethod
    def get(self, key: str) -> RecordT | None:
        """Return the live record for `key`, or None if absent or expired."""

    @abstractmethod
    def set(self, key: str, record: RecordT) -> None:
        """Create or replace the record for `key`.

        Terminal records are stamped with an expiry; non-terminal ones are not.
        """

    @abstractmethod
    def claim(self, key: str, record: RecordT) -> bool:
        """Store `record` unless a live non-terminal record already exists.

        The check and the write are atomic.

        Returns:
            True if the record was stored.
        """

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove the record for `key`.

        Returns:
            True if a record was removed.
        """

    @abstractmethod
    def purge_expired(self) -> int:
        """Remove every record whose retention has elapsed.

        Returns:
            Number of records removed.
        """
