"""Accumulated character records for the active load mode."""

from __future__ import annotations

from collections.abc import Iterable

from character_browser.models import Character


class RecordStore:
    """Holds the characters loaded since the last reset.

    Mutations build a new tuple and swap it in with a single assignment, so a
    reader never observes a half-applied ``replace`` or ``append``. Only the
    fetch coordinator calls the mutators.
    """

    def __init__(self) -> None:
        self._records: tuple[Character, ...] = ()
        self._revision = 0

    @property
    def records(self) -> tuple[Character, ...]:
        return self._records

    @property
    def revision(self) -> int:
        """Counter bumped on every mutation (used for view caching)."""
        return self._revision

    def __len__(self) -> int:
        return len(self._records)

    def replace(self, records: Iterable[Character]) -> None:
        """Replace the contents with one page (pagination policy)."""
        self._records = tuple(records)
        self._revision += 1

    def append(self, records: Iterable[Character]) -> None:
        """Append one page in arrival order (infinite-scroll policy).

        Duplicate ids across pages are kept.
        """
        self._records = self._records + tuple(records)
        self._revision += 1

    def clear(self) -> None:
        self._records = ()
        self._revision += 1


__all__ = ["RecordStore"]
