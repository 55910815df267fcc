"""Read-only query index over collected Entries."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

from .models import Entry


class QueryIndex:
    """Ordered, immutable sequence of Entries with filtering helpers.

    Every filter preserves index order. An empty filter value matches
    nothing rather than everything.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[Entry] = ()):
        self._entries: tuple[Entry, ...] = tuple(entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, position: int) -> Entry:
        return self._entries[position]

    def __repr__(self) -> str:
        return f"QueryIndex({len(self._entries)} entries)"

    def all(self) -> tuple[Entry, ...]:
        return self._entries

    def with_name(self, name: str) -> list[Entry]:
        """Entries with at least one annotation called ``name``."""
        if not name:
            return []
        return [entry for entry in self._entries if entry.has_annotation(name)]

    def with_prefix(self, prefix: str) -> list[Entry]:
        """Entries with at least one annotation whose name starts with ``prefix``."""
        if not prefix:
            return []
        return [
            entry
            for entry in self._entries
            if any(ann.name.startswith(prefix) for ann in entry.annotations)
        ]

    def with_name_and_result_type(self, name: str, result_type: str) -> list[Entry]:
        """Function/method Entries annotated ``name`` returning ``result_type``.

        Type comparison is textual equality against the canonical type string.
        """
        if not name or not result_type:
            return []
        return [
            entry
            for entry in self._entries
            if (entry.is_func or entry.is_method)
            and entry.has_annotation(name)
            and any(res.type == result_type for res in entry.results)
        ]

    def to_dicts(self) -> list[dict[str, Any]]:
        return [entry.to_dict() for entry in self._entries]
