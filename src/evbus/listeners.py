"""Ordered listener registry for a single event."""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterator
import types
from typing import Any

Listener = Callable[..., Any]


def listener_key(listener: Listener) -> Hashable:
    """Identity key for ``listener``.

    Bound methods are recreated on every attribute access, so they are keyed
    by the bound object and function; everything else by object identity.
    Listeners never need to be hashable.
    """
    if isinstance(listener, types.MethodType):
        return (id(listener.__self__), listener.__func__)
    return id(listener)


class ListenerSet:
    """Ordered mapping of listener -> ``once`` flag.

    Insertion order is dispatch order. A listener is stored at most once;
    adding it again overwrites the flag and keeps its slot unless it is
    moved to the front.
    """

    def __init__(self) -> None:
        self._entries: dict[Hashable, tuple[Listener, bool]] = {}

    def add(self, listener: Listener, once: bool = False, first: bool = False) -> None:
        key = listener_key(listener)
        if not first:
            if key in self._entries:
                # Keep the originally registered object in its slot.
                listener = self._entries[key][0]
            self._entries[key] = (listener, once)
            return
        entries = {key: (listener, once)}
        for existing_key, entry in self._entries.items():
            if existing_key != key:
                entries[existing_key] = entry
        self._entries = entries

    def discard(self, listener: Listener) -> bool:
        """Remove ``listener``; return ``False`` if it was not present."""
        return self._entries.pop(listener_key(listener), None) is not None

    def is_once(self, listener: Listener) -> bool:
        """Current ``once`` flag of a registered listener (``False`` if absent)."""
        entry = self._entries.get(listener_key(listener))
        return entry is not None and entry[1]

    def snapshot(self) -> list[tuple[Listener, bool]]:
        """Point-in-time copy of ``(listener, once)`` pairs in dispatch order."""
        return list(self._entries.values())

    def __contains__(self, listener: object) -> bool:
        return callable(listener) and listener_key(listener) in self._entries

    def __iter__(self) -> Iterator[Listener]:
        return iter([listener for listener, _ in self._entries.values()])

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __repr__(self) -> str:
        return f"ListenerSet({len(self._entries)} listeners)"
