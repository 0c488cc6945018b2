"""rdf_complete_ls.bnodes
~~~~~~~~~~~~~~~~~~~~~~
Hands out synthetic blank-node labels (``autos0``, ``autos1`` …) that never
collide with labels already present in the document.
"""
from __future__ import annotations

import re
from typing import Set

__all__ = ["BlankNodeIdAllocator"]

_AUTO_ID_RE = re.compile(r"^(?:_:)?autos(\d+)$")


class BlankNodeIdAllocator:
    """Tracks the highest ``autosN`` suffix seen so far for one document."""

    prefix = "autos"

    def __init__(self) -> None:
        self._next = 0
        self._issued: Set[str] = set()

    def check_id(self, label: str) -> None:
        """Record *label* (with or without ``_:``) so it is never generated."""
        m = _AUTO_ID_RE.match(label)
        if m is None:
            return
        n = int(m.group(1))
        if n >= self._next:
            self._next = n + 1

    def get_next_id(self) -> str:
        label = f"{self.prefix}{self._next}"
        while label in self._issued:
            self._next += 1
            label = f"{self.prefix}{self._next}"
        self._issued.add(label)
        self._next += 1
        return label
