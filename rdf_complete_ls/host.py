"""rdf_complete_ls.host
~~~~~~~~~~~~~~~~~~~~~
The editor-side contract of the completion engine and an in-memory
implementation of it.

:class:`EditorHost` is what a state machine calls back into.
:class:`DocumentBuffer` is a plain text buffer with a caret that implements
the contract and forwards edits to its completer the way an editor widget
would: typed characters go to ``try_auto_complete``, anything larger is a
structural change that triggers ``detect_state``.
"""
from __future__ import annotations

import re
from typing import TYPE_CHECKING, Iterable, List, Optional, Protocol, Tuple

from .suggestions import CompletionData

if TYPE_CHECKING:
    from .completer import CompletionStateMachine

__all__ = ["EditorHost", "DocumentBuffer", "offset_at", "position_at"]

_NEWLINE_TOKEN_RE = re.compile(r"^(\r\n|\n\r|\n|\r)[ \t]*$")


class EditorHost(Protocol):
    def get_document_text(self) -> str: ...

    def get_caret_offset(self) -> int: ...

    def get_selection(self) -> Tuple[int, int]: ...

    def get_text_range(self, offset: int, length: int) -> str: ...

    def show_suggestions(self, items: Iterable[CompletionData]) -> None: ...

    def end_suggestion_session(self) -> None: ...


class DocumentBuffer:
    """Text + caret + the suggestion list currently on screen."""

    def __init__(self, text: str = "", caret: Optional[int] = None) -> None:
        self._text = text
        self._caret = len(text) if caret is None else caret
        self.completer: Optional["CompletionStateMachine"] = None
        self.suggestions: List[CompletionData] = []
        self.session_open = False

    # ------------------------------------------------------------------
    # EditorHost
    # ------------------------------------------------------------------

    def get_document_text(self) -> str:
        return self._text

    def get_caret_offset(self) -> int:
        return self._caret

    def get_selection(self) -> Tuple[int, int]:
        return self._caret, 0

    def get_text_range(self, offset: int, length: int) -> str:
        if offset < 0 or length < 0 or offset + length > len(self._text):
            raise IndexError(f"range ({offset}, {length}) outside document of length {len(self._text)}")
        return self._text[offset:offset + length]

    def show_suggestions(self, items: Iterable[CompletionData]) -> None:
        if not self.session_open:
            self.session_open = True
            self.suggestions = []
        shown = set(self.suggestions)
        for item in items:
            if item not in shown:
                shown.add(item)
                self.suggestions.append(item)

    def end_suggestion_session(self) -> None:
        self.session_open = False
        self.suggestions = []

    # ------------------------------------------------------------------
    # Editing – forwards to the completer
    # ------------------------------------------------------------------

    @property
    def text(self) -> str:
        return self._text

    @property
    def caret(self) -> int:
        return self._caret

    def attach(self, completer: "CompletionStateMachine") -> "CompletionStateMachine":
        self.completer = completer
        completer.detect_state()
        return completer

    def move_caret(self, offset: int) -> None:
        self._caret = max(0, min(offset, len(self._text)))

    def insert(self, text: str) -> None:
        """Insert *text* at the caret as if typed."""
        self.edit(self._caret, self._caret, text)

    def type_text(self, text: str) -> None:
        """Type *text* one character at a time."""
        for c in text:
            self.insert(c)

    def edit(self, start: int, end: int, text: str) -> None:
        """Replace ``text[start:end]`` and notify the completer."""
        self._text = self._text[:start] + text + self._text[end:]
        self._caret = start + len(text)
        if self.completer is None:
            return

        if start == end and len(text) == 1:
            self.completer.try_auto_complete(text)
            return

        newline = _NEWLINE_TOKEN_RE.match(text) if start == end else None
        if newline:
            self.completer.try_auto_complete(newline.group(1))
            return

        if not text and end - start == 1:
            # single-character delete; deleting the opener kills the session,
            # anything else is left to the caret guard
            if self.session_open and start <= self.completer.start_offset:
                self.completer.end_session()
            return

        self.completer.end_session()
        self.completer.detect_state()


# ---------------------------------------------------------------------------
# Line/character ↔ offset helpers (LSP positions)
# ---------------------------------------------------------------------------


def offset_at(text: str, line: int, character: int) -> int:
    offset = 0
    for _ in range(line):
        nl = text.find("\n", offset)
        if nl < 0:
            return len(text)
        offset = nl + 1
    line_end = text.find("\n", offset)
    if line_end < 0:
        line_end = len(text)
    return min(offset + character, line_end)


def position_at(text: str, offset: int) -> Tuple[int, int]:
    offset = max(0, min(offset, len(text)))
    line = text.count("\n", 0, offset)
    line_start = text.rfind("\n", 0, offset) + 1
    return line, offset - line_start
