"""rdf_complete_ls.completer
~~~~~~~~~~~~~~~~~~~~~~~~~~
Incremental completion engine – one :class:`CompletionStateMachine` per open
document.

The host calls :meth:`CompletionStateMachine.try_auto_complete` with every
character the user types.  From that single character (plus the text between
the session start and the caret) the machine decides whether a completion
session opens, continues or ends, and asks the host to show or dismiss a
suggestion list.  Nothing is ever re-parsed per keystroke; the declared
namespaces, blank nodes and variables are only re-scanned by
:meth:`CompletionStateMachine.detect_state` on structural events.

Everything syntax-specific comes from the :class:`~.syntax.SyntaxProfile`.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from . import indexer, suggestions
from .bnodes import BlankNodeIdAllocator
from .host import EditorHost
from .namespaces import NamespaceBinding, OffsetScopedNamespaceMap
from .resolver import TermIndex
from .states import CompletionState
from .suggestions import CompletionData
from .syntax import (
    TURTLE_PREFIX_RE,
    SyntaxProfile,
    is_newline,
    is_punctuation,
    is_valid_partial_blank_node_id,
    is_valid_partial_variable_name,
)

__all__ = ["CompletionState", "CompletionStateMachine"]

log = logging.getLogger("rdf_complete_ls.completer")

_LITERALS = {
    CompletionState.LITERAL: ('"', CompletionState.LONG_LITERAL),
    CompletionState.ALTERNATE_LITERAL: ("'", CompletionState.ALTERNATE_LONG_LITERAL),
}
_LONG_LITERALS = {
    CompletionState.LONG_LITERAL: '"',
    CompletionState.ALTERNATE_LONG_LITERAL: "'",
}


def _is_escaped(text: str) -> bool:
    """Is the last character of *text* preceded by an odd run of backslashes?"""
    run = 0
    i = len(text) - 2
    while i >= 0 and text[i] == "\\":
        run += 1
        i -= 1
    return run % 2 == 1


def _ends_token(c: str, allowed: str) -> bool:
    return c.isspace() or (is_punctuation(c) and c not in allowed)


class CompletionStateMachine:
    """Per-document completion state, driven one inserted character at a time."""

    def __init__(self, profile: SyntaxProfile, host: EditorHost, terms: Optional[TermIndex] = None) -> None:
        self.profile = profile
        self.host = host
        self.terms = terms if terms is not None else TermIndex()

        self.state = CompletionState.NONE
        self.last_completion = CompletionState.NONE
        self.temporary_state = CompletionState.NONE
        self.start_offset = 0

        self.namespaces = OffsetScopedNamespaceMap(empty=True)
        self.namespaces.namespace_added.append(self._on_namespace_added)
        self.blank_nodes: List[str] = []
        self.variables: List[str] = []
        self._bnode_ids = BlankNodeIdAllocator()

        self._continuations = {
            CompletionState.DECLARATION: self._try_declaration,
            CompletionState.BASE: self._try_base,
            CompletionState.PREFIX: self._try_prefix,
            CompletionState.KEYWORD_OR_QNAME: self._try_keyword_or_qname,
            CompletionState.QNAME: self._try_qname,
            CompletionState.BNODE: self._try_bnode,
            CompletionState.URI: self._try_uri,
            CompletionState.LITERAL: self._try_literal,
            CompletionState.ALTERNATE_LITERAL: self._try_literal,
            CompletionState.LONG_LITERAL: self._try_long_literal,
            CompletionState.ALTERNATE_LONG_LITERAL: self._try_long_literal,
            CompletionState.COMMENT: self._try_comment,
            CompletionState.VARIABLE: self._try_variable,
        }
        self._starters = {
            CompletionState.DECLARATION: self._start_declaration,
            CompletionState.KEYWORD_OR_QNAME: self._start_keyword_or_qname,
            CompletionState.QNAME: self._start_qname,
            CompletionState.BNODE: self._start_bnode,
            CompletionState.VARIABLE: self._start_variable,
        }

    # ------------------------------------------------------------------
    # Session window
    # ------------------------------------------------------------------

    @property
    def length(self) -> int:
        return self.host.get_caret_offset() - self.start_offset

    @property
    def current_text(self) -> str:
        return self.host.get_text_range(self.start_offset, self.length)

    @property
    def enabled(self) -> bool:
        return self.state is not CompletionState.DISABLED

    @enabled.setter
    def enabled(self, value: bool) -> None:
        if value:
            if self.state is CompletionState.DISABLED:
                self.state = CompletionState.NONE
        else:
            self.end_session()
            self.state = CompletionState.DISABLED

    def end_session(self, completed: Optional[CompletionState] = None) -> None:
        """Close the current session; *completed* is remembered as ``last_completion``."""
        if completed is not None:
            self.last_completion = completed
        if self.state is not CompletionState.DISABLED:
            self.state = CompletionState.NONE
        self.host.end_suggestion_session()

    # ------------------------------------------------------------------
    # State detection (structural events only)
    # ------------------------------------------------------------------

    def detect_state(self) -> None:
        if self.state is CompletionState.DISABLED:
            return
        index = indexer.build(self.host.get_document_text(), self.profile)
        self._load_namespaces(index.bindings)
        self._load_blank_nodes(index.blank_nodes)
        self.variables = index.variables

    def detect_namespaces(self) -> None:
        self._load_namespaces(
            indexer.find_namespaces(self.host.get_document_text(), self.profile.prefix_patterns)
        )

    def detect_blank_nodes(self) -> None:
        self._load_blank_nodes(
            indexer.find_blank_nodes(self.host.get_document_text(), self.profile.blank_node_pattern)
        )

    def detect_variables(self) -> None:
        self.variables = indexer.find_variables(self.host.get_document_text(), self.profile.variable_pattern)

    def _load_namespaces(self, bindings: List[NamespaceBinding]) -> None:
        self.namespaces.clear()
        for binding in bindings:
            self.namespaces.current_offset = binding.offset
            self.namespaces.add_namespace(binding.prefix, binding.namespace_uri)

    def _load_blank_nodes(self, labels: List[str]) -> None:
        self.blank_nodes = labels
        for label in self.blank_nodes:
            self._bnode_ids.check_id(label)

    def _on_namespace_added(self, prefix: str, uri: str) -> None:
        self.terms.request(uri)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def try_auto_complete(self, text: str) -> None:
        if self.state in (CompletionState.DISABLED, CompletionState.INSERTED):
            return
        try:
            if self.state is CompletionState.NONE:
                self._start(text)
            else:
                self._continue(text)
        except Exception:
            log.debug("completion aborted after %r", text, exc_info=True)
            self.state = CompletionState.NONE
            self.host.end_suggestion_session()

    def _continue(self, text: str) -> None:
        # caret left the token (click, arrow keys …) or the opener was deleted
        if self.length <= 1:
            self.end_session()
            self.try_auto_complete(text)
            return
        if not text:
            return
        handler = self._continuations.get(self.state)
        if handler is not None:
            handler(text)

    # ------------------------------------------------------------------
    # Opening a session
    # ------------------------------------------------------------------

    def _start(self, text: str) -> None:
        reopened, self.temporary_state = self.temporary_state, CompletionState.NONE
        self.start_offset = self.host.get_caret_offset() - 1
        if len(text) != 1:
            return

        state = self.profile.opener(text)
        if state is CompletionState.NONE:
            return

        if state in _LITERALS:
            # a quote straight after a closing quote doesn't reopen the literal
            if reopened in (state, _LITERALS[state][1]):
                return
            self.state = state
            return

        starter = self._starters.get(state)
        if starter is not None:
            starter()
        else:
            self.state = state

    def _start_declaration(self) -> None:
        if self.start_offset > 0 and self.host.get_text_range(self.start_offset - 1, 1) in "\"'":
            return  # language tag
        self.state = CompletionState.DECLARATION
        self.host.show_suggestions(self._declaration_suggestions())

    def _start_keyword_or_qname(self) -> None:
        self._backtrack_start_offset(
            lambda s: self.profile.is_valid_partial_keyword(s) or self.profile.is_valid_partial_qname(s)
        )
        self.state = CompletionState.KEYWORD_OR_QNAME
        self.host.show_suggestions(self._keyword_suggestions() + self._qname_suggestions())

    def _start_qname(self) -> None:
        self.state = CompletionState.QNAME
        self.host.show_suggestions(self._qname_suggestions())

    def _start_bnode(self) -> None:
        self.state = CompletionState.BNODE
        items = [suggestions.new_blank_node(self._bnode_ids.get_next_id())]
        items.extend(suggestions.blank_node(label) for label in self.blank_nodes)
        self.host.show_suggestions(items)

    def _start_variable(self) -> None:
        self.state = CompletionState.VARIABLE
        self.host.show_suggestions([suggestions.variable(v) for v in self.variables])

    # ------------------------------------------------------------------
    # Continuing a session
    # ------------------------------------------------------------------

    def _try_literal(self, text: str) -> None:
        quote, long_state = _LITERALS[self.state]
        if is_newline(text):
            self.end_session()
            return

        current = self.current_text
        if text == quote:
            if len(current) == 2:
                return  # "" might still become """
            if current == quote * 3 and self.profile.long_literals:
                self.state = long_state
                return
            if not _is_escaped(current):
                self._close_literal(self.state)
        elif len(current) == 3 and current.startswith(quote * 2):
            # empty literal followed by something else
            self.end_session(self.state)
            c = text[0]
            if not (c.isspace() or is_punctuation(c)):
                self.try_auto_complete(text)

    def _try_long_literal(self, text: str) -> None:
        quote = _LONG_LITERALS[self.state]
        if text != quote:
            return
        current = self.current_text
        if len(current) >= 6 and current.endswith(quote * 3) and not _is_escaped(current[:-2]):
            self._close_literal(self.state)

    def _close_literal(self, state: CompletionState) -> None:
        self.end_session(state)
        self.temporary_state = state

    def _try_uri(self, text: str) -> None:
        if text == ">" and not _is_escaped(self.current_text):
            self.end_session(CompletionState.URI)

    def _try_comment(self, text: str) -> None:
        if is_newline(text):
            self.end_session(CompletionState.COMMENT)

    def _try_bnode(self, text: str) -> None:
        if _ends_token(text[0], "_-:"):
            self.end_session(CompletionState.BNODE)
            self.detect_blank_nodes()
            self._reclassify(text)
            return
        if not is_valid_partial_blank_node_id(self.current_text):
            self.end_session()
            self.detect_blank_nodes()
            self._reclassify(text)

    def _try_keyword_or_qname(self, text: str) -> None:
        if _ends_token(text[0], "_-:"):
            self.end_session(CompletionState.KEYWORD_OR_QNAME)
            self._reclassify(text)
            return

        current = self.current_text
        keyword = self.profile.is_valid_partial_keyword(current)
        if not keyword and not self.profile.is_valid_partial_qname(current):
            self.end_session()
            self._reclassify(text)
        elif not keyword:
            self.state = CompletionState.QNAME

    def _try_qname(self, text: str) -> None:
        current = self.current_text
        if self.profile.is_valid_partial_keyword(current):
            # user backtracked into something that could be a keyword again
            self.state = CompletionState.KEYWORD_OR_QNAME
            self.host.show_suggestions(self._keyword_suggestions())
            self._try_keyword_or_qname(text)
            return

        if _ends_token(text[0], "_-:"):
            self.end_session(CompletionState.QNAME)
            self._reclassify(text)
        elif not self.profile.is_valid_partial_qname(current):
            self.end_session()
            self._reclassify(text)

    def _try_declaration(self, text: str) -> None:
        c = text[0]
        if c.isspace() or is_punctuation(c):
            self.end_session(CompletionState.DECLARATION)
            return
        state = self.profile.match_directive(self.current_text[1:])
        if state is CompletionState.NONE:
            self.end_session()
        else:
            self.state = state

    def _try_prefix(self, text: str) -> None:
        if is_newline(text):
            self.end_session(CompletionState.PREFIX)
            self.detect_state()
            return

        current = self.current_text
        if text == "." and TURTLE_PREFIX_RE.match(current):
            self.end_session(CompletionState.DECLARATION)
            self.detect_state()
            return

        if self.profile.match_directive(current[1:7]) is not CompletionState.PREFIX:
            self.end_session()
            self.detect_state()

    def _try_base(self, text: str) -> None:
        c = text[0]
        if c.isspace() or is_punctuation(c):
            self.end_session(CompletionState.BASE)
        elif self.profile.match_directive(self.current_text[1:]) is not CompletionState.BASE:
            self.end_session()

    def _try_variable(self, text: str) -> None:
        if is_newline(text):
            self.end_session(CompletionState.VARIABLE)
            self.detect_variables()
            return

        if self.length > 1 and _ends_token(text[0], "_-"):
            self.end_session(CompletionState.VARIABLE)
            self.detect_variables()
            self._reclassify(text)
            return

        if not is_valid_partial_variable_name(self.current_text):
            self.end_session()
            self.detect_variables()
            self._reclassify(text)

    def _reclassify(self, text: str) -> None:
        """Let the character that ended a token open the next one (``foo<`` …)."""
        if len(text) == 1 and self.profile.opener(text) is not CompletionState.NONE:
            self.try_auto_complete(text)

    # ------------------------------------------------------------------
    # Suggestions
    # ------------------------------------------------------------------

    def _keyword_suggestions(self) -> List[CompletionData]:
        return list(self.profile.keywords)

    def _qname_suggestions(self) -> List[CompletionData]:
        self.namespaces.current_offset = self.start_offset
        items: List[CompletionData] = []
        for prefix in self.namespaces.prefixes:
            ns = self.namespaces.get_namespace_uri(prefix)
            for term in self.terms.get_terms(ns):
                description = term.label or f"QName for the URI {ns}{term.local_name}"
                items.append(suggestions.qname(f"{prefix}:{term.local_name}", description))
        return sorted(items)

    def _declaration_suggestions(self) -> List[CompletionData]:
        style = self.profile.declaration_style or "turtle"
        self.namespaces.current_offset = self.start_offset
        n = 0
        while self.namespaces.has_namespace(f"ns{n}"):
            n += 1
        items = [
            suggestions.base_declaration(style),
            suggestions.default_prefix_declaration(style),
            suggestions.prefix_declaration(f"ns{n}", "Enter new Namespace URI here", style, "New Namespace Declaration"),
        ]
        items.extend(self.profile.declarations)
        return items

    def _backtrack_start_offset(self, accept: Callable[[str], bool]) -> None:
        """Move ``start_offset`` left over any already-typed part of the token."""
        caret = self.host.get_caret_offset()
        offset = self.start_offset - 1
        while offset >= 0 and accept(self.host.get_text_range(offset, caret - offset)):
            offset -= 1
        self.start_offset = offset + 1
