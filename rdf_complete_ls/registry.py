"""rdf_complete_ls.registry
~~~~~~~~~~~~~~~~~~~~~~~~~
Syntax name → completer factory, plus the language-id/file-extension table
the language server uses to pick one.
"""
from __future__ import annotations

import logging
import threading
from pathlib import PurePosixPath
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from . import syntax
from .completer import CompletionStateMachine
from .host import EditorHost
from .resolver import TermIndex
from .syntax import SyntaxProfile
from .vocab import BUILTIN_VOCABULARIES, VocabularyDefinition

__all__ = ["CompletionRegistry", "DEFAULT_SYNTAX_MAP"]

log = logging.getLogger("rdf_complete_ls.registry")

_PROFILE_FACTORIES: Dict[str, Callable[[Iterable[VocabularyDefinition]], SyntaxProfile]] = {
    "NTriples": syntax.ntriples,
    "Turtle": syntax.turtle,
    "Notation3": syntax.notation3,
    "SparqlQuery10": syntax.sparql_query10,
    "SparqlQuery11": syntax.sparql_query11,
    "SparqlUpdate11": syntax.sparql_update11,
}

# keys are LSP language ids or file extensions (with the dot)
DEFAULT_SYNTAX_MAP: Dict[str, str] = {
    ".nt": "NTriples",
    "ntriples": "NTriples",
    ".ttl": "Turtle",
    "turtle": "Turtle",
    ".n3": "Notation3",
    "n3": "Notation3",
    ".rq": "SparqlQuery11",
    ".sparql": "SparqlQuery11",
    "sparql": "SparqlQuery11",
    ".ru": "SparqlUpdate11",
}


class CompletionRegistry:
    """Hands out one :class:`CompletionStateMachine` per document, all sharing one :class:`TermIndex`."""

    def __init__(
        self,
        terms: Optional[TermIndex] = None,
        vocabularies: Iterable[VocabularyDefinition] = BUILTIN_VOCABULARIES,
    ) -> None:
        self.vocabularies: List[VocabularyDefinition] = list(vocabularies)
        self.terms = terms if terms is not None else TermIndex(self.vocabularies)
        self.syntax_map: Dict[str, str] = dict(DEFAULT_SYNTAX_MAP)
        self._profiles: Dict[str, SyntaxProfile] = {}
        self._preload_lock = threading.Lock()
        self._preloaded = False

    @property
    def syntaxes(self) -> List[str]:
        return list(_PROFILE_FACTORIES)

    def profile(self, name: str) -> Optional[SyntaxProfile]:
        if name not in _PROFILE_FACTORIES:
            return None
        if name not in self._profiles:
            self._profiles[name] = _PROFILE_FACTORIES[name](self.vocabularies)
        return self._profiles[name]

    def create(self, name: str, host: EditorHost) -> Optional[CompletionStateMachine]:
        """New completer for syntax *name* bound to *host*; ``None`` for unknown syntaxes."""
        profile = self.profile(name)
        if profile is None:
            log.debug("registry: no completer for syntax %r", name)
            return None
        return CompletionStateMachine(profile, host, self.terms)

    def preload(self) -> None:
        """Request every built-in vocabulary once."""
        with self._preload_lock:
            if self._preloaded:
                return
            self._preloaded = True
        for vocab in self.vocabularies:
            self.terms.request(vocab.namespace_uri)

    def configure(self, overrides: Mapping[str, str]) -> None:
        """Merge ``{extension-or-languageId: syntax}`` overrides into the table."""
        for key, name in overrides.items():
            if name not in _PROFILE_FACTORIES:
                log.debug("registry: ignoring mapping %r → unknown syntax %r", key, name)
                continue
            self.syntax_map[key.lower()] = name

    def syntax_for(self, language_id: Optional[str] = None, path: Optional[str] = None) -> Optional[str]:
        """Syntax name for a document; the file extension wins over the language id."""
        if path:
            suffix = PurePosixPath(path).suffix.lower()
            if suffix in self.syntax_map:
                return self.syntax_map[suffix]
        if language_id and language_id.lower() in self.syntax_map:
            return self.syntax_map[language_id.lower()]
        return None
