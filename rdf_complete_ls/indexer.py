"""rdf_complete_ls.indexer
~~~~~~~~~~~~~~~~~~~~~~~~
Re-scans **one document** with regular expressions so the completion engine
can rebuild its auxiliary indexes:

* namespace declarations, each scoped from the end offset of its match
* blank-node labels (``_:label``)
* SPARQL variables (``?x`` / ``$x``)

Like the engine, the scanner never parses the grammar; it only runs on
structural events (load, paste, large edit) and never per keystroke.  It is
stateless so unit tests can feed raw strings and assert on the returned
:class:`DocumentIndex`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Pattern
from urllib.parse import urlsplit

from .namespaces import NamespaceBinding
from .syntax import SyntaxProfile

# ---------------------------------------------------------------------------
# Public data container
# ---------------------------------------------------------------------------


@dataclass
class DocumentIndex:
    """Everything the engine re-derives from a full-text scan."""

    bindings: List[NamespaceBinding] = field(default_factory=list)   # sorted by offset
    blank_nodes: List[str] = field(default_factory=list)             # "_:label", first-seen order
    variables: List[str] = field(default_factory=list)               # "?x", first-seen order


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def build(text: str, profile: SyntaxProfile) -> DocumentIndex:
    """Scan *text* with *profile*'s regexes and return a :class:`DocumentIndex`."""
    return DocumentIndex(
        bindings=find_namespaces(text, profile.prefix_patterns),
        blank_nodes=find_blank_nodes(text, profile.blank_node_pattern),
        variables=find_variables(text, profile.variable_pattern),
    )


def find_namespaces(text: str, patterns: Iterable[Pattern]) -> List[NamespaceBinding]:
    """Every prefix declaration, scoped to the end offset of its match."""
    found: List[NamespaceBinding] = []
    for pattern in patterns:
        for m in pattern.finditer(text):
            uri = m.group("uri")
            if not _is_absolute(uri):
                continue
            found.append(NamespaceBinding(m.group("prefix") or "", uri, m.end()))
    found.sort(key=lambda b: b.offset)
    return found


def find_blank_nodes(text: str, pattern: Pattern) -> List[str]:
    return _unique(m.group(0) for m in pattern.finditer(text))


def find_variables(text: str, pattern: Optional[Pattern]) -> List[str]:
    """Variables in first-seen order; only the ``var`` group of *pattern* counts."""
    if pattern is None:
        return []
    return _unique(m.group("var") for m in pattern.finditer(text) if m.group("var"))


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _is_absolute(uri: str) -> bool:
    """Namespace URIs must be absolute; relative ones are skipped."""
    try:
        return bool(urlsplit(uri).scheme)
    except ValueError:
        return False


def _unique(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))
