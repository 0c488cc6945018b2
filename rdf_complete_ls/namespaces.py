"""rdf_complete_ls.namespaces
~~~~~~~~~~~~~~~~~~~~~~~~~~~
Namespace prefix table whose bindings are scoped by **document offset**.

Turtle and SPARQL documents may redeclare a prefix half-way through, so a
lookup only sees bindings declared *before* :attr:`current_offset`.  The
binding with the greatest offset below the cursor wins::

    nsmap.current_offset = 10
    nsmap.add_namespace("ex", "http://one/")
    nsmap.current_offset = 50
    nsmap.add_namespace("ex", "http://two/")

    nsmap.current_offset = 30
    nsmap.get_namespace_uri("ex")   # -> "http://one/"
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from rdflib.namespace import RDF, RDFS, XSD

__all__ = [
    "NamespaceBinding",
    "NamespaceScopeError",
    "NamespaceNotInScopeError",
    "NamespaceNotKnownError",
    "OffsetScopedNamespaceMap",
]

NamespaceListener = Callable[[str, str], None]


class NamespaceScopeError(LookupError):
    """A prefix or namespace URI could not be resolved at the current offset."""


class NamespaceNotInScopeError(NamespaceScopeError):
    """Bindings exist, but none of them precede the current offset."""


class NamespaceNotKnownError(NamespaceScopeError):
    """Nothing was ever bound for the prefix/URI."""


@dataclass(frozen=True)
class NamespaceBinding:
    prefix: str
    namespace_uri: str
    offset: int


class OffsetScopedNamespaceMap:
    """Prefix ↔ namespace table with per-binding visibility offsets."""

    def __init__(self, empty: bool = False) -> None:
        self._uris: Dict[str, List[NamespaceBinding]] = {}       # prefix → bindings
        self._prefixes: Dict[str, List[NamespaceBinding]] = {}   # namespace URI → bindings
        self.current_offset = 0

        self.namespace_added: List[NamespaceListener] = []
        self.namespace_modified: List[NamespaceListener] = []

        if not empty:
            self.add_namespace("rdf", str(RDF))
            self.add_namespace("rdfs", str(RDFS))
            self.add_namespace("xsd", str(XSD))

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_namespace(self, prefix: str, uri: str) -> None:
        binding = NamespaceBinding(prefix, str(uri), self.current_offset)
        existing = self._uris.setdefault(prefix, [])

        replaced = [b for b in existing if b.offset == self.current_offset]
        for old in replaced:
            existing.remove(old)
            self._prefixes[old.namespace_uri].remove(old)

        existing.append(binding)
        self._prefixes.setdefault(binding.namespace_uri, []).append(binding)

        listeners = self.namespace_modified if replaced else self.namespace_added
        for listener in listeners:
            listener(prefix, binding.namespace_uri)

    def clear(self) -> None:
        self._uris.clear()
        self._prefixes.clear()

    def import_namespaces(self, other: "OffsetScopedNamespaceMap") -> None:
        """Copy *other*'s in-scope bindings, renaming conflicting prefixes to ``nsN``."""
        for prefix in other.prefixes:
            uri = other.get_namespace_uri(prefix)
            if prefix not in self._uris:
                self.add_namespace(prefix, uri)
            elif all(b.namespace_uri != uri for b in self._uris[prefix]):
                self.add_namespace(self._next_free_prefix(), uri)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def prefixes(self) -> List[str]:
        return [p for p in self._uris if self.has_namespace(p)]

    def has_namespace(self, prefix: str) -> bool:
        return self._visible(self._uris.get(prefix, ())) is not None

    def get_namespace_uri(self, prefix: str) -> str:
        if prefix not in self._uris or not self._uris[prefix]:
            raise NamespaceNotKnownError(
                f"The namespace URI for the prefix '{prefix}' is not known"
            )
        binding = self._visible(self._uris[prefix])
        if binding is None:
            raise NamespaceNotInScopeError(
                f"The namespace URI for the prefix '{prefix}' is not in scope at offset {self.current_offset}"
            )
        return binding.namespace_uri

    def get_prefix(self, uri: str) -> str:
        uri = str(uri)
        if uri not in self._prefixes or not self._prefixes[uri]:
            raise NamespaceNotKnownError(f"The prefix for the URI '{uri}' is not known")
        # a binding whose prefix was rebound before the cursor no longer maps back to *uri*
        binding = self._visible(
            b for b in self._prefixes[uri] if self._visible(self._uris[b.prefix]) == b
        )
        if binding is None:
            raise NamespaceNotInScopeError(
                f"The prefix for the URI '{uri}' is not in scope at offset {self.current_offset}"
            )
        return binding.prefix

    def reduce_to_qname(
        self, uri: str, validate: Optional[Callable[[str], bool]] = None
    ) -> Tuple[bool, str]:
        """Rewrite *uri* as ``prefix:local`` using the longest in-scope namespace."""
        uri = str(uri)
        # (prefix, uri) pairs visible at the cursor; the qname resolves back to *uri*
        candidates = sorted(
            ((p, self.get_namespace_uri(p)) for p in self.prefixes),
            key=lambda pair: len(pair[1]),
            reverse=True,
        )
        for prefix, ns in candidates:
            if not uri.startswith(ns):
                continue
            local = uri[len(ns):]
            if not local or "/" in local or "#" in local:
                continue
            qname = f"{prefix}:{local}"
            if validate is not None and not validate(qname):
                continue
            return True, qname
        return False, ""

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _visible(self, bindings: Iterable[NamespaceBinding]) -> Optional[NamespaceBinding]:
        in_scope = [b for b in bindings if b.offset < self.current_offset]
        if not in_scope:
            return None
        return max(in_scope, key=lambda b: b.offset)

    def _next_free_prefix(self) -> str:
        n = 0
        while f"ns{n}" in self._uris:
            n += 1
        return f"ns{n}"
