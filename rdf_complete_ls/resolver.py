"""rdf_complete_ls.resolver
~~~~~~~~~~~~~~~~~~~~~~~~~
Vocabulary *term index*: fetches namespace documents in the background and
caches the classes, properties and datatypes they define so QName completion
can offer ``prefix:localName`` suggestions.

Usage (from completer.py)::

    terms = TermIndex()

    def _on_namespace_added(prefix, uri):
        terms.request(uri)            # fire-and-forget, never blocks typing

    for term in terms.get_terms(uri): # synchronous cache read
        ...

Loads run as tasks on the running asyncio loop (inside the language server)
or on a daemon worker thread when no loop is running.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from typing import Dict, Iterable, List, Optional, Set

import aiohttp
from rdflib import Graph, Literal, URIRef
from rdflib.namespace import RDF, RDFS

from .vocab import BUILTIN_VOCABULARIES, VocabularyDefinition, bundled_vocabulary, default_prefix

__all__ = ["NamespaceTerm", "TermIndex", "extract_terms"]

log = logging.getLogger("rdf_complete_ls.resolver")

# ---------------------------------------------------------------------------
# Cached value
# ---------------------------------------------------------------------------


class NamespaceTerm:
    """One class/property/datatype of a vocabulary, with an optional label."""

    __slots__ = ("namespace_uri", "local_name", "label")

    def __init__(self, namespace_uri: str, local_name: str, label: str = "") -> None:
        self.namespace_uri = namespace_uri
        self.local_name = local_name
        self.label = label

    def __str__(self) -> str:
        return self.namespace_uri + self.local_name

    def __repr__(self) -> str:
        return f"NamespaceTerm({self.namespace_uri!r}, {self.local_name!r}, {self.label!r})"

    # case-insensitive on the full URI so vocabularies can't produce duplicate suggestions
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NamespaceTerm):
            return NotImplemented
        return str(self).lower() == str(other).lower()

    def __hash__(self) -> int:
        return hash(str(self).lower())


# ---------------------------------------------------------------------------
# Index
# ---------------------------------------------------------------------------


class TermIndex:
    """Application-wide cache ``namespace URI → [NamespaceTerm]``."""

    def __init__(
        self,
        vocabularies: Iterable[VocabularyDefinition] = BUILTIN_VOCABULARIES,
        remote: bool = True,
    ) -> None:
        self._vocabularies = tuple(vocabularies)
        self.remote = remote
        self._terms: Dict[str, List[NamespaceTerm]] = {}
        self._pending: Set[str] = set()
        self._tasks: Set[asyncio.Task] = set()   # strong refs for fire-and-forget tasks
        self._lock = threading.Lock()

    # ---- synchronous side ----------------------------------------------

    def is_loaded(self, namespace_uri: str) -> bool:
        with self._lock:
            return namespace_uri in self._terms

    def get_terms(self, namespace_uri: str) -> List[NamespaceTerm]:
        with self._lock:
            return list(self._terms.get(namespace_uri, ()))

    def add_terms(self, namespace_uri: str, terms: Iterable[NamespaceTerm]) -> None:
        """Merge *terms* into the cache and mark *namespace_uri* as loaded."""
        with self._lock:
            known = self._terms.setdefault(namespace_uri, [])
            seen = set(known)
            for term in terms:
                if term not in seen:
                    seen.add(term)
                    known.append(term)

    def request(self, namespace_uri: str) -> None:
        """Start loading *namespace_uri* in the background (if not done already)."""
        with self._lock:
            if namespace_uri in self._terms or namespace_uri in self._pending:
                return
            self._pending.add(namespace_uri)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            task = loop.create_task(self.load_terms(namespace_uri))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        else:
            worker = threading.Thread(
                target=asyncio.run,
                args=(self.load_terms(namespace_uri),),
                name=f"term-loader:{namespace_uri}",
                daemon=True,
            )
            worker.start()

    # ---- asynchronous side ---------------------------------------------

    async def load_terms(self, namespace_uri: str) -> List[NamespaceTerm]:
        """Fetch, parse, cache; always leaves *namespace_uri* marked as loaded."""
        if self.is_loaded(namespace_uri):
            return self.get_terms(namespace_uri)

        terms: List[NamespaceTerm] = []
        try:
            graph = await self._retrieve(namespace_uri)
            terms = extract_terms(graph, namespace_uri)
            log.debug("resolver: %d terms for %s", len(terms), namespace_uri)
        except Exception as exc:  # network/parse errors
            log.debug("resolver: %s failed – %s", namespace_uri, exc)
        finally:
            self.add_terms(namespace_uri, terms)
            with self._lock:
                self._pending.discard(namespace_uri)

        return self.get_terms(namespace_uri)

    async def _retrieve(self, namespace_uri: str) -> Graph:
        g = Graph()
        if self.remote:
            data = await _fetch(namespace_uri)
            if data:
                g = _parse(data, namespace_uri)

        if len(g) == 0:
            prefix = default_prefix(namespace_uri, self._vocabularies)
            local = bundled_vocabulary(prefix)
            if local is not None:
                log.debug("resolver: using bundled copy of '%s' for %s", prefix, namespace_uri)
                g = Graph()
                g.parse(data=local, format="turtle")
        return g


# ---------------------------------------------------------------------------
# Term extraction
# ---------------------------------------------------------------------------

_TERM_TYPES = (RDFS.Class, RDF.Property, RDFS.Datatype)


def extract_terms(graph: Graph, namespace_uri: str) -> List[NamespaceTerm]:
    """Collect every class/property/datatype of *graph* defined in *namespace_uri*."""
    terms: List[NamespaceTerm] = []
    seen: Set[NamespaceTerm] = set()
    for term_type in _TERM_TYPES:
        for s in graph.subjects(RDF.type, term_type):
            if not isinstance(s, URIRef) or not str(s).startswith(namespace_uri):
                continue
            local = str(s)[len(namespace_uri):]
            if not local:
                continue
            label = _best_text(graph, s, RDFS.comment) or _best_text(graph, s, RDFS.label) or ""
            term = NamespaceTerm(namespace_uri, local, label)
            if term not in seen:
                seen.add(term)
                terms.append(term)
    return terms


def _best_text(graph: Graph, subject: URIRef, predicate: URIRef) -> Optional[str]:
    """Plain/English literal value of *predicate*, else any literal value."""
    fallback = None
    for o in graph.objects(subject, predicate):
        if not isinstance(o, Literal):
            continue
        if o.language in (None, "en"):
            return str(o)
        fallback = fallback or str(o)
    return fallback


# ---------------------------------------------------------------------------
# Low-level fetch + parse
# ---------------------------------------------------------------------------

_ACCEPT_HDR = (
    "text/turtle, application/rdf+xml; q=0.9, application/n-triples; q=0.8, */*; q=0.1"
)
_TIMEOUT = 10.0  # seconds


async def _fetch(namespace_uri: str) -> Optional[str]:
    """Return the namespace document body, or ``None`` on failure."""
    timeout = aiohttp.ClientTimeout(total=_TIMEOUT)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        try:
            async with session.get(namespace_uri, headers={"Accept": _ACCEPT_HDR}) as resp:
                if resp.status >= 400:
                    log.debug("HTTP %s on %s", resp.status, namespace_uri)
                    return None
                return await resp.text()
        except Exception as exc:
            log.debug("HTTP error on %s – %s", namespace_uri, exc)
            return None


def _parse(data: str, namespace_uri: str) -> Graph:
    """Parse *data* as Turtle, then RDF/XML; empty graph if neither works."""
    for fmt in ("turtle", "xml", "nt"):
        g = Graph()
        try:
            g.parse(data=data, format=fmt, publicID=namespace_uri)
            return g
        except Exception:
            continue
    log.debug("rdflib parse failed for %s", namespace_uri)
    return Graph()
