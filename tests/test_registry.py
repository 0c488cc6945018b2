"""Unit tests for rdf_complete_ls.registry."""
from __future__ import annotations

from rdf_complete_ls.completer import CompletionStateMachine
from rdf_complete_ls.host import DocumentBuffer
from rdf_complete_ls.registry import CompletionRegistry
from rdf_complete_ls.vocab import BUILTIN_VOCABULARIES


class _RecordingTerms:
    def __init__(self):
        self.requested = []

    def request(self, namespace_uri):
        self.requested.append(namespace_uri)


def test_syntaxes_and_vocabularies(terms):
    registry = CompletionRegistry(terms)

    assert registry.syntaxes == [
        "NTriples", "Turtle", "Notation3", "SparqlQuery10", "SparqlQuery11", "SparqlUpdate11",
    ]
    assert [v.prefix for v in registry.vocabularies] == [v.prefix for v in BUILTIN_VOCABULARIES]


def test_create_shares_term_index(terms):
    registry = CompletionRegistry(terms)

    machine = registry.create("Turtle", DocumentBuffer())

    assert isinstance(machine, CompletionStateMachine)
    assert machine.terms is terms
    assert machine.profile.name == "Turtle"


def test_create_unknown_syntax_returns_none(terms):
    assert CompletionRegistry(terms).create("RdfXml", DocumentBuffer()) is None


def test_preload_requests_each_vocabulary_once():
    recorder = _RecordingTerms()
    registry = CompletionRegistry(recorder)

    registry.preload()
    registry.preload()

    assert recorder.requested == [v.namespace_uri for v in BUILTIN_VOCABULARIES]


def test_syntax_for_extensions_and_language_ids(terms):
    registry = CompletionRegistry(terms)

    assert registry.syntax_for(path="file:///data/people.ttl") == "Turtle"
    assert registry.syntax_for(path="/q/select.rq") == "SparqlQuery11"
    assert registry.syntax_for(path="/q/update.ru", language_id="sparql") == "SparqlUpdate11"
    assert registry.syntax_for(language_id="n3") == "Notation3"
    assert registry.syntax_for(path="notes.txt") is None


def test_configured_mappings_override_defaults(terms):
    registry = CompletionRegistry(terms)

    registry.configure({".ttl": "Notation3", ".trig": "Turtle", ".x": "NoSuchSyntax"})

    assert registry.syntax_for(path="a.ttl") == "Notation3"
    assert registry.syntax_for(path="a.trig") == "Turtle"
    assert registry.syntax_for(path="a.x") is None
