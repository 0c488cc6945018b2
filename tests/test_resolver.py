"""Unit tests for rdf_complete_ls.resolver."""
from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Dict

import pytest
from rdflib import Graph

from rdf_complete_ls import resolver
from rdf_complete_ls.resolver import NamespaceTerm, TermIndex, extract_terms

NS = "http://example.com/ns#"

SAMPLE_TTL = """
@prefix rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#> .
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .
<http://example.com/ns#Foo> a rdfs:Class ; rdfs:label "Foo"@en ; rdfs:comment "The Foo class."@en .
<http://example.com/ns#bar> a rdf:Property ; rdfs:label "bar" .
<http://example.com/ns#Baz> a rdfs:Datatype .
<http://example.com/ns#notATerm> rdfs:label "Not typed" .
<http://elsewhere.org/Other> a rdfs:Class .
"""


class _FakeResp:
    def __init__(self, status: int = 200, text: str = SAMPLE_TTL):
        self.status = status
        self._text = text

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class _FakeSession:
    def __init__(self, status: int = 200, text: str = SAMPLE_TTL):
        self._status = status
        self._text = text
        self.last_url: str | None = None
        self.last_hdrs: Dict[str, str] | None = None

    # In real aiohttp, `get` is sync and returns an *async* context manager.
    def get(self, url, *, headers=None):
        self.last_url = url
        self.last_hdrs = headers
        return _FakeResp(self._status, self._text)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


def _patch_aiohttp(monkeypatch, session: _FakeSession) -> None:
    def _fake_session_ctor(*args, **kwargs):
        return session

    monkeypatch.setattr(
        resolver,
        "aiohttp",
        SimpleNamespace(ClientSession=_fake_session_ctor, ClientTimeout=lambda total: total),
    )


@pytest.mark.asyncio
async def test_load_terms_from_remote(monkeypatch):
    """load_terms should parse the remote Turtle and keep only typed terms of the namespace."""
    session = _FakeSession()
    _patch_aiohttp(monkeypatch, session)

    index = TermIndex()
    terms = await index.load_terms(NS)

    assert session.last_url == NS
    assert session.last_hdrs["Accept"].startswith("text/turtle")
    by_name = {t.local_name: t.label for t in terms}
    assert by_name == {"Foo": "The Foo class.", "bar": "bar", "Baz": ""}
    assert index.is_loaded(NS)


@pytest.mark.asyncio
async def test_http_error_degrades_to_no_terms(monkeypatch):
    _patch_aiohttp(monkeypatch, _FakeSession(status=404))

    index = TermIndex()
    assert await index.load_terms(NS) == []
    # still marked loaded so nobody retries per keystroke
    assert index.is_loaded(NS)


@pytest.mark.asyncio
async def test_bundled_copy_used_when_remote_disabled():
    index = TermIndex(remote=False)
    terms = await index.load_terms("http://www.w3.org/2000/01/rdf-schema#")

    labels = {t.local_name: t.label for t in terms}
    assert labels["label"] == "A human-readable name for the subject."
    assert "Class" in labels


@pytest.mark.asyncio
async def test_bundled_copy_used_when_remote_unparseable(monkeypatch):
    _patch_aiohttp(monkeypatch, _FakeSession(text="<<< definitely not RDF"))

    index = TermIndex()
    terms = await index.load_terms("http://www.w3.org/2001/XMLSchema#")

    assert NamespaceTerm("http://www.w3.org/2001/XMLSchema#", "string") in terms


@pytest.mark.asyncio
async def test_request_inside_running_loop(monkeypatch):
    _patch_aiohttp(monkeypatch, _FakeSession())

    index = TermIndex()
    index.request(NS)
    index.request(NS)  # duplicate requests are suppressed

    for _ in range(50):
        if index.is_loaded(NS):
            break
        await asyncio.sleep(0.01)

    assert len(index.get_terms(NS)) == 3


def test_terms_are_case_insensitive_and_merged():
    index = TermIndex(remote=False)
    index.add_terms(NS, [NamespaceTerm(NS, "Foo")])
    index.add_terms(NS, [NamespaceTerm(NS, "foo", "dup"), NamespaceTerm(NS, "Other")])

    assert [t.local_name for t in index.get_terms(NS)] == ["Foo", "Other"]
    assert NamespaceTerm(NS, "FOO") == NamespaceTerm(NS, "foo")
    assert hash(NamespaceTerm(NS, "FOO")) == hash(NamespaceTerm(NS, "foo"))


def test_extract_terms_prefers_comment_over_label():
    g = Graph()
    g.parse(data=SAMPLE_TTL, format="turtle")

    terms = {t.local_name: t for t in extract_terms(g, NS)}

    assert terms["Foo"].label == "The Foo class."
    assert str(terms["bar"]) == NS + "bar"
    assert "notATerm" not in terms
