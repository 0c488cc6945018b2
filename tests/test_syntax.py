"""Unit tests for rdf_complete_ls.syntax – predicates and profiles."""
from __future__ import annotations

import pytest

from rdf_complete_ls import syntax
from rdf_complete_ls.states import CompletionState
from rdf_complete_ls.suggestions import CompletionKind
from rdf_complete_ls.syntax import (
    is_valid_partial_blank_node_id,
    is_valid_partial_qname,
    is_valid_partial_variable_name,
)


@pytest.mark.parametrize("value", ["e", "ex", "ex:", ":", ":Per", "ex:Person", "foaf:knows-x", "ns0:a_b"])
def test_valid_partial_qnames(value):
    assert is_valid_partial_qname(value)


@pytest.mark.parametrize("value", ["_x:", "1ex:", "ex:1", "e.x:", "ex:a.b", "ex:a b", "<ex"])
def test_invalid_partial_qnames(value):
    assert not is_valid_partial_qname(value)


def test_digit_local_names_only_when_allowed():
    assert is_valid_partial_qname("ex:123", digit_local_start=True)
    assert not is_valid_partial_qname("ex:123")


def test_partial_blank_node_ids():
    assert is_valid_partial_blank_node_id("_:")
    assert is_valid_partial_blank_node_id("_:b1")
    assert not is_valid_partial_blank_node_id("_:1b")
    assert not is_valid_partial_blank_node_id("_:-b")
    assert not is_valid_partial_blank_node_id("_")
    assert not is_valid_partial_blank_node_id("x:")


def test_partial_variable_names():
    assert is_valid_partial_variable_name("?")
    assert is_valid_partial_variable_name("$x1")
    assert is_valid_partial_variable_name("?1x")
    assert not is_valid_partial_variable_name("?-x")
    assert not is_valid_partial_variable_name("?x y")
    assert not is_valid_partial_variable_name("x")


def test_turtle_openers():
    profile = syntax.turtle()
    assert profile.opener("@") is CompletionState.DECLARATION
    assert profile.opener("e") is CompletionState.KEYWORD_OR_QNAME
    assert profile.opener(":") is CompletionState.QNAME
    assert profile.opener("'") is CompletionState.NONE
    assert profile.opener("?") is CompletionState.NONE


def test_ntriples_has_no_words_or_declarations():
    profile = syntax.ntriples()
    assert profile.opener("e") is CompletionState.NONE
    assert profile.opener("@") is CompletionState.NONE
    assert profile.opener("_") is CompletionState.BNODE
    assert not profile.long_literals


def test_sparql_openers():
    profile = syntax.sparql_query11()
    assert profile.opener("?") is CompletionState.VARIABLE
    assert profile.opener("$") is CompletionState.VARIABLE
    assert profile.opener("'") is CompletionState.ALTERNATE_LITERAL
    assert profile.opener("@") is CompletionState.NONE


def test_keyword_prefixes():
    turtle = syntax.turtle()
    assert turtle.is_valid_partial_keyword("a")
    assert turtle.is_valid_partial_keyword("tr")
    assert not turtle.is_valid_partial_keyword("ex")
    assert not turtle.is_valid_partial_keyword("")

    n3 = syntax.notation3()
    assert n3.is_valid_partial_keyword("ha")


def test_sparql_keyword_sets_grow_with_version():
    def words(profile):
        return {k.insertion_text for k in profile.keywords if k.kind is CompletionKind.KEYWORD}

    q10 = words(syntax.sparql_query10())
    q11 = words(syntax.sparql_query11())
    u11 = words(syntax.sparql_update11())

    assert {"SELECT", "select", "a", "true"} <= q10
    assert "GROUP" not in q10 and "GROUP" in q11
    assert q10 < q11 < u11
    assert {"INSERT", "delete"} <= u11


def test_sparql_templates_use_sparql_style():
    keywords = syntax.sparql_query11().keywords
    texts = [k.insertion_text for k in keywords if k.kind is CompletionKind.DECLARATION]
    assert "BASE <Enter Base URI here>" in texts
    assert "PREFIX foaf: <http://xmlns.com/foaf/0.1/>" in texts


def test_directive_matching():
    turtle = syntax.turtle()
    assert turtle.match_directive("p") is CompletionState.PREFIX
    assert turtle.match_directive("bas") is CompletionState.BASE
    assert turtle.match_directive("prefix") is CompletionState.PREFIX
    assert turtle.match_directive("pri") is CompletionState.NONE

    n3 = syntax.notation3()
    assert n3.match_directive("forA") is CompletionState.DECLARATION


def test_prefix_regexes():
    m = syntax.TURTLE_PREFIX_RE.search("@prefix ex: <http://example.org/> .")
    assert (m.group("prefix"), m.group("uri")) == ("ex", "http://example.org/")

    m = syntax.SPARQL_PREFIX_RE.search("prefix : <http://example.org/>")
    assert m.group("prefix") is None

    # '@prefix' must not be picked up a second time by the SPARQL pattern
    assert syntax.SPARQL_PREFIX_RE.search("@prefix ex: <http://example.org/> .") is None


def test_ntriples_factory_accepts_vocabularies():
    assert syntax.ntriples(()).name == "NTriples"
