"""rdf_complete_ls.syntax
~~~~~~~~~~~~~~~~~~~~~~
Per-syntax *policy objects* for the completion engine.

A :class:`SyntaxProfile` bundles everything that differs between N-Triples,
Turtle, Notation3 and the SPARQL flavours: which characters open which
completion state, the keyword set, declaration templates, the regexes used
to re-scan a document and the partial-token validity rules.  The engine in
``completer.py`` is the same for all of them.
"""
from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Pattern, Tuple

from rdflib.namespace import RDF, XSD

from . import suggestions
from .states import CompletionState
from .suggestions import CompletionData, CompletionKind
from .vocab import BUILTIN_VOCABULARIES, VocabularyDefinition

__all__ = [
    "SyntaxProfile",
    "ntriples",
    "turtle",
    "notation3",
    "sparql_query10",
    "sparql_query11",
    "sparql_update11",
    "is_valid_partial_qname",
    "is_valid_partial_blank_node_id",
    "is_valid_partial_variable_name",
]

# ---------------------------------------------------------------------------
# Regexes – compiled once at import time
# ---------------------------------------------------------------------------

_PREFIX_NAME = r"[^\W\d_][\w\-]*"
_IRI_BODY = r"(?:\\>|[^>])*"

TURTLE_PREFIX_RE = re.compile(
    r"@prefix\s+(?P<prefix>" + _PREFIX_NAME + r")?:\s*<(?P<uri>" + _IRI_BODY + r")>\s*\."
)
SPARQL_PREFIX_RE = re.compile(
    r"(?<![@\w])PREFIX\s+(?P<prefix>" + _PREFIX_NAME + r")?:\s*<(?P<uri>" + _IRI_BODY + r")>",
    re.IGNORECASE,
)
TURTLE_BNODE_RE = re.compile(r"_:[^\W\d_][\w\-]*")
SPARQL_BNODE_RE = re.compile(r"_:[^\W_][\w\-]*")
# IRIs and string literals match too (and are skipped) so a "?q" inside them is not a variable
VARIABLE_RE = re.compile(
    r"<[^<>\s]*>"
    r"|\"(?:\\.|[^\"\\\n])*\""
    r"|'(?:\\.|[^'\\\n])*'"
    r"|(?P<var>[?$]\w+)"
)

# ---------------------------------------------------------------------------
# Character classes (XML Name / SPARQL PN_CHARS productions)
# ---------------------------------------------------------------------------

_BASE_RANGES = (
    (0xC0, 0xD6), (0xD8, 0xF6), (0xF8, 0x2FF), (0x370, 0x37D), (0x37F, 0x1FFF),
    (0x200C, 0x200D), (0x2070, 0x218F), (0x2C00, 0x2FEF), (0x3001, 0xD7FF),
    (0xF900, 0xFDCF), (0xFDF0, 0xFFFD), (0x10000, 0xEFFFF),
)
_EXTRA_NAME_RANGES = ((0xB7, 0xB7), (0x300, 0x36F), (0x203F, 0x2040))


def _in_ranges(c: str, ranges) -> bool:
    o = ord(c)
    return any(lo <= o <= hi for lo, hi in ranges)


def is_pn_chars_base(c: str) -> bool:
    return "A" <= c <= "Z" or "a" <= c <= "z" or _in_ranges(c, _BASE_RANGES)


def is_pn_chars_u(c: str) -> bool:
    return c == "_" or is_pn_chars_base(c)


def is_pn_chars(c: str) -> bool:
    return is_pn_chars_u(c) or c == "-" or "0" <= c <= "9" or _in_ranges(c, _EXTRA_NAME_RANGES)


def is_name_start_char(c: str) -> bool:
    return c == ":" or is_pn_chars_u(c)


def is_name_char(c: str) -> bool:
    return is_name_start_char(c) or c in "-." or "0" <= c <= "9" or _in_ranges(c, _EXTRA_NAME_RANGES)


def is_punctuation(c: str) -> bool:
    return unicodedata.category(c).startswith("P")


NEWLINES = ("\n", "\r", "\r\n", "\n\r")


def is_newline(text: str) -> bool:
    return text in NEWLINES


# ---------------------------------------------------------------------------
# Partial-token validity
# ---------------------------------------------------------------------------


def is_valid_partial_qname(value: str, digit_local_start: bool = False) -> bool:
    """Could *value* still grow into a ``prefix:local`` name?"""
    ns, _, local = value.partition(":")

    if ns:
        if ns[0] == "_" or not is_name_start_char(ns[0]):
            return False
        if any(c == "." or not is_name_char(c) for c in ns[1:]):
            return False

    if local:
        first = local[0]
        if not (is_name_start_char(first) or (digit_local_start and first.isnumeric())):
            return False
        if any(c == "." or not is_name_char(c) for c in local[1:]):
            return False

    return True


def is_valid_partial_blank_node_id(value: str) -> bool:
    if value == "_:":
        return True
    if len(value) > 2 and value.startswith("_:"):
        first = value[2]
        # can't start with a digit, hyphen or underscore
        return not (first.isdigit() or first in "-_")
    return False


def is_valid_partial_variable_name(value: str) -> bool:
    if not value or value[0] not in "?$":
        return False
    if len(value) == 1:
        return True
    first, rest = value[1], value[2:]
    if not (first.isdigit() or is_pn_chars_u(first)):
        return False
    return all(c == "." or is_pn_chars(c) for c in rest)


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SyntaxProfile:
    name: str
    openers: Mapping[str, CompletionState]
    words: bool = False                                   # letters open KEYWORD_OR_QNAME
    keywords: Tuple[CompletionData, ...] = ()             # keyword list entries (incl. templates)
    declaration_style: Optional[str] = None               # None → '@' never opens a declaration
    declarations: Tuple[CompletionData, ...] = ()         # static tail of the '@' suggestion list
    directives: Mapping[str, CompletionState] = field(default_factory=dict)
    prefix_patterns: Tuple[Pattern, ...] = ()
    blank_node_pattern: Pattern = TURTLE_BNODE_RE
    variable_pattern: Optional[Pattern] = None
    long_literals: bool = True
    digit_local_names: bool = False

    def opener(self, c: str) -> CompletionState:
        if self.words and c.isalpha():
            return CompletionState.KEYWORD_OR_QNAME
        return self.openers.get(c, CompletionState.NONE)

    def is_valid_partial_keyword(self, value: str) -> bool:
        if not value:
            return False
        return any(
            kw.kind is CompletionKind.KEYWORD and kw.insertion_text.startswith(value)
            for kw in self.keywords
        )

    def is_valid_partial_qname(self, value: str) -> bool:
        return is_valid_partial_qname(value, self.digit_local_names)

    def match_directive(self, text: str) -> CompletionState:
        """State for the directive word typed after ``@`` (``NONE`` if none fits)."""
        for word, state in self.directives.items():
            n = min(len(word), len(text))
            if word[:n] == text[:n]:
                return state
        return CompletionState.NONE


# ---------------------------------------------------------------------------
# Keyword sets
# ---------------------------------------------------------------------------

TURTLE_KEYWORDS = (
    suggestions.keyword("a", f"Shorthand for RDF type predicate - equivalent to the URI <{RDF.type}>"),
    suggestions.keyword("false", f'Keyword representing false - equivalent to the literal "false"^^<{XSD.boolean}>'),
    suggestions.keyword("true", f'Keyword representing true - equivalent to the literal "true"^^<{XSD.boolean}>'),
)

N3_KEYWORDS = TURTLE_KEYWORDS + (
    suggestions.keyword("has", "Notation3 keyword introducing a predicate (has p of o)"),
    suggestions.keyword("is", "Notation3 keyword for inverse statements (is p of o)"),
    suggestions.keyword("of", "Notation3 keyword closing an inverse statement (is p of o)"),
)

SPARQL_QUERY10_KEYWORDS = (
    "BASE PREFIX SELECT DISTINCT REDUCED CONSTRUCT DESCRIBE ASK FROM NAMED WHERE ORDER BY ASC DESC "
    "LIMIT OFFSET OPTIONAL GRAPH UNION FILTER STR LANG LANGMATCHES DATATYPE BOUND SAMETERM "
    "ISIRI ISURI ISBLANK ISLITERAL REGEX"
).split()

SPARQL_QUERY11_KEYWORDS = (
    "ABS ALL AS AVG BIND BNODE CEIL COALESCE CONCAT CONTAINS COUNT DAY ENCODE_FOR_URI EXISTS FLOOR "
    "GROUP GROUP_CONCAT HAVING HOURS IF IN IRI ISNUMERIC LCASE MAX MD5 MIN MINUS MINUTES MONTH NOT "
    "NOW RAND ROUND SAMPLE SECONDS SEPARATOR SERVICE SHA1 SHA256 SHA384 SHA512 STRAFTER STRBEFORE "
    "STRDT STRENDS STRLANG STRLEN STRSTARTS STRUUID SUBSTR SUM TIMEZONE TZ UCASE UNDEF URI UUID "
    "VALUES YEAR"
).split()

SPARQL_UPDATE11_KEYWORDS = (
    "ADD CLEAR COPY CREATE DATA DEFAULT DELETE DROP INSERT INTO LOAD MOVE SILENT TO USING WITH"
).split()


def _keyword_variants(words: Iterable[str]) -> Tuple[CompletionData, ...]:
    out = []
    for word in words:
        out.append(suggestions.keyword(word))
        out.append(suggestions.keyword(word.lower()))
    return tuple(out)


def _vocab_declarations(vocabularies: Iterable[VocabularyDefinition], style: str) -> Tuple[CompletionData, ...]:
    return tuple(
        suggestions.prefix_declaration(v.prefix, v.namespace_uri, style, v.description)
        for v in vocabularies
    )


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------

_NTRIPLES_OPENERS = {
    "_": CompletionState.BNODE,
    "<": CompletionState.URI,
    "#": CompletionState.COMMENT,
    '"': CompletionState.LITERAL,
}

_TURTLE_OPENERS = dict(_NTRIPLES_OPENERS, **{
    "@": CompletionState.DECLARATION,
    ":": CompletionState.QNAME,
})

_SPARQL_OPENERS = dict(_NTRIPLES_OPENERS, **{
    ":": CompletionState.QNAME,
    "'": CompletionState.ALTERNATE_LITERAL,
    "?": CompletionState.VARIABLE,
    "$": CompletionState.VARIABLE,
})

_TURTLE_DIRECTIVES = {"prefix": CompletionState.PREFIX, "base": CompletionState.BASE}


def ntriples(_vocabularies: Iterable[VocabularyDefinition] = BUILTIN_VOCABULARIES) -> SyntaxProfile:
    """N-Triples has no prefixes; the argument only keeps the factory signatures alike."""
    return SyntaxProfile(name="NTriples", openers=_NTRIPLES_OPENERS, long_literals=False)


def turtle(vocabularies: Iterable[VocabularyDefinition] = BUILTIN_VOCABULARIES) -> SyntaxProfile:
    return SyntaxProfile(
        name="Turtle",
        openers=_TURTLE_OPENERS,
        words=True,
        keywords=TURTLE_KEYWORDS,
        declaration_style="turtle",
        declarations=_vocab_declarations(vocabularies, "turtle"),
        directives=_TURTLE_DIRECTIVES,
        prefix_patterns=(TURTLE_PREFIX_RE, SPARQL_PREFIX_RE),
    )


def notation3(vocabularies: Iterable[VocabularyDefinition] = BUILTIN_VOCABULARIES) -> SyntaxProfile:
    n3_directives = (
        suggestions.directive("keywords", "@keywords a, is, of, has .", "Declares the bare-word keywords"),
        suggestions.directive("forAll", "@forAll :x .", "Universally quantified variables"),
        suggestions.directive("forSome", "@forSome :x .", "Existentially quantified variables"),
    )
    return SyntaxProfile(
        name="Notation3",
        openers=_TURTLE_OPENERS,
        words=True,
        keywords=N3_KEYWORDS,
        declaration_style="turtle",
        declarations=_vocab_declarations(vocabularies, "turtle") + n3_directives,
        directives=dict(_TURTLE_DIRECTIVES, **{
            "keywords": CompletionState.DECLARATION,
            "forAll": CompletionState.DECLARATION,
            "forSome": CompletionState.DECLARATION,
        }),
        prefix_patterns=(TURTLE_PREFIX_RE,),
    )


def _sparql(name: str, words: Iterable[str], vocabularies: Iterable[VocabularyDefinition]) -> SyntaxProfile:
    templates = (
        suggestions.base_declaration("sparql"),
        suggestions.default_prefix_declaration("sparql"),
    ) + _vocab_declarations(vocabularies, "sparql")
    keywords = set(_keyword_variants(list(words) + ["true", "false"]))
    keywords.add(TURTLE_KEYWORDS[0])  # 'a'
    return SyntaxProfile(
        name=name,
        openers=_SPARQL_OPENERS,
        words=True,
        keywords=templates + tuple(sorted(keywords)),
        prefix_patterns=(SPARQL_PREFIX_RE,),
        blank_node_pattern=SPARQL_BNODE_RE,
        variable_pattern=VARIABLE_RE,
        digit_local_names=True,
    )


def sparql_query10(vocabularies: Iterable[VocabularyDefinition] = BUILTIN_VOCABULARIES) -> SyntaxProfile:
    return _sparql("SparqlQuery10", SPARQL_QUERY10_KEYWORDS, vocabularies)


def sparql_query11(vocabularies: Iterable[VocabularyDefinition] = BUILTIN_VOCABULARIES) -> SyntaxProfile:
    return _sparql("SparqlQuery11", SPARQL_QUERY10_KEYWORDS + SPARQL_QUERY11_KEYWORDS, vocabularies)


def sparql_update11(vocabularies: Iterable[VocabularyDefinition] = BUILTIN_VOCABULARIES) -> SyntaxProfile:
    return _sparql(
        "SparqlUpdate11",
        SPARQL_QUERY10_KEYWORDS + SPARQL_QUERY11_KEYWORDS + SPARQL_UPDATE11_KEYWORDS,
        vocabularies,
    )
