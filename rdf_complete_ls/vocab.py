"""rdf_complete_ls.vocab
~~~~~~~~~~~~~~~~~~~~~
Built-in vocabularies offered in declaration templates, plus the locally
bundled Turtle copies used when a namespace document can't be fetched.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from rdflib.namespace import OWL, RDF, RDFS, XSD

__all__ = ["VocabularyDefinition", "BUILTIN_VOCABULARIES", "default_prefix", "bundled_vocabulary"]

BUNDLED_DIR = Path(__file__).parent / "vocabularies"


@dataclass(frozen=True)
class VocabularyDefinition:
    prefix: str
    namespace_uri: str
    description: str = ""


BUILTIN_VOCABULARIES = (
    # Standard prefixes
    VocabularyDefinition("rdf", str(RDF), "RDF Namespace"),
    VocabularyDefinition("rdfs", str(RDFS), "RDF Schema Namespace"),
    VocabularyDefinition("owl", str(OWL), "OWL Namespace"),
    VocabularyDefinition("xsd", str(XSD), "XML Schema Datatypes Namespace"),
    # Common prefixes
    VocabularyDefinition("dc", "http://purl.org/dc/elements/1.1/", "Dublin Core Elements Namespace"),
    VocabularyDefinition("dcterms", "http://purl.org/dc/terms/", "Dublin Core Terms Namespace"),
    VocabularyDefinition("foaf", "http://xmlns.com/foaf/0.1/", "Friend of a Friend Namespace for describing social networks"),
    VocabularyDefinition("vcard", "http://www.w3.org/2006/vcard/ns#", "VCard Namespace"),
    VocabularyDefinition("gr", "http://purl.org/goodrelations/v1#", "Good Relations Namespace for describing eCommerce"),
    VocabularyDefinition("sioc", "http://rdfs.org/sioc/ns#", "Semantically Interlinked Online Communities Namespace"),
    VocabularyDefinition("doap", "http://usefulinc.com/ns/doap#", "Description of a Project Namespace"),
    VocabularyDefinition("vann", "http://purl.org/vocab/vann/", "Vocabulary Annotation Namespace"),
    VocabularyDefinition("vs", "http://www.w3.org/2003/06/sw-vocab-status/ns#", "Vocabulary Status Namespace"),
    VocabularyDefinition("skos", "http://www.w3.org/2004/02/skos/core#", "Simple Knowledge Organisation System"),
    VocabularyDefinition("geo", "http://www.w3.org/2003/01/geo/wgs84_pos#", "WGS84 Geo Positioning Namespace"),
    # Function namespaces used in SPARQL queries
    VocabularyDefinition("fn", "http://www.w3.org/2005/xpath-functions#", "XPath Functions Namespace"),
    VocabularyDefinition("afn", "http://jena.apache.org/ARQ/function#", "ARQ Functions Namespace"),
)


def default_prefix(namespace_uri: str, vocabularies: Iterable[VocabularyDefinition] = BUILTIN_VOCABULARIES) -> str:
    """Well-known prefix for *namespace_uri*, or ``""``."""
    for vocab in vocabularies:
        if vocab.namespace_uri == namespace_uri:
            return vocab.prefix
    return ""


def bundled_vocabulary(prefix: str) -> Optional[str]:
    """Turtle source of the bundled copy of *prefix*'s vocabulary, if shipped."""
    if not prefix:
        return None
    path = BUNDLED_DIR / f"{prefix}.ttl"
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8")
