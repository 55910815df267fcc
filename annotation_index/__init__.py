"""Annotation indexing engine.

Scans Go packages, extracts annotations from documentation comments,
binds them to the type, function or method they decorate and exposes the
result as a read-only QueryIndex.

    from annotation_index import IndexerConfig, collect

    index = collect(IndexerConfig(roots=["./app"], filters=["Rest"]))
    for entry in index.with_name("RestResponse"):
        ...
"""

from .collector import collect, collect_from
from .config import IndexerConfig, load_indexer_config
from .decoder import DecodeStrategy, decode
from .exceptions import (
    AnnotationIndexError,
    ConfigurationError,
    DecodeError,
    MalformedAnnotationError,
    ResolutionError,
)
from .grammar import GrammarDialect, KeyedGrammar, PositionalGrammar, build_grammar
from .index import QueryIndex
from .models import Annotation, Entry, FuncDecl, Header, MethodDecl, Parameter, Result, TypeDecl
from .walker import PackageGraphWalker, VisitedSet

__version__ = "0.1.0"

__all__ = [
    "Annotation",
    "AnnotationIndexError",
    "ConfigurationError",
    "DecodeError",
    "DecodeStrategy",
    "Entry",
    "FuncDecl",
    "GrammarDialect",
    "Header",
    "IndexerConfig",
    "KeyedGrammar",
    "MalformedAnnotationError",
    "MethodDecl",
    "PackageGraphWalker",
    "Parameter",
    "PositionalGrammar",
    "QueryIndex",
    "ResolutionError",
    "Result",
    "TypeDecl",
    "VisitedSet",
    "build_grammar",
    "collect",
    "collect_from",
    "decode",
    "load_indexer_config",
]
