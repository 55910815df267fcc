"""Abstract source introspection provider.

The indexer never parses or type-checks source itself. A provider loads
packages, lists their top-level declarations and comment blocks, and
resolves function signatures into canonical type strings.

Implementations must provide:
- load_package(): Load one package by import path or directory
- enumerate_declarations(): Top-level type/function declarations of a unit
- comment_blocks(): Top-level comment groups of a unit
- resolve_signature(): Ordered parameters/results of a function declaration
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ..models import Parameter, Result


class DeclarationKind(str, enum.Enum):
    TYPE = "type"
    FUNCTION = "function"


@dataclass(frozen=True)
class Declaration:
    """A declaration visible at file scope."""

    kind: DeclarationKind
    name: str
    line: int
    receiver: str | None = None  # Bare receiver type name for methods
    doc_lines: tuple[str, ...] = ()  # Comment lines immediately preceding, source order
    node: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class CommentBlock:
    """A group of adjacent comment lines at file scope."""

    lines: tuple[str, ...]
    line: int
    declaration: Declaration | None = None  # Set when the block documents it


@dataclass(frozen=True)
class Signature:
    parameters: tuple[Parameter, ...] = ()
    results: tuple[Result, ...] = ()


@dataclass(frozen=True)
class CompilationUnit:
    """One source file of a loaded package."""

    path: str  # Module-relative path, forward slashes
    package: str
    imports: tuple[str, ...] = ()
    source: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class LoadedPackage:
    identifier: str  # As requested
    path: str  # Canonical import path
    name: str  # Package clause name
    module: str  # Module path, empty if unknown
    units: tuple[CompilationUnit, ...] = ()
    imports: tuple[str, ...] = ()


class SourceIntrospectionProvider(ABC):
    """Parser/type-checker facade consumed by the walker and the binder."""

    @abstractmethod
    def load_package(self, identifier: str) -> LoadedPackage:
        """Load a package by import path (or directory for roots).

        Raises:
            ResolutionError: If the package cannot be found or parsed
        """
        ...

    def canonical_path(self, identifier: str) -> str:
        """Import path a root identifier (import path or directory) refers to.

        Called before loading so that one package named two ways is
        visited once. The default returns ``identifier`` unchanged.

        Raises:
            ResolutionError: If the identifier cannot be located
        """
        return identifier

    @abstractmethod
    def enumerate_declarations(self, unit: CompilationUnit) -> list[Declaration]:
        """Return file-scope type and function declarations in source order."""
        ...

    @abstractmethod
    def comment_blocks(self, unit: CompilationUnit) -> list[CommentBlock]:
        """Return file-scope comment groups in source order."""
        ...

    @abstractmethod
    def resolve_signature(self, declaration: Declaration) -> Signature:
        """Resolve a function declaration into ordered parameters and results."""
        ...
