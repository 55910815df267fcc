"""Source introspection providers.

Core interface:
- base: SourceIntrospectionProvider and the records it returns

Go support (tree-sitter):
- golang: TreeSitterGoProvider
- go_impl: syntax extraction helpers
- go_module: go.mod parsing and import path resolution
"""

from .base import (
    CommentBlock,
    CompilationUnit,
    Declaration,
    DeclarationKind,
    LoadedPackage,
    Signature,
    SourceIntrospectionProvider,
)

__all__ = [
    "CommentBlock",
    "CompilationUnit",
    "Declaration",
    "DeclarationKind",
    "LoadedPackage",
    "Signature",
    "SourceIntrospectionProvider",
]
