"""Test helpers - an in-memory provider for walker and binder tests."""

from annotation_index.exceptions import ResolutionError
from annotation_index.providers.base import (
    CommentBlock,
    CompilationUnit,
    Declaration,
    DeclarationKind,
    LoadedPackage,
    Signature,
    SourceIntrospectionProvider,
)


class FakeProvider(SourceIntrospectionProvider):
    """Import graph plus optional units per package.

    Records every load so tests can assert each package is loaded once.
    """

    def __init__(self, graph, units=None, signatures=None, module="example.com/m", failing=()):
        self.graph = graph
        self.units = units or {}
        self.signatures = signatures or {}
        self.module = module
        self.failing = set(failing)
        self.loads = []

    def load_package(self, identifier):
        self.loads.append(identifier)
        if identifier in self.failing or identifier not in self.graph:
            raise ResolutionError(identifier, "unknown package")
        return LoadedPackage(
            identifier=identifier,
            path=identifier,
            name=identifier.rsplit("/", 1)[-1],
            module=self.module,
            units=tuple(self.units.get(identifier, ())),
            imports=tuple(self.graph[identifier]),
        )

    def enumerate_declarations(self, unit):
        return list(unit.source["declarations"])

    def comment_blocks(self, unit):
        return list(unit.source["blocks"])

    def resolve_signature(self, declaration):
        return self.signatures.get(declaration.name, Signature())


def make_decl(name, kind="function", receiver=None, line=1):
    return Declaration(kind=DeclarationKind(kind), name=name, line=line, receiver=receiver)


def make_unit(path, blocks, declarations=(), package="m"):
    """Build a unit; ``blocks`` is a list of (lines, attached declaration or None)."""
    comment_blocks = [
        CommentBlock(lines=tuple(lines), line=i + 1, declaration=decl)
        for i, (lines, decl) in enumerate(blocks)
    ]
    return CompilationUnit(
        path=path,
        package=package,
        source={"declarations": list(declarations), "blocks": comment_blocks},
    )
