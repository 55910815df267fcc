"""Declaration binder.

Turns the comment blocks of a loaded package into Entries: every block
with at least one surviving annotation yields exactly one Entry, bound to
the declaration it documents when there is one.
"""

from __future__ import annotations

from .grammar import COMMENT_PREFIX, AnnotationGrammar
from .models import Entry, FuncDecl, Header, MethodDecl, TypeDecl
from .providers.base import (
    CompilationUnit,
    Declaration,
    DeclarationKind,
    LoadedPackage,
    SourceIntrospectionProvider,
)
from .utils.logging import logger


def _strip_comment(line: str) -> str:
    line = line.strip()
    if line.startswith(COMMENT_PREFIX):
        return line[len(COMMENT_PREFIX):]
    if line.startswith("/*"):
        return line[2:].removesuffix("*/")
    return line


def parse_header(lines: tuple[str, ...] | list[str], grammar: AnnotationGrammar) -> tuple[str, Header]:
    """Split a block into the expected declaration name and its Header.

    The first line reads ``// <Name> <title words...>``. Later lines that
    are neither annotations nor blank make up the description.
    """
    tokens = _strip_comment(lines[0]).split() if lines else []
    name = tokens[0] if tokens else ""
    title = " ".join(tokens[1:])

    description = []
    for line in lines[1:]:
        if grammar.is_candidate(line.rstrip()):
            continue
        text = _strip_comment(line).strip()
        if text:
            description.append(text)

    return name, Header(title=title, description=" ".join(description))


class DeclarationBinder:
    """Associates documentation blocks with the declarations they decorate."""

    def __init__(self, provider: SourceIntrospectionProvider, grammar: AnnotationGrammar):
        self.provider = provider
        self.grammar = grammar

    def bind_package(self, pkg: LoadedPackage) -> list[Entry]:
        """Build the Entries of every compilation unit, in file then block order."""
        declarations = {unit.path: self.provider.enumerate_declarations(unit) for unit in pkg.units}
        type_names = {
            decl.name
            for decls in declarations.values()
            for decl in decls
            if decl.kind is DeclarationKind.TYPE
        }

        entries = []
        for unit in pkg.units:
            entries.extend(self.bind_unit(pkg, unit, declarations[unit.path], type_names))
        return entries

    def bind_unit(
        self,
        pkg: LoadedPackage,
        unit: CompilationUnit,
        declarations: list[Declaration],
        type_names: set[str],
    ) -> list[Entry]:
        logger.trace(f"parsing file {unit.path}")

        entries = []
        for block in self.provider.comment_blocks(unit):
            annotations = self.grammar.parse_block(block.lines)
            if not annotations:
                continue

            name, header = parse_header(block.lines, self.grammar)
            declaration = block.declaration or self._match_by_name(name, declarations)

            entries.append(
                Entry(
                    header=header,
                    module=pkg.module,
                    file=unit.path,
                    path=pkg.path,
                    package=pkg.name,
                    declaration=self._decorate(declaration, type_names) if declaration else None,
                    annotations=tuple(annotations),
                )
            )
        return entries

    def _match_by_name(self, name: str, declarations: list[Declaration]) -> Declaration | None:
        if not name:
            return None
        for decl in declarations:
            if decl.name == name:
                return decl
        logger.debug(f"no declaration named {name}, recording a bare entry")
        return None

    def _decorate(self, decl: Declaration, type_names: set[str]):
        if decl.kind is DeclarationKind.TYPE:
            return TypeDecl(name=decl.name)

        logger.trace(f"parsing func {decl.name}")
        signature = self.provider.resolve_signature(decl)

        if decl.receiver and decl.receiver in type_names:
            return MethodDecl(
                receiver=decl.receiver,
                name=decl.name,
                parameters=signature.parameters,
                results=signature.results,
            )
        return FuncDecl(name=decl.name, parameters=signature.parameters, results=signature.results)
