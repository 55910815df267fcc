"""Source introspection provider for Go modules, built on tree-sitter."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tree_sitter_language_pack import get_parser

from ..exceptions import ConfigurationError, ResolutionError
from ..models import Parameter, Result
from ..utils.logging import logger
from . import go_impl
from .base import (
    CommentBlock,
    CompilationUnit,
    Declaration,
    DeclarationKind,
    LoadedPackage,
    Signature,
    SourceIntrospectionProvider,
)
from .go_module import GoModule, GoPackageResolver, ResolvedPackage, find_go_mod, parse_go_mod


@dataclass
class _UnitSource:
    """Parsed state of one file, computed once at load time."""

    tree: Any
    context: go_impl.TypeContext
    declarations: list[Declaration] = field(default_factory=list)
    blocks: list[CommentBlock] = field(default_factory=list)


@dataclass(frozen=True)
class _DeclSource:
    node: Any
    context: go_impl.TypeContext


class TreeSitterGoProvider(SourceIntrospectionProvider):
    """Loads Go packages from a module tree with the tree-sitter Go grammar.

    Args:
        root: Any directory inside the main module (go.mod is searched upwards)
        module_cache: Override for $GOMODCACHE
        goroot: Override for $GOROOT
        include_tests: Also load ``*_test.go`` files
    """

    def __init__(
        self,
        root: str | Path,
        module_cache: Path | None = None,
        goroot: Path | None = None,
        include_tests: bool = False,
    ):
        go_mod = find_go_mod(Path(root))
        if go_mod is None:
            raise ConfigurationError(f"no go.mod found at or above {root}", {"root": str(root)})

        try:
            self.module: GoModule = parse_go_mod(go_mod)
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"cannot read {go_mod}: {e}", {"go_mod": str(go_mod)}) from e

        self.resolver = GoPackageResolver(self.module, module_cache, goroot)
        self.include_tests = include_tests
        self.parser = get_parser("go")
        logger.debug(f"go module {self.module.path} at {self.module.root}")

    def _locate(self, identifier: str) -> tuple[str, ResolvedPackage]:
        directory = Path(identifier)
        looks_like_dir = identifier.startswith((".", "/")) or directory.is_absolute()
        if looks_like_dir or (directory.is_dir() and not identifier.startswith(self.module.path)):
            directory = directory.resolve()
            try:
                import_path = self.resolver.import_path_for(directory)
            except ValueError as e:
                raise ResolutionError(identifier, f"directory is outside module {self.module.path}") from e
            return import_path, ResolvedPackage(directory, self.module.path, self.module.root)

        resolved = self.resolver.resolve(identifier)
        if resolved is None:
            raise ResolutionError(identifier, "package not found in module, vendor, module cache or GOROOT")
        return identifier, resolved

    def _source_files(self, identifier: str, directory: Path) -> list[Path]:
        if not directory.is_dir():
            raise ResolutionError(identifier, f"no such directory {directory}")
        files = sorted(
            (p for p in directory.glob("*.go")
             if p.is_file() and (self.include_tests or not p.name.endswith("_test.go"))),
            key=lambda p: (p.name.endswith("_test.go"), p.name),
        )
        if not files:
            raise ResolutionError(identifier, f"no Go files in {directory}")
        return files

    def canonical_path(self, identifier: str) -> str:
        return self._locate(identifier)[0]

    def load_package(self, identifier: str) -> LoadedPackage:
        import_path, resolved = self._locate(identifier)
        logger.trace(f"loading package {import_path} from {resolved.directory}")

        units = []
        imports: dict[str, None] = {}
        package_name = None

        for file in self._source_files(identifier, resolved.directory):
            try:
                content = file.read_bytes()
            except OSError as e:
                raise ResolutionError(identifier, f"cannot read {file}: {e}") from e

            tree = self.parser.parse(content)
            if tree.root_node.has_error:
                raise ResolutionError(identifier, f"syntax error in {file.name}", {"file": str(file)})
            if go_impl.has_ignore_constraint(tree):
                logger.debug(f"skipping {file.name}: excluded by build constraint")
                continue

            name = go_impl.extract_go_package(tree)
            if name is None:
                raise ResolutionError(identifier, f"missing package clause in {file.name}")
            if name.endswith("_test") and package_name is not None and name != package_name:
                logger.debug(f"skipping {file.name}: external test package {name}")
                continue
            if package_name is None:
                package_name = name
            elif name != package_name:
                raise ResolutionError(
                    identifier,
                    f"found packages {package_name} and {name} in {resolved.directory}",
                )

            file_imports = go_impl.extract_go_imports(tree)
            for imp in file_imports:
                imports.setdefault(imp["path"], None)

            context = go_impl.TypeContext(
                package_path=import_path,
                aliases=go_impl.import_aliases(file_imports),
            )
            source = _UnitSource(tree=tree, context=context)
            self._index_unit(source)

            try:
                rel = file.relative_to(resolved.module_root).as_posix()
            except ValueError:
                rel = file.name

            units.append(
                CompilationUnit(
                    path=rel,
                    package=name,
                    imports=tuple(imp["path"] for imp in file_imports),
                    source=source,
                )
            )

        if not units:
            raise ResolutionError(identifier, f"all Go files in {resolved.directory} are excluded")

        return LoadedPackage(
            identifier=identifier,
            path=import_path,
            name=package_name,
            module=resolved.module,
            units=tuple(units),
            imports=tuple(imports),
        )

    def _index_unit(self, source: _UnitSource) -> None:
        by_line: dict[int, Declaration] = {}

        for record in go_impl.extract_go_declarations(source.tree):
            doc = record["doc"]
            decl = Declaration(
                kind=DeclarationKind(record["kind"]),
                name=record["name"],
                line=record["line"],
                receiver=record["receiver"] or None,
                doc_lines=tuple(doc.lines) if doc else (),
                node=_DeclSource(record["node"], source.context),
            )
            source.declarations.append(decl)
            if doc is not None:
                by_line[doc.start_line] = decl

        groups = go_impl.extract_comment_groups(source.tree.root_node)
        groups.extend(go_impl.extract_inner_comment_groups(source.tree))
        groups.sort(key=lambda g: g.start_line)

        for group in groups:
            source.blocks.append(
                CommentBlock(
                    lines=tuple(group.lines),
                    line=group.start_line,
                    declaration=by_line.get(group.start_line),
                )
            )

    def enumerate_declarations(self, unit: CompilationUnit) -> list[Declaration]:
        return list(unit.source.declarations)

    def comment_blocks(self, unit: CompilationUnit) -> list[CommentBlock]:
        return list(unit.source.blocks)

    def resolve_signature(self, declaration: Declaration) -> Signature:
        if declaration.kind is not DeclarationKind.FUNCTION:
            raise ValueError(f"{declaration.name} is not a function declaration")

        source: _DeclSource = declaration.node
        params, results = go_impl.extract_signature(source.node, source.context)
        return Signature(
            parameters=tuple(Parameter(name=p.name, type=p.type) for p in params),
            results=tuple(Result(name=r.name, type=r.type) for r in results),
        )
