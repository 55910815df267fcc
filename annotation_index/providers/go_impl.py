"""Go syntax extraction using tree-sitter.

Everything here reads a tree produced by the tree-sitter Go grammar and
returns plain Python data. Type strings are rendered the way go/types
prints them with no qualifier: builtins bare, named types qualified by
their full import path, variadic parameters as slices.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

BUILTIN_TYPES = frozenset({
    "any", "bool", "byte", "comparable", "complex64", "complex128", "error",
    "float32", "float64", "int", "int8", "int16", "int32", "int64", "rune",
    "string", "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
})

DECLARATION_NODES = ("function_declaration", "method_declaration", "type_declaration")
TYPE_SPEC_NODES = ("type_spec", "type_alias")

_VERSION_SUFFIX = re.compile(r"^v\d+$")


@dataclass
class TypeContext:
    """What a type identifier in one file can refer to."""

    package_path: str = ""
    aliases: dict[str, str] = field(default_factory=dict)  # local name -> import path
    type_params: frozenset[str] = frozenset()

    def with_type_params(self, names) -> TypeContext:
        return TypeContext(self.package_path, self.aliases, self.type_params | frozenset(names))


@dataclass
class CommentGroup:
    lines: list[str]
    start_line: int  # 1-based
    end_line: int
    documents: Any = None  # Node the group immediately precedes, if any


def _get_node_text(node: Any) -> str:
    """Extract text from a tree-sitter node."""
    if node is None:
        return ""
    return node.text.decode("utf-8", errors="ignore")


def _normalize(text: str) -> str:
    return " ".join(text.split())


def node_key(node: Any) -> tuple[str, int, int]:
    """Stable identity for a node; wrapper objects are recreated on each access."""
    return (node.type, node.start_byte, node.end_byte)


def _find_child_by_type(node: Any, child_type: str) -> Any | None:
    """Find first child of given type."""
    if node is None:
        return None
    for child in node.children:
        if child.type == child_type:
            return child
    return None


def _find_children_by_type(node: Any, child_type: str) -> list[Any]:
    """Find all children of given type."""
    if node is None:
        return []
    return [child for child in node.children if child.type == child_type]


def default_package_name(import_path: str) -> str:
    """Best guess of the package name an import path is referred to by.

    github.com/labstack/echo/v4 -> echo, gopkg.in/yaml.v3 -> yaml,
    github.com/mattn/go-sqlite3 -> sqlite3
    """
    parts = [p for p in import_path.split("/") if p]
    if not parts:
        return ""
    name = parts[-1]
    if _VERSION_SUFFIX.match(name) and len(parts) > 1:
        name = parts[-2]
    name = re.sub(r"\.v\d+$", "", name)
    if name.startswith("go-"):
        name = name[3:]
    if name.endswith("-go"):
        name = name[:-3]
    return name.replace("-", "_").replace(".", "_")


def extract_go_package(tree: Any) -> str | None:
    """Return the package clause name of a Go file."""
    pkg_clause = _find_child_by_type(tree.root_node, "package_clause")
    if not pkg_clause:
        return None
    pkg_id = _find_child_by_type(pkg_clause, "package_identifier")
    return _get_node_text(pkg_id) if pkg_id else None


def has_ignore_constraint(tree: Any) -> bool:
    """Check for a ``//go:build ignore`` line ahead of the package clause."""
    for child in tree.root_node.children:
        if child.type == "package_clause":
            return False
        if child.type == "comment":
            text = _get_node_text(child).strip()
            if text.startswith("//go:build") and "ignore" in text.split()[1:]:
                return True
    return False


def extract_go_imports(tree: Any) -> list[dict]:
    """Extract import declarations from a Go file."""
    imports = []

    for import_decl in _find_children_by_type(tree.root_node, "import_declaration"):
        # Single import: import "fmt"
        single_spec = _find_child_by_type(import_decl, "import_spec")
        if single_spec:
            imports.append(_parse_import_spec(single_spec))
            continue

        # Grouped imports: import ( "fmt" \n "os" )
        spec_list = _find_child_by_type(import_decl, "import_spec_list")
        if spec_list:
            for spec in _find_children_by_type(spec_list, "import_spec"):
                imports.append(_parse_import_spec(spec))

    return [i for i in imports if i is not None]


def _parse_import_spec(spec: Any) -> dict | None:
    path_node = spec.child_by_field_name("path") or _find_child_by_type(spec, "interpreted_string_literal")
    if not path_node:
        return None

    path = _get_node_text(path_node).strip('"`')

    name_node = spec.child_by_field_name("name")
    alias = None
    is_dot_import = False
    if name_node is not None:
        if name_node.type == "dot":
            is_dot_import = True
        else:
            alias = _get_node_text(name_node)

    return {
        "line": spec.start_point[0] + 1,
        "path": path,
        "alias": alias,
        "is_dot_import": is_dot_import,
    }


def import_aliases(imports: list[dict]) -> dict[str, str]:
    """Map the local name of each import to its import path."""
    aliases = {}
    for imp in imports:
        if imp["is_dot_import"] or imp["alias"] == "_":
            continue
        aliases[imp["alias"] or default_package_name(imp["path"])] = imp["path"]
    return aliases


def _comment_lines(node: Any) -> list[str]:
    text = _get_node_text(node)
    if text.startswith("/*"):
        return [line.rstrip() for line in text.split("\n")]
    return [text.rstrip()]


def extract_comment_groups(container: Any) -> list[CommentGroup]:
    """Group adjacent comment children of ``container``.

    Comments on consecutive lines form one group. A comment that shares its
    line with preceding code is a trailing comment and forms a group of its
    own. A group documents the node that starts on the line right after it.
    """
    groups: list[CommentGroup] = []
    current: CommentGroup | None = None
    trailing = False
    previous_code_end = -1

    for child in container.children:
        # Statement terminators ("\n", ";") end on the following row
        if not child.is_named and not _get_node_text(child).strip(" \t\r\n;\0"):
            continue

        start_row = child.start_point[0]
        if child.type == "comment":
            same_line_as_code = start_row == previous_code_end
            if current is not None and not trailing and not same_line_as_code and start_row <= current.end_line:
                current.lines.extend(_comment_lines(child))
                current.end_line = child.end_point[0] + 1
                continue
            current = CommentGroup(
                lines=_comment_lines(child),
                start_line=start_row + 1,
                end_line=child.end_point[0] + 1,
            )
            trailing = same_line_as_code
            groups.append(current)
            continue

        if current is not None and not trailing and child.is_named and start_row == current.end_line:
            current.documents = child
        current = None
        trailing = False
        previous_code_end = child.end_point[0]

    return groups


def receiver_type_name(method_decl: Any) -> str:
    """Bare type name a method is bound to: ``(l *List[T])`` -> ``List``."""
    receiver = method_decl.child_by_field_name("receiver")
    param = _find_child_by_type(receiver, "parameter_declaration")
    node = param.child_by_field_name("type") if param else None
    while node is not None and node.type in ("pointer_type", "generic_type", "parenthesized_type"):
        if node.type == "generic_type":
            node = node.child_by_field_name("type")
        else:
            node = node.named_children[0] if node.named_children else None
    return _get_node_text(node) if node is not None else ""


def extract_go_declarations(tree: Any) -> list[dict]:
    """Extract file-scope type, function and method declarations.

    Each record carries the comment group that documents it, if any.
    Specs of a grouped ``type ( ... )`` declaration are documented by the
    comments inside the group; the group's own doc comment documents the
    declaration only when it has a single spec.
    """
    root = tree.root_node
    docs = {node_key(g.documents): g for g in extract_comment_groups(root) if g.documents is not None}
    declarations = []

    for child in root.children:
        if child.type not in DECLARATION_NODES:
            continue

        if child.type == "type_declaration":
            specs = [c for c in child.children if c.type in TYPE_SPEC_NODES]
            inner_docs = {node_key(g.documents): g for g in extract_comment_groups(child) if g.documents is not None}
            for spec in specs:
                doc = inner_docs.get(node_key(spec))
                if doc is None and len(specs) == 1:
                    doc = docs.get(node_key(child))
                declarations.append({
                    "kind": "type",
                    "name": _get_node_text(spec.child_by_field_name("name")),
                    "line": spec.start_point[0] + 1,
                    "receiver": None,
                    "doc": doc,
                    "node": spec,
                })
            continue

        receiver = receiver_type_name(child) if child.type == "method_declaration" else None
        declarations.append({
            "kind": "function",
            "name": _get_node_text(child.child_by_field_name("name")),
            "line": child.start_point[0] + 1,
            "receiver": receiver,
            "doc": docs.get(node_key(child)),
            "node": child,
        })

    return declarations


def extract_inner_comment_groups(tree: Any) -> list[CommentGroup]:
    """Comment groups inside grouped type declarations."""
    groups = []
    for type_decl in _find_children_by_type(tree.root_node, "type_declaration"):
        groups.extend(extract_comment_groups(type_decl))
    return groups


def _type_param_names(node: Any) -> list[str]:
    params = node.child_by_field_name("type_parameters") if node is not None else None
    names = []
    if params is None:
        return names
    for decl in params.named_children:
        for name in decl.children_by_field_name("name"):
            names.append(_get_node_text(name))
    return names


def canonical_type(node: Any, ctx: TypeContext) -> str:
    """Render a type node as go/types would."""
    if node is None:
        return ""

    t = node.type
    named = node.named_children

    if t == "type_identifier":
        name = _get_node_text(node)
        if name in BUILTIN_TYPES or name in ctx.type_params or not ctx.package_path:
            return name
        return f"{ctx.package_path}.{name}"

    if t == "qualified_type":
        pkg = _get_node_text(node.child_by_field_name("package"))
        name = _get_node_text(node.child_by_field_name("name"))
        return f"{ctx.aliases.get(pkg, pkg)}.{name}"

    if t in ("pointer_type",) and named:
        return "*" + canonical_type(named[0], ctx)

    if t == "slice_type":
        return "[]" + canonical_type(node.child_by_field_name("element"), ctx)

    if t == "array_type":
        length = _normalize(_get_node_text(node.child_by_field_name("length")))
        return f"[{length}]" + canonical_type(node.child_by_field_name("element"), ctx)

    if t == "map_type":
        key = canonical_type(node.child_by_field_name("key"), ctx)
        value = canonical_type(node.child_by_field_name("value"), ctx)
        return f"map[{key}]{value}"

    if t == "channel_type":
        value = node.child_by_field_name("value")
        prefix = _get_node_text(node)[: value.start_byte - node.start_byte] if value else _get_node_text(node)
        direction = prefix.replace(" ", "").replace("\t", "")
        return f"{direction} {canonical_type(value, ctx)}"

    if t == "generic_type":
        base = canonical_type(node.child_by_field_name("type"), ctx)
        args = node.child_by_field_name("type_arguments")
        rendered = [canonical_type(a, ctx) for a in args.named_children] if args else []
        return f"{base}[{', '.join(rendered)}]"

    if t in ("type_elem", "parenthesized_type") and len(named) == 1:
        return canonical_type(named[0], ctx)

    if t == "function_type":
        params = [p.type for p in parse_parameter_list(node.child_by_field_name("parameters"), ctx)]
        results = _render_results(parse_result(node.child_by_field_name("result"), ctx))
        return f"func({', '.join(params)}){results}"

    if t == "interface_type" and not named:
        return "interface{}"

    if t == "struct_type":
        fields = node.child_by_field_name("body") or _find_child_by_type(node, "field_declaration_list")
        if fields is None or not fields.named_children:
            return "struct{}"

    return _normalize(_get_node_text(node))


def _render_results(results: list) -> str:
    if not results:
        return ""
    if len(results) == 1 and not results[0].name:
        return " " + results[0].type
    return " (" + ", ".join(r.type for r in results) + ")"


@dataclass(frozen=True)
class _Field:
    name: str
    type: str


def parse_parameter_list(param_list: Any, ctx: TypeContext) -> list[_Field]:
    """Parse a parameter list into ordered (name, type) fields.

    ``a, b int`` yields two fields; unnamed parameters get an empty name;
    ``args ...string`` is rendered ``[]string``.
    """
    fields: list[_Field] = []
    if param_list is None:
        return fields

    for decl in param_list.named_children:
        if decl.type not in ("parameter_declaration", "variadic_parameter_declaration"):
            continue
        type_str = canonical_type(decl.child_by_field_name("type"), ctx)
        if decl.type == "variadic_parameter_declaration":
            type_str = "[]" + type_str

        names = decl.children_by_field_name("name")
        if names:
            fields.extend(_Field(_get_node_text(n), type_str) for n in names)
        else:
            fields.append(_Field("", type_str))

    return fields


def parse_result(result: Any, ctx: TypeContext) -> list[_Field]:
    if result is None:
        return []
    if result.type == "parameter_list":
        return parse_parameter_list(result, ctx)
    return [_Field("", canonical_type(result, ctx))]


def extract_signature(func_decl: Any, ctx: TypeContext) -> tuple[list[_Field], list[_Field]]:
    """Ordered parameters and results of a function or method declaration."""
    type_params = _type_param_names(func_decl)

    if func_decl.type == "method_declaration":
        # Receiver type parameters: func (l *List[T]) Len() T
        receiver = func_decl.child_by_field_name("receiver")
        param = _find_child_by_type(receiver, "parameter_declaration")
        node = param.child_by_field_name("type") if param else None
        if node is not None and node.type == "pointer_type" and node.named_children:
            node = node.named_children[0]
        if node is not None and node.type == "generic_type":
            args = node.child_by_field_name("type_arguments")
            if args is not None:
                type_params.extend(_normalize(_get_node_text(a)) for a in args.named_children)

    if type_params:
        ctx = ctx.with_type_params(type_params)

    params = parse_parameter_list(func_decl.child_by_field_name("parameters"), ctx)
    results = parse_result(func_decl.child_by_field_name("result"), ctx)
    return params, results
