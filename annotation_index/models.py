"""Data model for annotations and the entries that carry them.

An Entry is one documentation block's annotations plus the declaration it
decorates. The decorated declaration is a tagged sum: TypeDecl, FuncDecl
or MethodDecl, or nothing at all for a bare entry. Classification
predicates are derived from the payload, so at most one of them can hold.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .exceptions import DecodeError


@dataclass(frozen=True)
class Annotation:
    """A name/value pair extracted from one annotation comment line."""

    name: str
    value: str = ""

    @property
    def fields(self) -> list[str]:
        """Whitespace separated tokens of the value."""
        return self.value.split()

    def mapping(self) -> dict[str, str]:
        """Split the value into key/value pairs.

        Segments are separated by commas when the value has any (keyed
        dialect), by whitespace otherwise (``index=0 name=xpto``). Each
        segment must contain exactly one ``=``.

        Raises:
            DecodeError: If a segment has zero or several ``=``.
        """
        separator = "," if "," in self.value else None
        result: dict[str, str] = {}
        for segment in self.value.strip().split(separator):
            segment = segment.strip()
            if not segment:
                continue
            if segment.count("=") != 1:
                raise DecodeError(
                    f"annotation {self.name}: segment '{segment}' is not a key=value pair",
                    {"annotation": self.name, "value": self.value},
                )
            key, value = segment.split("=")
            result[key.strip()] = value.strip()
        return result

    def decode(self, target: Any, strategy: Any = None, **kwargs: Any) -> Any:
        """Decode the value into ``target``. See :func:`annotation_index.decoder.decode`."""
        from .decoder import DecodeStrategy, decode

        return decode(self, target, strategy or DecodeStrategy.KEYED, **kwargs)

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class Header:
    """First line of a documentation block, minus the declaration name."""

    title: str = ""
    description: str = ""


@dataclass(frozen=True)
class Parameter:
    name: str
    type: str


@dataclass(frozen=True)
class Result:
    name: str
    type: str


@dataclass(frozen=True)
class TypeDecl:
    """A documented type declaration."""

    name: str


@dataclass(frozen=True)
class FuncDecl:
    """A documented free function and its resolved signature."""

    name: str
    parameters: tuple[Parameter, ...] = ()
    results: tuple[Result, ...] = ()


@dataclass(frozen=True)
class MethodDecl:
    """A documented method; ``receiver`` is the bare receiver type name."""

    receiver: str
    name: str
    parameters: tuple[Parameter, ...] = ()
    results: tuple[Result, ...] = ()


Decorated = TypeDecl | FuncDecl | MethodDecl


@dataclass(frozen=True)
class Entry:
    """One indexed documentation block."""

    header: Header
    module: str
    file: str
    path: str
    package: str
    declaration: Decorated | None = None
    annotations: tuple[Annotation, ...] = field(default_factory=tuple)

    @property
    def struct_name(self) -> str:
        if isinstance(self.declaration, TypeDecl):
            return self.declaration.name
        if isinstance(self.declaration, MethodDecl):
            return self.declaration.receiver
        return ""

    @property
    def func_name(self) -> str:
        if isinstance(self.declaration, (FuncDecl, MethodDecl)):
            return self.declaration.name
        return ""

    @property
    def parameters(self) -> tuple[Parameter, ...]:
        if isinstance(self.declaration, (FuncDecl, MethodDecl)):
            return self.declaration.parameters
        return ()

    @property
    def results(self) -> tuple[Result, ...]:
        if isinstance(self.declaration, (FuncDecl, MethodDecl)):
            return self.declaration.results
        return ()

    @property
    def is_type(self) -> bool:
        return isinstance(self.declaration, TypeDecl)

    @property
    def is_func(self) -> bool:
        return isinstance(self.declaration, FuncDecl)

    @property
    def is_method(self) -> bool:
        return isinstance(self.declaration, MethodDecl)

    @property
    def is_bare(self) -> bool:
        return self.declaration is None

    def has_annotation(self, name: str) -> bool:
        return any(ann.name == name for ann in self.annotations)

    def annotations_named(self, name: str) -> list[Annotation]:
        return [ann for ann in self.annotations if ann.name == name]

    def to_dict(self) -> dict[str, Any]:
        """Plain-data view suitable for JSON/YAML emission by the caller."""
        return {
            "header": {"title": self.header.title, "description": self.header.description},
            "module": self.module,
            "file": self.file,
            "path": self.path,
            "package": self.package,
            "struct": self.struct_name,
            "func": {
                "name": self.func_name,
                "parameters": [{"name": p.name, "type": p.type} for p in self.parameters],
                "results": [{"name": r.name, "type": r.type} for r in self.results],
            },
            "annotations": [ann.to_dict() for ann in self.annotations],
        }
