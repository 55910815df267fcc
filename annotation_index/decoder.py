"""Decode raw annotation values into caller-defined records.

The target shape is described explicitly: a dataclass type, whose fields
form the schema, or ``dict`` for a plain mapping. A dataclass field may
declare the annotation key it reads with ``metadata={"attr": "<key>"}``::

    @dataclass
    class RestResponse:
        code: str = field(metadata={"attr": "code"})
        description: str = field(default="", metadata={"attr": "desc"})

    response = decode(annotation, RestResponse, DecodeStrategy.KEYED)

Values are assigned as strings; no coercion or validation is done.
"""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Sequence
from typing import Any

from .exceptions import DecodeError
from .models import Annotation

ATTR_METADATA_KEY = "attr"


class DecodeStrategy(str, enum.Enum):
    POSITIONAL = "positional"
    KEYED = "keyed"


def schema_for(target: type) -> dict[str, str]:
    """Map annotation keys to field names for a dataclass type."""
    if not dataclasses.is_dataclass(target) or not isinstance(target, type):
        raise DecodeError(f"cannot decode into {target!r}: not a dataclass type")

    schema = {}
    for f in dataclasses.fields(target):
        if not f.init:
            continue
        key = f.metadata.get(ATTR_METADATA_KEY, f.name)
        schema[key] = f.name
    return schema


def _positional_mapping(
    tokens: list[str], fields: Sequence[str], greedy: bool, source: str
) -> dict[str, str]:
    if not fields:
        raise DecodeError(f"no field names given for positional value '{source}'")

    if len(tokens) > len(fields):
        if not greedy:
            raise DecodeError(
                f"value '{source}' has {len(tokens)} tokens but only {len(fields)} fields",
                {"fields": list(fields)},
            )
        head = tokens[: len(fields) - 1]
        tokens = head + [" ".join(tokens[len(fields) - 1:])]

    return dict(zip(fields, tokens, strict=False))


def decode(
    source: Annotation | str,
    target: type,
    strategy: DecodeStrategy | str = DecodeStrategy.KEYED,
    fields: Sequence[str] | None = None,
    greedy: bool = False,
) -> Any:
    """Decode an annotation value into an instance of ``target``.

    Args:
        source: Annotation, or its raw value string
        target: Dataclass type, or ``dict``
        strategy: POSITIONAL zips whitespace tokens onto ``fields`` in order;
            KEYED splits the value into ``key=value`` segments
        fields: Ordered keys for POSITIONAL (defaults to the dataclass keys in
            declaration order)
        greedy: For POSITIONAL, join surplus tokens into the last field
            instead of failing

    Returns:
        An instance of ``target`` (a new dict when ``target`` is ``dict``)

    Raises:
        DecodeError: If the value cannot be split, or the target cannot
            absorb the resulting mapping
    """
    annotation = source if isinstance(source, Annotation) else Annotation(name="", value=source)
    strategy = DecodeStrategy(strategy)

    schema = None if target is dict else schema_for(target)

    if strategy is DecodeStrategy.KEYED:
        mapping = annotation.mapping()
    else:
        if fields is None:
            if schema is None:
                raise DecodeError("positional decoding into dict needs explicit field names")
            fields = list(schema)
        mapping = _positional_mapping(annotation.fields, fields, greedy, annotation.value)

    if schema is None:
        return dict(mapping)

    unknown = [key for key in mapping if key not in schema]
    if unknown:
        raise DecodeError(
            f"cannot decode {sorted(unknown)} into {target.__name__}: no matching field",
            {"annotation": annotation.name, "fields": sorted(schema)},
        )

    kwargs = {schema[key]: value for key, value in mapping.items()}
    try:
        return target(**kwargs)
    except TypeError as e:
        raise DecodeError(f"cannot build {target.__name__} from '{annotation.value}': {e}") from e
