"""Annotation grammar parsers.

Two dialects have been used for annotation comments:

Keyed (default)::

    // @RestResponse(code=201,type=json)

Positional::

    // @A Path /foo

Both implement :class:`AnnotationGrammar` so the binder never needs to
know which one is active. Parsers work on raw comment text only.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from collections.abc import Iterable

from .exceptions import ConfigurationError, MalformedAnnotationError
from .models import Annotation
from .utils.logging import logger

COMMENT_PREFIX = "//"
DEFAULT_SIGIL = "@A"


class GrammarDialect(str, enum.Enum):
    KEYED = "keyed"
    POSITIONAL = "positional"


class AnnotationGrammar(ABC):
    """Classifies one comment line as annotation or prose."""

    dialect: GrammarDialect

    def __init__(self, filters: Iterable[str] = ()):
        self.filters = tuple(f for f in filters if f)

    @property
    @abstractmethod
    def prefix(self) -> str:
        """Fixed comment-plus-sigil prefix every annotation line starts with."""
        ...

    @abstractmethod
    def _split(self, line: str) -> Annotation:
        """Extract the annotation from a line known to start with ``prefix``.

        Raises:
            MalformedAnnotationError: If the line does not follow the grammar.
        """
        ...

    def is_candidate(self, line: str) -> bool:
        return len(line) >= len(self.prefix) and line.startswith(self.prefix)

    def parse_strict(self, line: str) -> Annotation | None:
        """Parse a line, raising on malformed annotations.

        Returns None for prose lines and for annotations excluded by the
        name filters.
        """
        line = line.rstrip()
        if not self.is_candidate(line):
            return None

        annotation = self._split(line)

        if self.filters and not self.matches_filters(annotation):
            logger.debug(f"annotation ignored, not included in the filters {self.filters}: {line}")
            return None

        logger.info(f"discovered annotation {annotation.name} with values ({annotation.value})")
        return annotation

    def matches_filters(self, annotation: Annotation) -> bool:
        """Check the annotation name against the name-prefix filters."""
        return any(annotation.name.startswith(f) for f in self.filters)

    def parse(self, line: str) -> Annotation | None:
        """Parse a line; malformed annotations are logged and dropped."""
        try:
            return self.parse_strict(line)
        except MalformedAnnotationError as e:
            logger.warning(f"the annotation does not follow the format and will be ignored. {e.reason}: {e.line}")
            return None

    def parse_block(self, lines: Iterable[str]) -> list[Annotation]:
        """Parse every line of a documentation block, keeping source order."""
        annotations = []
        for line in lines:
            annotation = self.parse(line)
            if annotation is not None:
                annotations.append(annotation)
        return annotations


class KeyedGrammar(AnnotationGrammar):
    """``// @Name(key=value,key=value)``."""

    dialect = GrammarDialect.KEYED

    @property
    def prefix(self) -> str:
        return f"{COMMENT_PREFIX} @"

    def _split(self, line: str) -> Annotation:
        body = line[len(self.prefix):]

        name, paren, rest = body.partition("(")
        name = name.strip()
        if not paren:
            raise MalformedAnnotationError(line, "missing parenthesized values")
        if not name or any(c.isspace() for c in name):
            raise MalformedAnnotationError(line, "invalid annotation name")

        rest = rest.rstrip()
        if not rest.endswith(")"):
            raise MalformedAnnotationError(line, "unterminated parenthesis")
        value = rest[:-1].strip()

        for segment in value.split(","):
            if segment.count("=") != 1:
                raise MalformedAnnotationError(line, f"segment '{segment.strip()}' is not a key=value pair")

        return Annotation(name=name, value=value)


class PositionalGrammar(AnnotationGrammar):
    """``// <sigil> name value tokens...``; names are case-folded."""

    dialect = GrammarDialect.POSITIONAL

    def __init__(self, filters: Iterable[str] = (), sigil: str = DEFAULT_SIGIL):
        super().__init__(filters)
        if not sigil or any(c.isspace() for c in sigil):
            raise ConfigurationError(f"invalid annotation sigil: {sigil!r}")
        self.sigil = sigil

    @property
    def prefix(self) -> str:
        return f"{COMMENT_PREFIX} {self.sigil}"

    def is_candidate(self, line: str) -> bool:
        if not super().is_candidate(line):
            return False
        # "// @Abc" must not match the sigil "@A"
        rest = line[len(self.prefix):]
        return not rest or rest[0].isspace()

    def matches_filters(self, annotation: Annotation) -> bool:
        # Names are case-folded, so are the filters
        return any(annotation.name.startswith(f.lower()) for f in self.filters)

    def _split(self, line: str) -> Annotation:
        tokens = line[len(self.prefix):].split()
        if not tokens:
            raise MalformedAnnotationError(line, "missing annotation name")
        return Annotation(name=tokens[0].lower(), value=" ".join(tokens[1:]))


def build_grammar(
    dialect: GrammarDialect | str = GrammarDialect.KEYED,
    filters: Iterable[str] = (),
    sigil: str = DEFAULT_SIGIL,
) -> AnnotationGrammar:
    """Create the parser for ``dialect``."""
    try:
        dialect = GrammarDialect(dialect)
    except ValueError as e:
        raise ConfigurationError(f"unknown annotation dialect: {dialect!r}") from e

    if dialect is GrammarDialect.POSITIONAL:
        return PositionalGrammar(filters, sigil=sigil)
    return KeyedGrammar(filters)
