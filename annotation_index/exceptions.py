"""Custom exceptions for the annotation indexer.

ConfigurationError and ResolutionError are fatal and abort a run.
MalformedAnnotationError and DecodeError are local: the first is logged
and the offending line dropped, the second only reaches the caller of a
single decode call.
"""


class AnnotationIndexError(Exception):
    """Base class for every error raised by the indexer.

    Attributes:
        message: Human-readable error description
        details: Dict with context for debugging (identifier, line, ...)
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(AnnotationIndexError):
    """Raised when the indexer is built without roots or with invalid options."""


class ResolutionError(AnnotationIndexError):
    """Raised when the provider cannot load or parse a package."""

    def __init__(self, identifier: str, reason: str, details: dict | None = None):
        super().__init__(f"cannot resolve package {identifier}: {reason}", details)
        self.identifier = identifier
        self.reason = reason


class MalformedAnnotationError(AnnotationIndexError):
    """Raised when an annotation line does not follow its grammar."""

    def __init__(self, line: str, reason: str):
        super().__init__(f"malformed annotation ({reason}): {line}", {"line": line})
        self.line = line
        self.reason = reason


class DecodeError(AnnotationIndexError):
    """Raised when an annotation value cannot be decoded into the target shape."""
