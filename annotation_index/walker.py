"""Package graph walker.

Depth-first traversal of the import graph starting at a root package.
Every reachable package is loaded at most once; cycle safety comes only
from the visited set, which is owned by the caller (or by the walker when
none is passed) and never global.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator

from .exceptions import AnnotationIndexError, ResolutionError
from .providers.base import LoadedPackage, SourceIntrospectionProvider
from .utils.logging import logger


class VisitedSet:
    """Thread-safe set of package identifiers already claimed by a traversal."""

    def __init__(self):
        self._seen: set[str] = set()
        self._lock = threading.Lock()

    def claim(self, identifier: str) -> bool:
        """Mark ``identifier`` visited; False if it already was."""
        with self._lock:
            if identifier in self._seen:
                return False
            self._seen.add(identifier)
            return True

    def __contains__(self, identifier: str) -> bool:
        with self._lock:
            return identifier in self._seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)

    def snapshot(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._seen)


def is_standard_package(import_path: str, extra_prefixes: Iterable[str] = ()) -> bool:
    """Check if an import path names a standard-library package.

    Follows the Go toolchain rule: standard packages have no dot in their
    first path element. ``extra_prefixes`` adds caller-defined core prefixes.
    """
    first = import_path.split("/", 1)[0]
    if first and "." not in first:
        return True
    return any(import_path == p or import_path.startswith(p.rstrip("/") + "/") for p in extra_prefixes if p)


def _within_module(import_path: str, module: str) -> bool:
    return bool(module) and (import_path == module or import_path.startswith(module + "/"))


class PackageGraphWalker:
    """Enumerates reachable packages exactly once, dependencies first."""

    def __init__(
        self,
        provider: SourceIntrospectionProvider,
        packages: Iterable[str] = (),
        std_prefixes: Iterable[str] = (),
        visited: VisitedSet | None = None,
    ):
        self.provider = provider
        self.packages = tuple(p for p in packages if p)
        self.std_prefixes = tuple(std_prefixes)
        self.visited = visited if visited is not None else VisitedSet()

    def is_allowed_package(self, identifier: str) -> bool:
        """Allow-list substring test; an empty allow-list allows everything."""
        if not self.packages:
            return True
        return any(p in identifier for p in self.packages)

    def should_descend(self, import_path: str, importer: LoadedPackage) -> bool:
        if import_path in self.visited:
            logger.trace(f"the package {import_path} has already been processed")
            return False
        if not self.is_allowed_package(import_path):
            logger.debug(f"the package {import_path} is not in the list")
            return False
        if not _within_module(import_path, importer.module) and is_standard_package(
            import_path, self.std_prefixes
        ):
            logger.trace(f"skipping standard package {import_path}")
            return False
        return True

    def walk(self, root: str) -> Iterator[LoadedPackage]:
        """Yield every package reachable from ``root``.

        Raises:
            ResolutionError: If the provider fails on any package; the
                traversal stops at the first failure.
        """
        path = self._guarded(self.provider.canonical_path, root)
        if not self.is_allowed_package(path):
            logger.debug(f"the root package {path} is not in the list")
            return
        if not self.visited.claim(path):
            logger.debug(f"the package {path} has already been processed")
            return

        pkg = self._load(root)

        if pkg.path != path and not self.visited.claim(pkg.path):
            logger.debug(f"the package {pkg.path} has already been processed")
            return

        yield from self._descend(pkg)

    def _descend(self, pkg: LoadedPackage) -> Iterator[LoadedPackage]:
        logger.trace(f"parsing package {pkg.path}")

        for import_path in pkg.imports:
            if not self.should_descend(import_path, pkg):
                continue
            if not self.visited.claim(import_path):
                continue
            logger.debug(f"parsing import {import_path}")
            yield from self._descend(self._load(import_path))

        yield pkg

    def _load(self, identifier: str) -> LoadedPackage:
        return self._guarded(self.provider.load_package, identifier)

    def _guarded(self, call, identifier: str):
        try:
            return call(identifier)
        except ResolutionError:
            raise
        except AnnotationIndexError as e:
            raise ResolutionError(identifier, e.message, e.details) from e
        except OSError as e:
            raise ResolutionError(identifier, str(e)) from e
