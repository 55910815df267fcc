"""Collect annotations from a source tree into a QueryIndex."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .binder import DeclarationBinder
from .config import IndexerConfig, load_indexer_config
from .grammar import build_grammar
from .index import QueryIndex
from .models import Entry
from .providers.base import SourceIntrospectionProvider
from .utils.logging import logger
from .walker import PackageGraphWalker, VisitedSet


def collect(
    config: IndexerConfig,
    provider: SourceIntrospectionProvider | None = None,
    visited: VisitedSet | None = None,
) -> QueryIndex:
    """Run one indexing pass.

    Args:
        config: Validated indexer configuration
        provider: Source introspection provider; defaults to the
            tree-sitter Go provider rooted at the first root
        visited: Traversal-scoped visited set, shared across roots

    Returns:
        QueryIndex with Entries in traversal order

    Raises:
        ResolutionError: If any package fails to load; no partial index
            is returned
    """
    if provider is None:
        from .providers.golang import TreeSitterGoProvider

        provider = TreeSitterGoProvider(config.roots[0])

    logger.trace(
        f"starting to collect annotations. filters: {list(config.filters)} "
        f"packages: {list(config.packages)} roots: {list(config.roots)}"
    )

    grammar = build_grammar(config.dialect, config.filters, config.sigil)
    binder = DeclarationBinder(provider, grammar)
    walker = PackageGraphWalker(
        provider,
        packages=config.packages,
        std_prefixes=config.std_prefixes,
        visited=visited,
    )

    entries: list[Entry] = []
    for root in config.roots:
        for pkg in walker.walk(root):
            package_entries = binder.bind_package(pkg)
            logger.debug(f"package {pkg.path}: {len(package_entries)} entries")
            entries.extend(package_entries)

    logger.info(f"collected {len(entries)} entries from {len(walker.visited)} packages")
    return QueryIndex(entries)


def collect_from(roots: Iterable[str] | str, root: str = ".", **options: Any) -> QueryIndex:
    """Load configuration (file, environment, ``options``) and run :func:`collect`."""
    provider = options.pop("provider", None)
    return collect(load_indexer_config(roots, root=root, **options), provider=provider)
