"""Indexer configuration.

IndexerConfig is validated on construction: an indexer is either fully
configured or not built at all. load_indexer_config() merges, highest
priority first:

1. Keyword overrides
2. Environment variables (ANNOTATION_INDEX_<SECTION>_<KEY>)
3. <root>/.annotation-index.json
4. Built-in defaults
"""

from __future__ import annotations

import copy
import json
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .exceptions import ConfigurationError
from .grammar import DEFAULT_SIGIL, GrammarDialect
from .utils.logging import logger

CONFIG_FILE_NAME = ".annotation-index.json"
ENV_PREFIX = "ANNOTATION_INDEX"

DEFAULTS = {
    "walker": {
        "packages": [],
        "std_prefixes": [],
    },
    "grammar": {
        "dialect": GrammarDialect.KEYED.value,
        "sigil": DEFAULT_SIGIL,
        "filters": [],
    },
}


def _as_tuple(values: Iterable[str] | str | None) -> tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        values = values.split(",")
    return tuple(v.strip() for v in values if v and v.strip())


@dataclass(frozen=True)
class IndexerConfig:
    """Options recognized by :func:`annotation_index.collector.collect`.

    Attributes:
        roots: Root package directories or import paths (required)
        packages: Allow-list of package path substrings (empty = all)
        filters: Allow-list of annotation name prefixes (empty = all)
        dialect: Annotation grammar used for every comment line
        sigil: Marker of the positional dialect
        std_prefixes: Extra import prefixes treated as standard/core packages
    """

    roots: tuple[str, ...]
    packages: tuple[str, ...] = ()
    filters: tuple[str, ...] = ()
    dialect: GrammarDialect = GrammarDialect.KEYED
    sigil: str = DEFAULT_SIGIL
    std_prefixes: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        roots = _as_tuple(self.roots)
        if not roots:
            raise ConfigurationError("at least one root path is required")
        object.__setattr__(self, "roots", roots)
        object.__setattr__(self, "packages", _as_tuple(self.packages))
        object.__setattr__(self, "filters", _as_tuple(self.filters))
        object.__setattr__(self, "std_prefixes", _as_tuple(self.std_prefixes))

        try:
            object.__setattr__(self, "dialect", GrammarDialect(self.dialect))
        except ValueError as e:
            raise ConfigurationError(
                f"unknown annotation dialect: {self.dialect!r}",
                {"allowed": [d.value for d in GrammarDialect]},
            ) from e

        if not self.sigil or any(c.isspace() for c in self.sigil):
            raise ConfigurationError(f"invalid annotation sigil: {self.sigil!r}")


def _load_file(root: str | Path) -> dict[str, Any]:
    path = Path(root) / CONFIG_FILE_NAME
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        raise ConfigurationError(f"could not load config file {path}: {e}", {"path": str(path)}) from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"config file {path} must contain a JSON object", {"path": str(path)})
    return data


def load_runtime_config(root: str | Path = ".") -> dict[str, Any]:
    """Merge defaults, the optional config file and environment variables."""
    cfg = copy.deepcopy(DEFAULTS)

    user = _load_file(root)
    for section in cfg:
        if isinstance(user.get(section), dict):
            for key, value in user[section].items():
                if key in cfg[section] and isinstance(value, type(cfg[section][key])):
                    cfg[section][key] = value
                else:
                    logger.warning(f"ignoring config option {section}.{key}={value!r}")

    for section in cfg:
        for key in cfg[section]:
            env_var = f"{ENV_PREFIX}_{section.upper()}_{key.upper()}"
            if env_var in os.environ:
                value = os.environ[env_var]
                if isinstance(cfg[section][key], list):
                    cfg[section][key] = list(_as_tuple(value))
                else:
                    cfg[section][key] = value.strip()

    return cfg


def load_indexer_config(
    roots: Iterable[str] | str, root: str | Path = ".", **overrides: Any
) -> IndexerConfig:
    """Build an IndexerConfig from runtime configuration plus ``overrides``.

    Raises:
        ConfigurationError: If roots are missing or an option is invalid
    """
    cfg = load_runtime_config(root)

    options = {
        "packages": cfg["walker"]["packages"],
        "std_prefixes": cfg["walker"]["std_prefixes"],
        "dialect": cfg["grammar"]["dialect"],
        "sigil": cfg["grammar"]["sigil"],
        "filters": cfg["grammar"]["filters"],
    }
    unknown = set(overrides) - set(options)
    if unknown:
        raise ConfigurationError(f"unknown configuration options: {sorted(unknown)}")
    options.update({k: v for k, v in overrides.items() if v is not None})

    return IndexerConfig(roots=_as_tuple(roots), **options)
