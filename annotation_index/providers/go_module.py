"""go.mod parsing and import path resolution.

Maps a Go import path to the directory holding its sources:
- packages of the main module (relative to the go.mod directory)
- vendor/ copies
- local ``replace`` targets
- required modules in the module cache ($GOMODCACHE or $GOPATH/pkg/mod)
- standard library packages under $GOROOT/src
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from ..utils.logging import logger


def _encode_go_module(module: str) -> str:
    """Encode Go module path for the module cache.

    Uppercase letters become !lowercase.
    Example: github.com/Azure/azure-sdk-for-go -> github.com/!azure/azure-sdk-for-go
    """
    result = []
    for char in module:
        if char.isupper():
            result.append("!")
            result.append(char.lower())
        else:
            result.append(char)
    return "".join(result)


@dataclass
class GoModule:
    """Parsed go.mod file."""

    path: str  # Module path from the "module" directive
    root: Path  # Directory containing go.mod
    go_version: str = ""
    requires: dict[str, str] = field(default_factory=dict)  # module -> version
    replaces: dict[str, str] = field(default_factory=dict)  # module -> local dir or "module version"


def _strip_comment(line: str) -> str:
    return line.split("//", 1)[0].strip()


def _directive_lines(content: str, directive: str) -> list[str]:
    """Collect the lines of a directive, both single-line and block form."""
    lines = []
    for match in re.finditer(rf"^{directive}\s*\((.*?)^\)", content, re.DOTALL | re.MULTILINE):
        for line in match.group(1).split("\n"):
            line = _strip_comment(line)
            if line:
                lines.append(line)
    for match in re.finditer(rf"^{directive}\s+([^(\s].*)$", content, re.MULTILINE):
        line = _strip_comment(match.group(1))
        if line:
            lines.append(line)
    return lines


def parse_go_mod(path: Path) -> GoModule:
    """Parse a go.mod file.

    Raises:
        ValueError: If the file has no module directive
    """
    content = path.read_text(encoding="utf-8")

    module_match = re.search(r"^module\s+\"?([^\s\"]+)\"?", content, re.MULTILINE)
    if not module_match:
        raise ValueError(f"{path} has no module directive")

    go_version_match = re.search(r"^go\s+(\d+(?:\.\d+)*)", content, re.MULTILINE)

    module = GoModule(
        path=module_match.group(1),
        root=path.parent.resolve(),
        go_version=go_version_match.group(1) if go_version_match else "",
    )

    for line in _directive_lines(content, "require"):
        parts = line.split()
        if len(parts) >= 2:
            module.requires[parts[0]] = parts[1]

    for line in _directive_lines(content, "replace"):
        old, arrow, new = line.partition("=>")
        if not arrow:
            continue
        old_parts = old.split()
        new_parts = new.split()
        if old_parts and new_parts:
            module.replaces[old_parts[0]] = " ".join(new_parts)

    return module


def find_go_mod(start: Path) -> Path | None:
    """Find the nearest go.mod at or above ``start``."""
    current = start.resolve()
    if current.is_file():
        current = current.parent
    for directory in (current, *current.parents):
        candidate = directory / "go.mod"
        if candidate.is_file():
            return candidate
    return None


def default_module_cache() -> Path | None:
    cache = os.environ.get("GOMODCACHE")
    if cache:
        return Path(cache)
    gopath = os.environ.get("GOPATH", "")
    first = gopath.split(os.pathsep)[0] if gopath else str(Path.home() / "go")
    return Path(first) / "pkg" / "mod"


def default_goroot() -> Path | None:
    goroot = os.environ.get("GOROOT")
    return Path(goroot) if goroot else None


def _longest_module_prefix(import_path: str, modules) -> str | None:
    best = None
    for module in modules:
        if import_path == module or import_path.startswith(module + "/"):
            if best is None or len(module) > len(best):
                best = module
    return best


@dataclass(frozen=True)
class ResolvedPackage:
    directory: Path
    module: str  # Module path owning the package, empty for the standard library
    module_root: Path  # Directory that file paths are reported relative to


class GoPackageResolver:
    """Resolves import paths against one main module."""

    def __init__(self, module: GoModule, module_cache: Path | None = None, goroot: Path | None = None):
        self.module = module
        self.module_cache = module_cache if module_cache is not None else default_module_cache()
        self.goroot = goroot if goroot is not None else default_goroot()

    def import_path_for(self, directory: Path) -> str:
        """Import path of a directory inside the main module."""
        rel = directory.resolve().relative_to(self.module.root)
        if str(rel) == ".":
            return self.module.path
        return f"{self.module.path}/{rel.as_posix()}"

    def resolve(self, import_path: str) -> ResolvedPackage | None:
        module_path = self.module.path
        if import_path == module_path or import_path.startswith(module_path + "/"):
            rel = import_path[len(module_path):].lstrip("/")
            return ResolvedPackage(self.module.root / rel, module_path, self.module.root)

        vendored = self.module.root / "vendor" / import_path
        if vendored.is_dir():
            owner = _longest_module_prefix(import_path, self.module.requires) or import_path
            return ResolvedPackage(vendored, owner, self.module.root / "vendor" / owner)

        replaced = _longest_module_prefix(import_path, self.module.replaces)
        if replaced:
            target = self.module.replaces[replaced].split()
            if target[0].startswith((".", "/")):
                base = (self.module.root / target[0]).resolve()
                rel = import_path[len(replaced):].lstrip("/")
                return ResolvedPackage(base / rel, replaced, base)
            if len(target) == 2:
                found = self._from_cache(import_path, replaced, target[0], target[1])
                if found:
                    return found

        required = _longest_module_prefix(import_path, self.module.requires)
        if required:
            found = self._from_cache(import_path, required, required, self.module.requires[required])
            if found:
                return found

        if self.goroot is not None:
            std = self.goroot / "src" / import_path
            if std.is_dir():
                return ResolvedPackage(std, "", self.goroot / "src")

        logger.debug(f"import path {import_path} did not resolve to a directory")
        return None

    def _from_cache(self, import_path: str, module: str, source: str, version: str) -> ResolvedPackage | None:
        if self.module_cache is None:
            return None
        module_dir = self.module_cache / f"{_encode_go_module(source)}@{version}"
        rel = import_path[len(module):].lstrip("/")
        directory = module_dir / rel
        if directory.is_dir():
            return ResolvedPackage(directory, module, module_dir)
        return None
