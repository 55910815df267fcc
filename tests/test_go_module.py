"""Tests for go.mod parsing and import path resolution."""

import pytest

from annotation_index.providers.go_module import (
    GoPackageResolver,
    _encode_go_module,
    find_go_mod,
    parse_go_mod,
)

GO_MOD = """module github.com/acme/service

go 1.22

require (
	github.com/Azure/azure-sdk-for-go v68.0.0 // indirect
	github.com/labstack/echo/v4 v4.11.4
)

require golang.org/x/sync v0.6.0

replace github.com/acme/shared => ../shared

replace (
	github.com/old/lib v1.0.0 => github.com/new/lib v1.2.0
)
"""


@pytest.fixture
def module(tmp_path):
    root = tmp_path / "service"
    root.mkdir()
    (root / "go.mod").write_text(GO_MOD)
    return parse_go_mod(root / "go.mod")


class TestParseGoMod:
    def test_module_and_version(self, module, tmp_path):
        """Test module and version."""
        assert module.path == "github.com/acme/service"
        assert module.go_version == "1.22"
        assert module.root == (tmp_path / "service").resolve()

    def test_requires_block_and_single_line(self, module):
        """Test requires block and single line."""
        assert module.requires == {
            "github.com/Azure/azure-sdk-for-go": "v68.0.0",
            "github.com/labstack/echo/v4": "v4.11.4",
            "golang.org/x/sync": "v0.6.0",
        }

    def test_replaces(self, module):
        """Test replace directives in both forms."""
        assert module.replaces == {
            "github.com/acme/shared": "../shared",
            "github.com/old/lib": "github.com/new/lib v1.2.0",
        }

    def test_missing_module_directive(self, tmp_path):
        """Test missing module directive."""
        (tmp_path / "go.mod").write_text("go 1.21\n")
        with pytest.raises(ValueError):
            parse_go_mod(tmp_path / "go.mod")


def test_find_go_mod_searches_upwards(tmp_path):
    """Test find go mod searches upwards."""
    (tmp_path / "go.mod").write_text("module example.com/up\n")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    assert find_go_mod(nested) == (tmp_path / "go.mod").resolve()


def test_encode_go_module():
    """Test module cache path escaping."""
    assert _encode_go_module("github.com/Azure/azure-sdk-for-go") == "github.com/!azure/azure-sdk-for-go"


class TestResolver:
    def test_main_module_package(self, module):
        """Test main module package."""
        resolver = GoPackageResolver(module, module_cache=module.root / "nocache", goroot=module.root / "nogoroot")
        resolved = resolver.resolve("github.com/acme/service/internal/api")
        assert resolved.directory == module.root / "internal" / "api"
        assert resolved.module == "github.com/acme/service"

    def test_import_path_for_directory(self, module):
        """Test import path for directory."""
        resolver = GoPackageResolver(module)
        assert resolver.import_path_for(module.root) == "github.com/acme/service"
        assert resolver.import_path_for(module.root / "internal" / "api") == "github.com/acme/service/internal/api"

    def test_directory_outside_module(self, module, tmp_path):
        """Test directory outside module."""
        with pytest.raises(ValueError):
            GoPackageResolver(module).import_path_for(tmp_path)

    def test_vendor_directory(self, module):
        """Test vendored packages."""
        vendored = module.root / "vendor" / "github.com" / "labstack" / "echo" / "v4" / "middleware"
        vendored.mkdir(parents=True)
        resolved = GoPackageResolver(module).resolve("github.com/labstack/echo/v4/middleware")
        assert resolved.directory == vendored
        assert resolved.module == "github.com/labstack/echo/v4"

    def test_local_replace(self, module, tmp_path):
        """Test a replace directive pointing at a local directory."""
        shared = tmp_path / "shared" / "util"
        shared.mkdir(parents=True)
        resolved = GoPackageResolver(module).resolve("github.com/acme/shared/util")
        assert resolved.directory == shared.resolve()
        assert resolved.module_root == (tmp_path / "shared").resolve()

    def test_module_cache(self, module, tmp_path):
        """Test required modules resolve in the module cache."""
        cache = tmp_path / "mod"
        pkg = cache / "github.com" / "!azure" / "azure-sdk-for-go@v68.0.0" / "storage"
        pkg.mkdir(parents=True)
        resolved = GoPackageResolver(module, module_cache=cache).resolve("github.com/Azure/azure-sdk-for-go/storage")
        assert resolved.directory == pkg
        assert resolved.module == "github.com/Azure/azure-sdk-for-go"

    def test_versioned_replace_reads_target_from_cache(self, module, tmp_path):
        """Test versioned replace reads target from cache."""
        cache = tmp_path / "mod"
        target = cache / "github.com" / "new" / "lib@v1.2.0"
        target.mkdir(parents=True)
        resolved = GoPackageResolver(module, module_cache=cache).resolve("github.com/old/lib")
        assert resolved.directory == target
        assert resolved.module == "github.com/old/lib"

    def test_goroot(self, module, tmp_path):
        """Test standard packages resolve under GOROOT/src."""
        goroot = tmp_path / "goroot"
        (goroot / "src" / "net" / "http").mkdir(parents=True)
        resolved = GoPackageResolver(module, module_cache=tmp_path / "mod", goroot=goroot).resolve("net/http")
        assert resolved.directory == goroot / "src" / "net" / "http"
        assert resolved.module == ""

    def test_unresolvable(self, module, tmp_path):
        """Test an import path found nowhere."""
        resolver = GoPackageResolver(module, module_cache=tmp_path / "mod", goroot=tmp_path / "goroot")
        assert resolver.resolve("github.com/unknown/pkg") is None
