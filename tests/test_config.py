"""Tests for indexer configuration loading."""

import json

import pytest

from annotation_index.config import CONFIG_FILE_NAME, IndexerConfig, load_indexer_config, load_runtime_config
from annotation_index.exceptions import ConfigurationError
from annotation_index.grammar import GrammarDialect


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in (
        "ANNOTATION_INDEX_WALKER_PACKAGES",
        "ANNOTATION_INDEX_WALKER_STD_PREFIXES",
        "ANNOTATION_INDEX_GRAMMAR_DIALECT",
        "ANNOTATION_INDEX_GRAMMAR_SIGIL",
        "ANNOTATION_INDEX_GRAMMAR_FILTERS",
    ):
        monkeypatch.delenv(var, raising=False)


class TestIndexerConfig:
    def test_roots_are_required(self):
        """Test roots are required."""
        with pytest.raises(ConfigurationError):
            IndexerConfig(roots=())

    def test_blank_roots_are_rejected(self):
        """Test blank roots are rejected."""
        with pytest.raises(ConfigurationError):
            IndexerConfig(roots=["", "  "])

    def test_values_are_normalized(self):
        """Test values are normalized."""
        config = IndexerConfig(roots="./a, ./b", packages=["example.com/m", ""], dialect="positional")
        assert config.roots == ("./a", "./b")
        assert config.packages == ("example.com/m",)
        assert config.dialect is GrammarDialect.POSITIONAL

    def test_unknown_dialect(self):
        """Test an unknown dialect name is rejected."""
        with pytest.raises(ConfigurationError) as exc:
            IndexerConfig(roots=["."], dialect="yaml")
        assert exc.value.details["allowed"] == ["keyed", "positional"]

    def test_invalid_sigil(self):
        """Test a sigil containing whitespace is rejected."""
        with pytest.raises(ConfigurationError):
            IndexerConfig(roots=["."], sigil="")


class TestRuntimeConfig:
    def test_defaults(self, tmp_path):
        """Test built-in defaults without a config file."""
        cfg = load_runtime_config(tmp_path)
        assert cfg["grammar"]["dialect"] == "keyed"
        assert cfg["walker"]["packages"] == []

    def test_file_values_merge(self, tmp_path):
        """Test file values merge."""
        (tmp_path / CONFIG_FILE_NAME).write_text(
            json.dumps({"grammar": {"filters": ["Rest"]}, "walker": {"packages": ["example.com/m"]}})
        )
        cfg = load_runtime_config(tmp_path)
        assert cfg["grammar"]["filters"] == ["Rest"]
        assert cfg["walker"]["packages"] == ["example.com/m"]

    def test_mistyped_file_values_are_ignored(self, tmp_path, log_messages):
        """Test mistyped file values are ignored."""
        (tmp_path / CONFIG_FILE_NAME).write_text(json.dumps({"grammar": {"filters": "Rest", "colour": "x"}}))
        cfg = load_runtime_config(tmp_path)
        assert cfg["grammar"]["filters"] == []
        assert len(log_messages) == 2

    def test_invalid_json(self, tmp_path):
        """Test an unparsable config file."""
        (tmp_path / CONFIG_FILE_NAME).write_text("{not json")
        with pytest.raises(ConfigurationError):
            load_runtime_config(tmp_path)

    def test_non_object_json(self, tmp_path):
        """Test a config file that is not a JSON object."""
        (tmp_path / CONFIG_FILE_NAME).write_text("[]")
        with pytest.raises(ConfigurationError):
            load_runtime_config(tmp_path)

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        """Test environment overrides file."""
        (tmp_path / CONFIG_FILE_NAME).write_text(json.dumps({"grammar": {"dialect": "keyed"}}))
        monkeypatch.setenv("ANNOTATION_INDEX_GRAMMAR_DIALECT", "positional")
        monkeypatch.setenv("ANNOTATION_INDEX_GRAMMAR_FILTERS", "Rest, Path")
        cfg = load_runtime_config(tmp_path)
        assert cfg["grammar"]["dialect"] == "positional"
        assert cfg["grammar"]["filters"] == ["Rest", "Path"]


class TestLoadIndexerConfig:
    def test_overrides_win(self, tmp_path, monkeypatch):
        """Test overrides win."""
        monkeypatch.setenv("ANNOTATION_INDEX_GRAMMAR_FILTERS", "Path")
        config = load_indexer_config(["./app"], root=tmp_path, filters=["Rest"])
        assert config.filters == ("Rest",)
        assert config.roots == ("./app",)

    def test_none_overrides_are_ignored(self, tmp_path, monkeypatch):
        """Test none overrides are ignored."""
        monkeypatch.setenv("ANNOTATION_INDEX_GRAMMAR_DIALECT", "positional")
        config = load_indexer_config(["./app"], root=tmp_path, dialect=None)
        assert config.dialect is GrammarDialect.POSITIONAL

    def test_unknown_override(self, tmp_path):
        """Test unknown override."""
        with pytest.raises(ConfigurationError):
            load_indexer_config(["./app"], root=tmp_path, colour="red")

    def test_missing_roots(self, tmp_path):
        """Test an empty root list is rejected."""
        with pytest.raises(ConfigurationError):
            load_indexer_config([], root=tmp_path)
