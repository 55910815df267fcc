"""Pytest configuration and fixtures."""
from pathlib import Path

import pytest
from tree_sitter_language_pack import get_parser

from annotation_index.utils.logging import logger

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def go_parser():
    """Create a Go tree-sitter parser."""
    return get_parser("go")


@pytest.fixture
def annotated_module():
    """Path to the annotated Go fixture module."""
    return FIXTURES / "go" / "annotated"


@pytest.fixture
def log_messages():
    """Capture loguru messages at WARNING and above."""
    messages = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def go_module(tmp_path):
    """Factory writing a throwaway Go module: go_module({"a/a.go": "..."})."""

    def _write(files, module="example.com/tmp"):
        (tmp_path / "go.mod").write_text(f"module {module}\n\ngo 1.21\n")
        for rel, content in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return tmp_path

    return _write
