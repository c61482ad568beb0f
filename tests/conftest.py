"""Shared fixtures for perch tests."""

from pathlib import Path

import pytest

from perch.config import TemplateConfig
from perch.templating.registry import configure

TEMPLATES_DIR = Path(__file__).parent / "templates"


@pytest.fixture
def templates_dir() -> Path:
    """The checked-in fixture template root."""
    return TEMPLATES_DIR


@pytest.fixture
def restore_registry():
    """Reset the process-wide registry config after the test."""
    yield
    configure(TemplateConfig())


@pytest.fixture
def template_tree(tmp_path: Path) -> Path:
    """A throwaway template root with a few files."""
    root = tmp_path / "templates"
    (root / "user").mkdir(parents=True)
    (root / "user" / "index.html.kida").write_text("Hello {{ name }}")
    (root / "user" / "show.json.pyt").write_text('{"id": assigns["id"]}')
    (root / "user" / "notes.md").write_text("not a template")
    (root / "user" / ".hidden.html.kida").write_text("hidden")
    (root / "home.html.kida").write_text("home")
    return root
