"""Shared test fixtures for the pft test suite.

Design:
- tmp_site: isolated site skeleton in a temp directory, PFT_ROOT pointing at it
- runner: CliRunner for command tests
- write_entry: helper writing a content file with a header block
"""

from pathlib import Path
from typing import Generator

import pytest
from click.testing import CliRunner

from pft.tree import ContentTree


# ─────────────────────────────────────────────────────────────────────────────
# Core Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def runner() -> CliRunner:
    """CLI runner with isolated environment."""
    return CliRunner()


@pytest.fixture
def tmp_site(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Create an isolated site with the standard directory layout.

    Usage:
        def test_something(tmp_site):
            write_entry(tmp_site / "content/pages/about", "Title: About")
    """
    root = tmp_path / "site"
    ContentTree.create(root)
    monkeypatch.setenv("PFT_ROOT", str(root))
    yield root


@pytest.fixture
def tree(tmp_site: Path) -> ContentTree:
    return ContentTree(tmp_site)


# ─────────────────────────────────────────────────────────────────────────────
# Helper Functions (for test code, not fixtures)
# ─────────────────────────────────────────────────────────────────────────────


def write_entry(path: Path, header: str, body: str = "Some text.") -> Path:
    """Write a content file whose header block holds ``header`` (YAML lines).

    Usage in tests:
        from conftest import write_entry
        write_entry(tmp_site / "content/blog/2024-01/05-hi", "Title: Hi\\nDate: 2024-01-05")
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"---\n{header}\n---\n\n{body}\n", encoding="utf-8")
    return path
