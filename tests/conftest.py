"""
Pytest configuration and shared fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import parmatch.config
from parmatch.diagnostics import Reporter
from parmatch.scanner import Lexer, TokenStream


# =============================================================================
# PATH FIXTURES
# =============================================================================

@pytest.fixture
def fixtures_dir():
    """Path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def cases_dir(fixtures_dir):
    """Path to golden-output cases."""
    return fixtures_dir / "cases"


# =============================================================================
# ENVIRONMENT
# =============================================================================

@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keep user config files and PARMATCH_* variables out of every test."""
    monkeypatch.setattr(parmatch.config, "CONFIG_SEARCH_PATHS", [])
    for var in ("PARMATCH_VERBOSE", "PARMATCH_AGGRESSIVE", "PARMATCH_EXTENSIONS"):
        monkeypatch.delenv(var, raising=False)


# =============================================================================
# SOURCE HELPERS
# =============================================================================

@pytest.fixture
def write_sources(tmp_path):
    """Write {name: text} to tmp_path in order and return the paths."""
    def _write(files):
        paths = []
        for name, text in files.items():
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
            paths.append(path)
        return paths
    return _write


@pytest.fixture
def make_stream():
    """Build a TokenStream over source text."""
    def _make(source, filename="test.v", reporter=None):
        return TokenStream(Lexer(source, filename=filename, reporter=reporter or Reporter()))
    return _make
