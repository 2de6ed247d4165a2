"""Pytest configuration and fixtures for tsgraph tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator

import pytest

from tsgraph.config_manager import AnalyzerSettings
from tsgraph.context import AnalysisContext
from tsgraph.parser import ParsedFile, TreeSitterParser


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path_factory, monkeypatch):
    """Point the config file at a throwaway location for every test.

    ``config_manager`` binds CONFIG_FILE at import time, so it is patched
    directly rather than through the environment.
    """
    config_file = tmp_path_factory.mktemp("tsgraph_home") / "config.toml"
    monkeypatch.setattr("tsgraph.config_manager.CONFIG_FILE", config_file)
    return config_file


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_project_path() -> Path:
    """Get path to the sample TypeScript project."""
    return Path(__file__).parent / "fixtures" / "sample_project"


@pytest.fixture
def write_project(temp_dir: Path) -> Callable[[Dict[str, str]], Path]:
    """Return a helper that writes ``{relative path: source}`` under temp_dir."""

    def _write(files: Dict[str, str]) -> Path:
        for rel_path, source in files.items():
            target = temp_dir / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(source, encoding="utf-8")
        return temp_dir

    return _write


@pytest.fixture(scope="session")
def ts_parser() -> TreeSitterParser:
    """A parser with every grammar loaded (shared, grammars are read-only)."""
    return TreeSitterParser()


@pytest.fixture
def make_context(temp_dir: Path) -> Callable[..., AnalysisContext]:
    def _make(source_paths=(), settings: AnalyzerSettings = None) -> AnalysisContext:
        return AnalysisContext(
            root=temp_dir,
            settings=settings or AnalyzerSettings(),
            source_paths=set(source_paths),
        )

    return _make


@pytest.fixture
def parse_source(ts_parser: TreeSitterParser, temp_dir: Path) -> Callable[[str, str], ParsedFile]:
    """Parse an in-memory source string as if it lived at *rel_path*."""

    def _parse(rel_path: str, source: str) -> ParsedFile:
        return ts_parser.parse_file(temp_dir / rel_path, rel_path, source=source)

    return _parse
