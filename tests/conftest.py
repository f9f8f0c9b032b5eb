"""Pytest configuration and fixtures."""

import shutil
from collections.abc import Callable
from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def gtfs_vernon() -> Path:
    """Path to a two-agency feed with Vernon routes 1, 2, 7, 9 and a Kelowna route."""
    return FIXTURES / "gtfs_vernon"


@pytest.fixture
def gtfs_edgecases() -> Path:
    """Path to edge cases GTFS fixture."""
    return FIXTURES / "gtfs_edgecases"


@pytest.fixture
def gtfs_variant(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Copy the Vernon fixture, replacing some files with the given contents."""

    def make(files: dict[str, str]) -> Path:
        feed_dir = tmp_path / "gtfs_variant"
        shutil.copytree(FIXTURES / "gtfs_vernon", feed_dir)
        for name, content in files.items():
            (feed_dir / name).write_text(content, encoding="utf-8")
        return feed_dir

    return make


@pytest.fixture
def tmp_output(tmp_path: Path) -> Path:
    """Temporary output directory."""
    output_dir = tmp_path / "direction_data"
    output_dir.mkdir()
    yield output_dir
    # Cleanup
    if output_dir.exists():
        shutil.rmtree(output_dir)
