"""Tests for CLI."""

import subprocess
import sys
from pathlib import Path


def _run(*args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, "-m", "direction_pipeline.cli", *args],
        capture_output=True,
        text=True,
    )


def test_cli_convert_basic(gtfs_vernon: Path, tmp_path: Path) -> None:
    """Test CLI convert command."""
    output = tmp_path / "output"

    result = _run("convert", "--input", str(gtfs_vernon), "--output", str(output))

    assert result.returncode == 0
    assert "Conversion successful" in result.stdout
    assert (output / "routes.json").exists()
    assert (output / "manifest.json").exists()


def test_cli_validate_basic(gtfs_vernon: Path, tmp_path: Path) -> None:
    """Test CLI validate command."""
    output = tmp_path / "output"

    # First convert
    subprocess.run(
        [
            sys.executable,
            "-m",
            "direction_pipeline.cli",
            "convert",
            "--input",
            str(gtfs_vernon),
            "--output",
            str(output),
        ],
        check=True,
    )

    # Then validate
    result = _run("validate", "--input", str(output))

    assert result.returncode == 0
    assert "Validation successful" in result.stdout


def test_cli_classify(gtfs_vernon: Path) -> None:
    """Test CLI classify command lists directions and trips."""
    result = _run("classify", "--input", str(gtfs_vernon), "--route", "2")

    assert result.returncode == 0
    assert "Route 2 (Pleasant Valley) #8AC641" in result.stdout
    assert "[0] NORTH -> Pleasant Valley: 2 trips, 3 stops" in result.stdout
    assert "[1] SOUTH -> Downtown Vernon: 1 trips, 3 stops" in result.stdout
    assert "2-S-1\t1\tDowntown Vernon" in result.stdout


def test_cli_classify_service_ids(gtfs_vernon: Path) -> None:
    """Test CLI classify with a service filter."""
    result = _run(
        "classify", "--input", str(gtfs_vernon), "--route", "2", "--service-ids", "WK"
    )

    assert result.returncode == 0
    assert "[0] NORTH -> Pleasant Valley: 1 trips, 3 stops" in result.stdout
    assert "2-N-2" not in result.stdout


def test_cli_classify_unknown_route(gtfs_vernon: Path) -> None:
    """Test CLI classify with a route outside the agency."""
    result = _run("classify", "--input", str(gtfs_vernon), "--route", "97")

    assert result.returncode == 1
    assert "route 97 not found" in result.stderr


def test_cli_version() -> None:
    """Test CLI version flag."""
    result = _run("--version")

    assert result.returncode == 0
    assert "0.1.0" in result.stdout


def test_cli_help() -> None:
    """Test CLI help."""
    result = _run("--help")

    assert result.returncode == 0
    assert "convert" in result.stdout
    assert "validate" in result.stdout
    assert "classify" in result.stdout


def test_cli_unknown_agency(gtfs_vernon: Path, tmp_path: Path) -> None:
    """Test CLI rejects agencies without an embedded table."""
    result = _run(
        "convert",
        "--input",
        str(gtfs_vernon),
        "--output",
        str(tmp_path / "output"),
        "--agency",
        "kelowna",
    )

    assert result.returncode == 2
    assert "invalid choice" in result.stderr


def test_cli_convert_invalid_input(tmp_path: Path) -> None:
    """Test CLI with invalid input."""
    result = _run("convert", "--input", "/nonexistent/path", "--output", str(tmp_path / "out"))

    assert result.returncode == 1
    assert "Error" in result.stdout or "Error" in result.stderr
