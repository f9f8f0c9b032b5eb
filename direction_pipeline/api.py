"""Public API for direction-pipeline."""

import hashlib
import json
import logging
import platform
from datetime import UTC, datetime
from pathlib import Path

from direction_pipeline.agencies.config import AgencyConfig, get_agency_config, load_agency_config
from direction_pipeline.gtfs.models import (
    ConvertConfig,
    Manifest,
    RouteData,
    StopData,
    ValidationReport,
)
from direction_pipeline.gtfs.reader import GTFSReader
from direction_pipeline.gtfs.validator import GTFSValidator
from direction_pipeline.output.json import OUTPUT_FILES, validate_json_files, write_json_files
from direction_pipeline.transform.routes import build_routes
from direction_pipeline.transform.stops import build_stops
from direction_pipeline.transform.trips import build_and_split_trips
from direction_pipeline.version import SCHEMA_VERSION, VERSION

logger = logging.getLogger(__name__)


def resolve_agency(config: ConvertConfig) -> AgencyConfig:
    """Pick the agency table: JSON file when given, embedded table otherwise."""
    if config.config_path:
        return load_agency_config(config.config_path)
    return get_agency_config(config.agency)


def split_feed(
    input_path: str,
    agency: AgencyConfig,
    service_ids: frozenset[str] | None = None,
) -> tuple[list[RouteData], list[StopData]]:
    """
    Read, validate and split a GTFS feed.

    Args:
        input_path: Path to GTFS directory
        agency: Agency tables and hooks
        service_ids: Useful service ids, None keeps every trip

    Returns:
        Tuple of (routes, stops)
    """
    reader = GTFSReader(input_path)
    reader.read_all()

    validator = GTFSValidator(reader)
    validation_report = validator.validate()
    if not validation_report.valid:
        for error in validation_report.errors:
            logger.error(error)
        raise ValueError(f"GTFS validation failed with {len(validation_report.errors)} errors")

    routes = build_routes(reader, agency)
    build_and_split_trips(reader, routes, agency, service_ids=service_ids)
    stops = build_stops(reader, routes, agency)
    return routes, stops


def convert(
    input_path: str,
    output_path: str,
    config: ConvertConfig | None = None,
) -> Manifest:
    """
    Convert a GTFS feed to direction-split JSON output.

    Args:
        input_path: Path to GTFS directory
        output_path: Path to output directory
        config: Optional conversion configuration

    Returns:
        Manifest with build metadata
    """
    if config is None:
        config = ConvertConfig(input_path=input_path, output_path=output_path)

    logger.info(f"Starting conversion: {input_path} -> {output_path}")
    start_time = datetime.now(UTC)

    agency = resolve_agency(config)
    routes, stops = split_feed(input_path, agency, config.service_ids)

    # Write outputs
    output_dir = Path(output_path)
    files_written = write_json_files(output_dir, routes, stops)

    # Compute checksums
    checksums = {}
    for filename, filepath in files_written.items():
        with open(filepath, "rb") as f:
            checksums[filename] = hashlib.sha256(f.read()).hexdigest()

    # Create manifest
    stats = _stats(routes)
    stats["stops"] = len(stops)

    manifest = Manifest(
        schema_version=SCHEMA_VERSION,
        tool_version=VERSION,
        created_at_iso=start_time.isoformat(),
        inputs={
            "gtfs_path": input_path,
            "agency": agency.name,
            "service_ids": sorted(config.service_ids) if config.service_ids is not None else None,
        },
        outputs=checksums,
        stats=stats,
        build={
            "python": platform.python_version(),
            "platform": platform.platform(),
        },
    )

    # Write manifest
    manifest_path = output_dir / "manifest.json"
    with open(manifest_path, "w", encoding="utf-8") as f:
        json.dump(
            {
                "schema_version": manifest.schema_version,
                "tool_version": manifest.tool_version,
                "created_at": manifest.created_at_iso,
                "inputs": manifest.inputs,
                "outputs": manifest.outputs,
                "stats": manifest.stats,
                "build": manifest.build,
            },
            f,
            indent=2,
            sort_keys=True,
        )

    logger.info(f"Wrote manifest to {manifest_path}")

    elapsed = (datetime.now(UTC) - start_time).total_seconds()
    logger.info(f"Conversion completed in {elapsed:.2f}s")

    return manifest


def _stats(routes: list[RouteData]) -> dict[str, int]:
    return {
        "routes": len(routes),
        "directions": sum(len(route.directions) for route in routes),
        "trips": sum(len(route.trips) for route in routes),
        "stop_times": sum(len(trip.stops) for route in routes for trip in route.trips),
    }


def validate(output_path: str) -> ValidationReport:
    """
    Validate direction-split JSON output.

    Args:
        output_path: Path to output directory containing JSON files

    Returns:
        ValidationReport with results
    """
    logger.info(f"Validating output: {output_path}")

    output_dir = Path(output_path)
    errors: list[str] = []
    warnings: list[str] = []

    # Check required files exist
    required_files = [*OUTPUT_FILES, "manifest.json"]
    for filename in required_files:
        if not (output_dir / filename).exists():
            errors.append(f"Required file missing: {filename}")

    if errors:
        return ValidationReport(valid=False, errors=errors, warnings=warnings)

    # Validate JSON files
    try:
        stats, json_errors = validate_json_files(output_dir)
        errors.extend(json_errors)
    except (OSError, ValueError, KeyError, TypeError) as e:
        errors.append(f"JSON validation failed: {e}")
        return ValidationReport(valid=False, errors=errors, warnings=warnings)

    # Validate manifest
    manifest_path = output_dir / "manifest.json"
    try:
        with open(manifest_path, encoding="utf-8") as f:
            manifest_data = json.load(f)

        # Check manifest has required fields
        required_manifest_fields = [
            "schema_version",
            "tool_version",
            "created_at",
            "outputs",
            "stats",
        ]
        for field in required_manifest_fields:
            if field not in manifest_data:
                warnings.append(f"Manifest missing field: {field}")

        if manifest_data.get("schema_version", SCHEMA_VERSION) != SCHEMA_VERSION:
            warnings.append(
                f"Manifest schema version {manifest_data['schema_version']} "
                f"differs from {SCHEMA_VERSION}"
            )

        # Verify checksums
        for filename, expected_hash in manifest_data.get("outputs", {}).items():
            filepath = output_dir / filename
            if filepath.exists():
                with open(filepath, "rb") as f:
                    actual_hash = hashlib.sha256(f.read()).hexdigest()
                if actual_hash != expected_hash:
                    errors.append(
                        f"Checksum mismatch for {filename}: "
                        f"expected {expected_hash}, got {actual_hash}"
                    )

    except (OSError, ValueError) as e:
        errors.append(f"Manifest validation failed: {e}")

    valid = len(errors) == 0

    if valid:
        logger.info("Validation passed")
    else:
        logger.error(f"Validation failed with {len(errors)} errors")

    return ValidationReport(
        valid=valid,
        errors=errors,
        warnings=warnings,
        stats=stats,
    )
