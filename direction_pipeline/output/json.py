"""JSON output of split routes, trips and stops."""

import json
import logging
from pathlib import Path
from typing import Any

from direction_pipeline.gtfs.models import RouteData, StopData
from direction_pipeline.split.splitter import stop_sort_key

logger = logging.getLogger(__name__)

OUTPUT_FILES = ("routes.json", "trips.json", "stops.json")


def _dump(path: Path, data: Any) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, sort_keys=True)
    logger.info(f"Wrote {path}")


def write_json_files(
    output_path: Path,
    routes: list[RouteData],
    stops: list[StopData],
) -> dict[str, str]:
    """Write routes.json, trips.json and stops.json."""
    logger.info(f"Writing JSON files to {output_path}")

    output_path.mkdir(parents=True, exist_ok=True)

    files_written = {}

    # Write routes.json
    routes_data = []
    for route in routes:
        routes_data.append(
            {
                "route_id": route.route_id,
                "route_id_gtfs": route.route_id_gtfs,
                "short_name": route.short_name,
                "long_name": route.long_name,
                "color": route.color,
                "trip_count": len(route.trips),
                "directions": [
                    {
                        "direction_id": direction.direction_id,
                        "label": direction.label,
                        "headsign": direction.headsign,
                        "stop_ids": direction.stop_ids,
                        "trip_count": direction.trip_count,
                    }
                    for direction in route.directions
                ],
            }
        )

    routes_path = output_path / "routes.json"
    _dump(routes_path, routes_data)
    files_written["routes.json"] = str(routes_path)

    # Write trips.json, stop times sorted on their direction ordering
    trips_data = []
    for route in routes:
        for trip in route.trips:
            trips_data.append(
                {
                    "trip_id": trip.trip_id,
                    "route_id": route.route_id,
                    "service_id": trip.service_id,
                    "direction_id": trip.reported.direction_id,
                    "direction_label": trip.reported.label,
                    "headsign": trip.reported.headsign,
                    "stop_times": [
                        {
                            "stop_id": stop.stop_id,
                            "stop_sequence": stop.stop_sequence,
                            "position": stop.position,
                        }
                        for stop in sorted(trip.stops, key=stop_sort_key)
                    ],
                }
            )

    trips_path = output_path / "trips.json"
    _dump(trips_path, trips_data)
    files_written["trips.json"] = str(trips_path)

    # Write stops.json
    stops_data = [
        {
            "stop_id": stop.stop_id,
            "name": stop.name,
            "lat": stop.lat,
            "lon": stop.lon,
            "route_ids": stop.route_ids,
        }
        for stop in stops
    ]

    stops_path = output_path / "stops.json"
    _dump(stops_path, stops_data)
    files_written["stops.json"] = str(stops_path)

    return files_written


def validate_json_files(output_path: Path) -> tuple[dict[str, int], list[str]]:
    """
    Check JSON output for referential consistency.

    Returns:
        Counts per file and a list of error messages
    """
    logger.info(f"Validating JSON files in {output_path}")

    with open(output_path / "routes.json", encoding="utf-8") as f:
        routes = json.load(f)
    with open(output_path / "trips.json", encoding="utf-8") as f:
        trips = json.load(f)
    with open(output_path / "stops.json", encoding="utf-8") as f:
        stops = json.load(f)

    errors: list[str] = []
    stop_ids = {stop["stop_id"] for stop in stops}
    directions = {
        (route["route_id"], direction["direction_id"]): direction["headsign"]
        for route in routes
        for direction in route["directions"]
    }

    for trip in trips:
        key = (trip["route_id"], trip["direction_id"])
        if key not in directions:
            errors.append(
                f"Trip {trip['trip_id']} references unknown direction "
                f"{trip['direction_id']} of route {trip['route_id']}"
            )
        elif directions[key] != trip["headsign"]:
            errors.append(
                f"Trip {trip['trip_id']} headsign '{trip['headsign']}' does not match "
                f"direction headsign '{directions[key]}'"
            )

        positions = [stop_time["position"] for stop_time in trip["stop_times"]]
        if positions != sorted(positions):
            errors.append(f"Trip {trip['trip_id']} has stop times out of direction order")

        for stop_time in trip["stop_times"]:
            if stop_time["stop_id"] not in stop_ids:
                errors.append(
                    f"Trip {trip['trip_id']} references unknown stop {stop_time['stop_id']}"
                )

    stats = {
        "routes": len(routes),
        "directions": len(directions),
        "trips": len(trips),
        "stops": len(stops),
    }
    logger.info(f"JSON files: {stats}")
    return stats, errors
