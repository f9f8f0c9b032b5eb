"""GTFS data reader and normalizer."""

import csv
import logging
from pathlib import Path

from direction_pipeline.gtfs.models import Agency, Route, Stop, StopTime, Trip

logger = logging.getLogger(__name__)


class GTFSReader:
    """Read and normalize GTFS feed from directory."""

    def __init__(self, gtfs_path: str) -> None:
        """Initialize reader with GTFS directory path."""
        self.gtfs_path = Path(gtfs_path)
        if not self.gtfs_path.is_dir():
            raise ValueError(f"GTFS path not found or not a directory: {gtfs_path}")

        # Lookups by GTFS id
        self.stop_by_id: dict[str, Stop] = {}
        self.route_by_id: dict[str, Route] = {}

        # Data storage
        self.agencies: list[Agency] = []
        self.stops: list[Stop] = []
        self.routes: list[Route] = []
        self.trips: list[Trip] = []
        self.stop_times: list[StopTime] = []

    def read_all(self) -> None:
        """Read all GTFS files."""
        logger.info(f"Reading GTFS data from {self.gtfs_path}")
        self.read_agencies()
        self.read_stops()
        self.read_routes()
        self.read_trips()
        self.read_stop_times()
        logger.info(
            f"Loaded {len(self.agencies)} agencies, {len(self.stops)} stops, "
            f"{len(self.routes)} routes, {len(self.trips)} trips, "
            f"{len(self.stop_times)} stop_times"
        )

    def read_agencies(self) -> None:
        """Read agency.txt."""
        file_path = self.gtfs_path / "agency.txt"
        if not file_path.exists():
            logger.warning("agency.txt not found, skipping")
            return

        with open(file_path, encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            for row in reader:
                agency = Agency(
                    agency_id=row.get("agency_id", ""),
                    agency_name=row["agency_name"],
                    agency_timezone=row["agency_timezone"],
                )
                self.agencies.append(agency)

    def read_stops(self) -> None:
        """Read stops.txt."""
        file_path = self.gtfs_path / "stops.txt"
        if not file_path.exists():
            raise FileNotFoundError(f"Required file not found: {file_path}")

        with open(file_path, encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            for row in reader:
                stop = Stop(
                    stop_id=row["stop_id"],
                    name=row.get("stop_name", ""),
                    lat=float(row["stop_lat"]),
                    lon=float(row["stop_lon"]),
                )
                self.stops.append(stop)

        # Sort by stop_id for stable output
        self.stops.sort(key=lambda stop: stop.stop_id)
        self.stop_by_id = {stop.stop_id: stop for stop in self.stops}

    def read_routes(self) -> None:
        """Read routes.txt."""
        file_path = self.gtfs_path / "routes.txt"
        if not file_path.exists():
            raise FileNotFoundError(f"Required file not found: {file_path}")

        default_agency_id = self.agencies[0].agency_id if len(self.agencies) == 1 else ""

        with open(file_path, encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            for row in reader:
                route = Route(
                    route_id=row["route_id"],
                    agency_id=row.get("agency_id") or default_agency_id,
                    route_short_name=row.get("route_short_name", ""),
                    route_long_name=row.get("route_long_name", ""),
                    route_type=int(row["route_type"]),
                    route_color=(row.get("route_color") or "").strip(),
                )
                self.routes.append(route)

        # Sort by route_id for stable output
        self.routes.sort(key=lambda route: route.route_id)
        self.route_by_id = {route.route_id: route for route in self.routes}

    def read_trips(self) -> None:
        """Read trips.txt."""
        file_path = self.gtfs_path / "trips.txt"
        if not file_path.exists():
            raise FileNotFoundError(f"Required file not found: {file_path}")

        with open(file_path, encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            for row in reader:
                trip = Trip(
                    trip_id=row["trip_id"],
                    route_id=row["route_id"],
                    service_id=row["service_id"],
                    trip_headsign=row.get("trip_headsign", ""),
                    direction_id=int(row.get("direction_id") or "0"),
                )
                self.trips.append(trip)

        # Sort by trip_id for stable output
        self.trips.sort(key=lambda trip: trip.trip_id)

    def read_stop_times(self) -> None:
        """Read stop_times.txt, normalize times and fill untimed stops."""
        file_path = self.gtfs_path / "stop_times.txt"
        if not file_path.exists():
            raise FileNotFoundError(f"Required file not found: {file_path}")

        rows_by_trip: dict[str, list[tuple[int, str, int | None, int | None]]] = {}
        with open(file_path, encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            for row in reader:
                arrival = self._parse_optional_time(row.get("arrival_time"))
                departure = self._parse_optional_time(row.get("departure_time"))
                rows_by_trip.setdefault(row["trip_id"], []).append(
                    (
                        int(row["stop_sequence"]),
                        row["stop_id"],
                        arrival if arrival is not None else departure,
                        departure if departure is not None else arrival,
                    )
                )

        stop_times: list[StopTime] = []
        untimed = 0
        for trip_id in sorted(rows_by_trip):
            rows = sorted(rows_by_trip[trip_id], key=lambda r: r[0])
            times = [(arrival, departure) for _, _, arrival, departure in rows]
            untimed += sum(1 for arrival, _ in times if arrival is None)
            for (stop_sequence, stop_id, _, _), (arrival, departure) in zip(
                rows, self._fill_times(trip_id, times)
            ):
                stop_times.append(
                    StopTime(
                        trip_id=trip_id,
                        stop_id=stop_id,
                        arrival_time=arrival,
                        departure_time=departure,
                        stop_sequence=stop_sequence,
                    )
                )

        if untimed:
            logger.info(f"Interpolated times of {untimed} untimed stop_times")
        self.stop_times = stop_times

    @staticmethod
    def _fill_times(
        trip_id: str, times: list[tuple[int | None, int | None]]
    ) -> list[tuple[int, int]]:
        """Interpolate untimed stops linearly between the surrounding timed ones."""
        timed = [index for index, (arrival, _) in enumerate(times) if arrival is not None]
        if not timed or timed[0] != 0 or timed[-1] != len(times) - 1:
            raise ValueError(f"Trip {trip_id} has no time at its first or last stop")

        filled: list[tuple[int, int]] = []
        previous = 0
        for index, (arrival, departure) in enumerate(times):
            if arrival is not None:
                filled.append((arrival, departure))  # type: ignore[arg-type]
                previous = index
                continue
            following = next(i for i in timed if i > index)
            start = times[previous][1]
            end = times[following][0]
            span = end - start  # type: ignore[operator]
            offset = span * (index - previous) // (following - previous)
            filled.append((start + offset, start + offset))  # type: ignore[operator]
        return filled

    @staticmethod
    def _parse_optional_time(time_str: str | None) -> int | None:
        """Parse a time that may be left empty at stops that are not timepoints."""
        if time_str is None or not time_str.strip():
            return None
        return GTFSReader._parse_time(time_str)

    @staticmethod
    def _parse_time(time_str: str) -> int:
        """Parse HH:MM:SS to seconds since midnight, supporting >24h."""
        parts = time_str.strip().split(":")
        if len(parts) != 3:
            raise ValueError(f"Invalid time format: {time_str}")

        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2])

        return hours * 3600 + minutes * 60 + seconds

    def stop_times_by_trip(self) -> dict[str, list[StopTime]]:
        """Group stop times by trip, each list in stop_sequence order."""
        grouped: dict[str, list[StopTime]] = {}
        for st in self.stop_times:
            if st.trip_id not in grouped:
                grouped[st.trip_id] = []
            grouped[st.trip_id].append(st)
        return grouped
