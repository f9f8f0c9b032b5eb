"""Feed consistency checks run before trips are split into directions."""

import logging
import re
from collections import Counter

from direction_pipeline.gtfs.models import ValidationReport
from direction_pipeline.gtfs.reader import GTFSReader

logger = logging.getLogger(__name__)

ROUTE_COLOR = re.compile(r"^[0-9A-Fa-f]{6}$")


class GTFSValidator:
    """Collect errors that would break the direction split and warnings for data it skips."""

    def __init__(self, reader: GTFSReader) -> None:
        self.reader = reader
        self.errors: list[str] = []
        self.warnings: list[str] = []

    def validate(self) -> ValidationReport:
        """Run all checks on the loaded feed."""
        logger.info("Validating GTFS data")

        self._check_stops()
        self._check_routes()
        self._check_trips()
        self._check_stop_times()

        report = ValidationReport(
            valid=not self.errors,
            errors=list(self.errors),
            warnings=list(self.warnings),
            stats={
                "stops": len(self.reader.stops),
                "routes": len(self.reader.routes),
                "trips": len(self.reader.trips),
                "agencies": len(self.reader.agencies),
                "stop_times": len(self.reader.stop_times),
            },
        )

        for warning in self.warnings:
            logger.debug(warning)
        if self.errors:
            logger.error(f"Feed has {len(self.errors)} errors, {len(self.warnings)} warnings")
        else:
            logger.info(f"Feed is valid ({len(self.warnings)} warnings)")

        return report

    def _duplicates(self, kind: str, ids: list[str]) -> None:
        for value, count in sorted(Counter(ids).items()):
            if count > 1:
                self.errors.append(f"{kind} id {value} is defined {count} times")

    def _check_stops(self) -> None:
        self._duplicates("Stop", [stop.stop_id for stop in self.reader.stops])

        for stop in self.reader.stops:
            if not -90 <= stop.lat <= 90:
                self.errors.append(f"Stop {stop.stop_id} has invalid latitude: {stop.lat}")
            if not -180 <= stop.lon <= 180:
                self.errors.append(f"Stop {stop.stop_id} has invalid longitude: {stop.lon}")
            if not stop.name:
                self.warnings.append(f"Stop {stop.stop_id} has empty name")

    def _check_routes(self) -> None:
        """Route short names become route ids and feed colors override the agency table."""
        if not self.reader.routes:
            self.errors.append("No routes found in GTFS data")
        self._duplicates("Route", [route.route_id for route in self.reader.routes])

        agency_ids = {agency.agency_id for agency in self.reader.agencies}
        for route in self.reader.routes:
            if not route.route_short_name:
                self.warnings.append(f"Route {route.route_id} has empty route_short_name")
            if agency_ids and route.agency_id not in agency_ids:
                self.warnings.append(
                    f"Route {route.route_id} references unknown agency {route.agency_id}"
                )
            if route.route_color and not ROUTE_COLOR.match(route.route_color):
                self.warnings.append(
                    f"Route {route.route_id} has malformed route_color: {route.route_color}"
                )

    def _check_trips(self) -> None:
        self._duplicates("Trip", [trip.trip_id for trip in self.reader.trips])

        timed_trips = {stop_time.trip_id for stop_time in self.reader.stop_times}
        for trip in self.reader.trips:
            if trip.route_id not in self.reader.route_by_id:
                self.errors.append(
                    f"Trip {trip.trip_id} references non-existent route {trip.route_id}"
                )
            if trip.direction_id not in (0, 1):
                self.errors.append(
                    f"Trip {trip.trip_id} has invalid direction_id: {trip.direction_id}"
                )
            if trip.trip_id not in timed_trips:
                self.warnings.append(f"Trip {trip.trip_id} has no stop times")

    def _check_stop_times(self) -> None:
        trip_ids = {trip.trip_id for trip in self.reader.trips}

        for trip_id, stop_times in self.reader.stop_times_by_trip().items():
            if trip_id not in trip_ids:
                self.errors.append(f"Stop times reference non-existent trip {trip_id}")
                continue

            if len(stop_times) < 2:
                self.warnings.append(
                    f"Trip {trip_id} has {len(stop_times)} stop time, too few to give a direction"
                )

            sequences = Counter(st.stop_sequence for st in stop_times)
            for sequence, count in sorted(sequences.items()):
                if count > 1:
                    self.errors.append(
                        f"Trip {trip_id} repeats stop_sequence {sequence} {count} times"
                    )

            previous_departure = None
            for st in stop_times:
                if st.stop_id not in self.reader.stop_by_id:
                    self.errors.append(
                        f"Stop time for trip {trip_id} references non-existent stop {st.stop_id}"
                    )
                if previous_departure is not None and st.arrival_time < previous_departure:
                    self.warnings.append(
                        f"Trip {trip_id} has non-increasing times at stop {st.stop_id}: "
                        f"{previous_departure} -> {st.arrival_time}"
                    )
                previous_departure = st.departure_time
