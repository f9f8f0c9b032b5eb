"""Trip direction splitting for every kept route."""

import logging
from collections import Counter
from dataclasses import replace

from direction_pipeline.agencies.config import AgencyConfig
from direction_pipeline.gtfs.models import (
    ClassifiedTrip,
    DirectionData,
    OrderedStop,
    RawTrip,
    ReportedDirection,
    RouteData,
    RouteSplit,
    StopVisit,
)
from direction_pipeline.gtfs.reader import GTFSReader
from direction_pipeline.split.splitter import merge_headsigns

logger = logging.getLogger(__name__)


def build_raw_trips(
    reader: GTFSReader,
    routes: list[RouteData],
    service_ids: frozenset[str] | None = None,
) -> dict[str, list[RawTrip]]:
    """Group stop times into raw trips per route id, dropping unused services."""
    stop_times_by_trip = reader.stop_times_by_trip()
    route_ids = {route.route_id_gtfs: route.route_id for route in routes}

    raw_trips: dict[str, list[RawTrip]] = {route.route_id: [] for route in routes}
    skipped_service = 0

    for trip in reader.trips:
        route_id = route_ids.get(trip.route_id)
        if route_id is None:
            continue

        if service_ids is not None and trip.service_id not in service_ids:
            skipped_service += 1
            continue

        stop_times = stop_times_by_trip.get(trip.trip_id)
        if not stop_times:
            logger.warning(f"Trip {trip.trip_id} has no stop times, skipping")
            continue

        raw_trips[route_id].append(
            RawTrip(
                trip_id=trip.trip_id,
                route_id=route_id,
                visits=tuple(StopVisit(st.stop_id, st.stop_sequence) for st in stop_times),
                service_id=trip.service_id,
                trip_headsign=trip.trip_headsign,
                direction_id=trip.direction_id,
            )
        )

    if skipped_service:
        logger.info(f"Skipped {skipped_service} trips outside the useful service ids")
    return raw_trips


def build_and_split_trips(
    reader: GTFSReader,
    routes: list[RouteData],
    agency: AgencyConfig,
    service_ids: frozenset[str] | None = None,
) -> None:
    """Assign every trip of every route to a direction, ordering its stops."""
    logger.info("Splitting trips into directions")

    splitter = agency.splitter()
    raw_trips = build_raw_trips(reader, routes, service_ids)
    departures = {
        trip_id: stop_times[0].departure_time
        for trip_id, stop_times in reader.stop_times_by_trip().items()
        if stop_times
    }

    for route in routes:
        trips = raw_trips[route.route_id]
        if route.route_id in splitter:
            split = splitter.split_route(route.route_id, trips)
        else:
            split = split_by_feed_direction(route.route_id, trips, agency)

        route.directions = split.directions
        # Sort by first departure time
        route.trips = sorted(split.trips, key=lambda t: (departures[t.trip_id], t.trip_id))

        logger.debug(
            f"Route {route.route_id}: {len(route.trips)} trips, "
            f"{len(route.directions)} directions"
        )

    total_trips = sum(len(route.trips) for route in routes)
    logger.info(f"Split {total_trips} trips across {len(routes)} routes")


def split_by_feed_direction(
    route_id: str, trips: list[RawTrip], agency: AgencyConfig
) -> RouteSplit:
    """
    Split trips of a route without direction spec using the feed's direction_id.

    The headsign comes from the cleaned trip headsigns; differing headsigns
    within one direction go through the agency's merge allow-list. Stops are
    ordered by their index in the trip and the direction's stop list is its
    most common stop sequence. Two directions sharing a headsign are folded
    into direction 0 when the merge is allow-listed.

    Raises:
        UnexpectedMergeError: a headsign merge that is not allow-listed
    """
    by_direction: dict[int, list[RawTrip]] = {}
    for trip in trips:
        by_direction.setdefault(trip.direction_id, []).append(trip)

    split = RouteSplit(route_id=route_id)
    for direction_id, direction_trips in sorted(by_direction.items()):
        label = str(direction_id)
        cleaned = (agency.clean_trip_headsign(t.trip_headsign) for t in direction_trips)
        headsigns = _unique(tuple(headsign for headsign in cleaned if headsign))
        headsign = headsigns[0] if headsigns else ""
        for other_headsign in headsigns[1:]:
            headsign = merge_headsigns(route_id, headsign, other_headsign, agency.merge_rules)

        reported = ReportedDirection(direction_id=direction_id, label=label, headsign=headsign)
        canonical = _find_canonical_sequence(
            [tuple(trip.stop_ids) for trip in direction_trips], f"{route_id}_dir{direction_id}"
        )
        split.directions.append(
            DirectionData(
                direction_id=direction_id,
                label=label,
                headsign=headsign,
                stop_ids=_unique(canonical),
                trip_count=len(direction_trips),
            )
        )

        for trip in direction_trips:
            split.trips.append(
                ClassifiedTrip(
                    trip_id=trip.trip_id,
                    route_id=route_id,
                    service_id=trip.service_id,
                    direction_label=label,
                    reported=reported,
                    stops=tuple(
                        OrderedStop(
                            stop_id=visit.stop_id,
                            stop_sequence=visit.stop_sequence,
                            position=float(index),
                            direction_label=label,
                        )
                        for index, visit in enumerate(trip.visits)
                    ),
                )
            )

    directions = split.directions
    if len(directions) == 2 and directions[0].headsign and (
        directions[0].headsign == directions[1].headsign
    ):
        _fold_directions(split, agency)

    return split


def _fold_directions(split: RouteSplit, agency: AgencyConfig) -> None:
    """Report both feed directions of a route as one, once the merge is allow-listed."""
    first, second = split.directions
    headsign = merge_headsigns(split.route_id, first.headsign, second.headsign, agency.merge_rules)
    merged = ReportedDirection(direction_id=0, label=first.label, headsign=headsign)
    split.directions = [
        DirectionData(
            direction_id=0,
            label=first.label,
            headsign=headsign,
            stop_ids=_unique((*first.stop_ids, *second.stop_ids)),
            trip_count=first.trip_count + second.trip_count,
        )
    ]
    split.trips = [replace(trip, reported=merged) for trip in split.trips]
    logger.debug(f"Route {split.route_id}: feed directions merged as {headsign}")


def _unique(stop_ids: tuple[str, ...]) -> list[str]:
    seen: set[str] = set()
    unique = []
    for stop_id in stop_ids:
        if stop_id not in seen:
            seen.add(stop_id)
            unique.append(stop_id)
    return unique


def _find_canonical_sequence(sequences: list[tuple[str, ...]], route_id: str) -> tuple[str, ...]:
    """Find canonical stop sequence by majority vote, with lexicographic tiebreaker."""
    if not sequences:
        raise ValueError(f"Route {route_id} has no sequences")

    # Count occurrences
    counter = Counter(sequences)
    most_common = counter.most_common()

    canonical = most_common[0][0]
    canonical_count = most_common[0][1]

    # Check if there's a tie
    tied_sequences = [seq for seq, count in most_common if count == canonical_count]

    if len(tied_sequences) > 1:
        # Use lexicographic order as deterministic tiebreaker
        logger.warning(
            f"Route {route_id} has {len(tied_sequences)} sequences with equal frequency "
            f"({canonical_count} trips). Using lexicographic order as tiebreaker."
        )
        canonical = min(tied_sequences)

    return canonical
