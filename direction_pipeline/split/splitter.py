"""Trip direction splitter.

Assigns each raw trip of a route to one of the route's two directions by
aligning its stops against each direction's reference stop sequence, then
places every visited stop on the winning direction's ordering so stop times
of all trips in a direction can be sorted together.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from direction_pipeline.errors import AmbiguousDirectionError, NoMatchError, UnexpectedMergeError
from direction_pipeline.gtfs.models import (
    ClassifiedTrip,
    DirectionData,
    OrderedStop,
    RawTrip,
    ReportedDirection,
    RouteSplit,
)
from direction_pipeline.split.specs import (
    DirectionSpec,
    HeadsignMergeRule,
    ReferenceStop,
    RouteDirectionSpec,
)

logger = logging.getLogger(__name__)

NO_SCORE = (0, 0)


@dataclass(frozen=True)
class Match:
    """Alignment of a trip against one direction's reference sequence."""

    direction: DirectionSpec
    score: tuple[int, int]  # (plain/equivalent entries matched, skip entries matched)
    alignment: dict[int, int] = field(default_factory=dict)  # visit index -> reference index

    @property
    def matched(self) -> int:
        """Number of trip stops aligned on plain or equivalent entries."""
        return self.score[0]


def _gain(entry: ReferenceStop) -> tuple[int, int]:
    return (0, 1) if entry.skip else (1, 0)


def _add(score: tuple[int, int], gain: tuple[int, int]) -> tuple[int, int]:
    return (score[0] + gain[0], score[1] + gain[1])


def match_score(direction: DirectionSpec, stop_ids: Sequence[str]) -> Match:
    """
    Align trip stop ids against a direction's reference sequence.

    Computes the longest order-preserving common subsequence, scoring plain
    and equivalent entries first and skip entries second. Among alignments
    with the best score, each trip stop takes the earliest reference entry
    the backtrack allows, so the result is deterministic.

    Args:
        direction: Direction whose reference sequence is matched
        stop_ids: Visited stop ids in trip order

    Returns:
        Match with score and visit-to-reference alignment
    """
    reference = direction.reference
    n, m = len(stop_ids), len(reference)
    table = [[NO_SCORE] * (m + 1) for _ in range(n + 1)]

    for i in range(1, n + 1):
        stop_id = stop_ids[i - 1]
        row, prev_row = table[i], table[i - 1]
        for j in range(1, m + 1):
            best = max(prev_row[j], row[j - 1])
            entry = reference[j - 1]
            if entry.matches(stop_id):
                best = max(best, _add(prev_row[j - 1], _gain(entry)))
            row[j] = best

    alignment: dict[int, int] = {}
    i, j = n, m
    while i > 0 and j > 0:
        entry = reference[j - 1]
        if table[i][j] == table[i][j - 1]:
            j -= 1
        elif entry.matches(stop_ids[i - 1]) and table[i][j] == _add(
            table[i - 1][j - 1], _gain(entry)
        ):
            alignment[i - 1] = j - 1
            i -= 1
            j -= 1
        else:
            i -= 1

    return Match(direction=direction, score=table[n][m], alignment=alignment)


def order_stops(trip: RawTrip, match: Match) -> tuple[OrderedStop, ...]:
    """
    Place every visit of a trip on the matched direction's ordering.

    Aligned visits take their reference index. Runs of unaligned visits are
    spread evenly between the nearest aligned neighbours, keeping the trip's
    own order; before the first aligned visit the lower bound is -1, after
    the last one the upper bound is the reference length.
    """
    visits = trip.visits
    positions: list[float | None] = [None] * len(visits)
    for visit_index, reference_index in match.alignment.items():
        positions[visit_index] = float(reference_index)

    index = 0
    while index < len(visits):
        if positions[index] is not None:
            index += 1
            continue
        start = index
        while index < len(visits) and positions[index] is None:
            index += 1
        lower = positions[start - 1] if start > 0 else -1.0
        upper = positions[index] if index < len(visits) else float(len(match.direction.reference))
        step = (upper - lower) / (index - start + 1)  # type: ignore[operator]
        for offset in range(index - start):
            positions[start + offset] = lower + step * (offset + 1)  # type: ignore[operator]

    label = match.direction.label
    return tuple(
        OrderedStop(
            stop_id=visit.stop_id,
            stop_sequence=visit.stop_sequence,
            position=positions[idx],  # type: ignore[arg-type]
            direction_label=label,
            matched=idx in match.alignment,
        )
        for idx, visit in enumerate(visits)
    )


def stop_sort_key(stop: OrderedStop) -> tuple[float, int]:
    """Sort key of a stop within its direction: position, then feed sequence."""
    return (stop.position, stop.stop_sequence)


def compare_stop_order(direction: DirectionSpec, stop_a: OrderedStop, stop_b: OrderedStop) -> int:
    """
    Compare two stops of one direction.

    Returns:
        -1 if stop_a comes before stop_b, 1 if after, 0 if equal
    """
    for stop in (stop_a, stop_b):
        if stop.direction_label != direction.label:
            raise ValueError(
                f"Stop {stop.stop_id} belongs to direction {stop.direction_label}, "
                f"not {direction.label}"
            )
    key_a, key_b = stop_sort_key(stop_a), stop_sort_key(stop_b)
    return (key_a > key_b) - (key_a < key_b)


def merge_headsigns(
    route_id: str,
    headsign: str,
    other_headsign: str,
    merge_rules: Iterable[HeadsignMergeRule],
) -> str:
    """Resolve a headsign merge request against the allow-list."""
    for rule in merge_rules:
        if rule.applies_to(route_id, headsign, other_headsign):
            return rule.merged_headsign
    raise UnexpectedMergeError(route_id, headsign, other_headsign)


def reported_directions(
    route: RouteDirectionSpec, merge_rules: Iterable[HeadsignMergeRule] = ()
) -> dict[str, ReportedDirection]:
    """
    Map each direction label of a route to the direction riders see.

    Routes with the merge override, or whose two directions carry the same
    headsign, report a single direction (first label, id 0) with the
    allow-listed merged headsign.
    """
    first, second = route.directions
    if route.merge_directions or first.headsign == second.headsign:
        headsign = merge_headsigns(route.route_id, first.headsign, second.headsign, merge_rules)
        merged = ReportedDirection(direction_id=0, label=first.label, headsign=headsign)
        return {first.label: merged, second.label: merged}

    return {
        direction.label: ReportedDirection(
            direction_id=direction_id, label=direction.label, headsign=direction.headsign
        )
        for direction_id, direction in enumerate(route.directions)
    }


def _classify(
    route: RouteDirectionSpec, trip: RawTrip, reported: dict[str, ReportedDirection]
) -> ClassifiedTrip:
    stop_ids = trip.stop_ids
    first, second = (match_score(direction, stop_ids) for direction in route.directions)

    if first.matched == 0 and second.matched == 0:
        raise NoMatchError(route.route_id, trip.trip_id)

    if first.score == second.score:
        if not route.merge_directions:
            raise AmbiguousDirectionError(route.route_id, trip.trip_id, first.score)
        winner = first
    else:
        winner = first if first.score > second.score else second

    return ClassifiedTrip(
        trip_id=trip.trip_id,
        route_id=route.route_id,
        service_id=trip.service_id,
        direction_label=winner.direction.label,
        reported=reported[winner.direction.label],
        stops=order_stops(trip, winner),
        score=winner.score,
    )


def classify(
    route: RouteDirectionSpec,
    trip: RawTrip,
    merge_rules: Iterable[HeadsignMergeRule] = (),
) -> ClassifiedTrip:
    """
    Assign a raw trip to one of the route's two directions.

    The direction with the strictly higher score wins. Equal scores are
    ambiguous unless the route has the merge override, in which case the
    first direction orders the stops.

    Raises:
        NoMatchError: no trip stop aligns with a plain or equivalent entry
        AmbiguousDirectionError: both directions score the same, no override
        UnexpectedMergeError: the route needs a merge that is not allow-listed
    """
    return _classify(route, trip, reported_directions(route, merge_rules))


def _split_route(
    route: RouteDirectionSpec,
    trips: Iterable[RawTrip],
    reported: dict[str, ReportedDirection],
) -> RouteSplit:
    classified = [_classify(route, trip, reported) for trip in trips]

    directions: dict[int, DirectionData] = {}
    seen: dict[int, set[str]] = {}
    for direction in route.directions:
        rep = reported[direction.label]
        data = directions.get(rep.direction_id)
        if data is None:
            data = DirectionData(
                direction_id=rep.direction_id, label=rep.label, headsign=rep.headsign
            )
            directions[rep.direction_id] = data
            seen[rep.direction_id] = set()

        direction_trips = [trip for trip in classified if trip.direction_label == direction.label]
        data.trip_count += len(direction_trips)

        stops = sorted(
            (stop for trip in direction_trips for stop in trip.stops), key=stop_sort_key
        )
        for stop in stops:
            if stop.stop_id not in seen[rep.direction_id]:
                seen[rep.direction_id].add(stop.stop_id)
                data.stop_ids.append(stop.stop_id)

    split = RouteSplit(
        route_id=route.route_id,
        directions=[data for _, data in sorted(directions.items()) if data.trip_count > 0],
        trips=classified,
    )
    logger.debug(
        f"Route {route.route_id}: {len(classified)} trips in {len(split.directions)} directions"
    )
    return split


def split_route(
    route: RouteDirectionSpec,
    trips: Iterable[RawTrip],
    merge_rules: Iterable[HeadsignMergeRule] = (),
) -> RouteSplit:
    """Classify all trips of a route and build each reported direction's stop list."""
    return _split_route(route, trips, reported_directions(route, merge_rules))


class TripDirectionSplitter:
    """Splitter bound to an agency's immutable route direction tables."""

    def __init__(
        self,
        routes: Iterable[RouteDirectionSpec],
        merge_rules: Iterable[HeadsignMergeRule] = (),
    ) -> None:
        """Index route specs and resolve merged headsigns up front."""
        by_route: dict[str, RouteDirectionSpec] = {}
        for route in routes:
            if route.route_id in by_route:
                raise ValueError(f"Duplicate direction spec for route {route.route_id}")
            by_route[route.route_id] = route

        self.routes = MappingProxyType(by_route)
        self.merge_rules = tuple(merge_rules)
        self._reported = {
            route_id: reported_directions(route, self.merge_rules)
            for route_id, route in by_route.items()
        }

    def __contains__(self, route_id: object) -> bool:
        return route_id in self.routes

    def classify(self, trip: RawTrip) -> ClassifiedTrip:
        """Classify a trip of a configured route."""
        route = self.routes[trip.route_id]
        return _classify(route, trip, self._reported[trip.route_id])

    def split_route(self, route_id: str, trips: Iterable[RawTrip]) -> RouteSplit:
        """Split all trips of a configured route."""
        return _split_route(self.routes[route_id], trips, self._reported[route_id])
