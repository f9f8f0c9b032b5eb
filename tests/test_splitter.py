"""Tests for the trip direction splitter."""

import functools

import pytest

from direction_pipeline.errors import AmbiguousDirectionError, NoMatchError, UnexpectedMergeError
from direction_pipeline.gtfs.models import OrderedStop, RawTrip, StopVisit
from direction_pipeline.split.specs import HeadsignMergeRule, equivalent, route_spec, skip
from direction_pipeline.split.splitter import (
    TripDirectionSplitter,
    classify,
    compare_stop_order,
    match_score,
    split_route,
    stop_sort_key,
)


def make_trip(*stop_ids: str, trip_id: str = "T1", route_id: str = "R1") -> RawTrip:
    """Build a raw trip visiting stop_ids with sequence numbers 1..n."""
    return RawTrip(
        trip_id=trip_id,
        route_id=route_id,
        visits=tuple(StopVisit(stop_id, index + 1) for index, stop_id in enumerate(stop_ids)),
        service_id="WK",
    )


def linear_route(
    merge: bool = False,
    north_headsign: str = "North End",
    south_headsign: str = "Downtown",
):
    """Route R1 running A-B-C-D northbound and D-C-B-A southbound."""
    return route_spec(
        "R1",
        ("NORTH", north_headsign, ["A", "B", "C", "D"]),
        ("SOUTH", south_headsign, ["D", "C", "B", "A"]),
        merge_directions=merge,
    )


def test_match_score_counts_order_preserving_stops() -> None:
    """Test score is the longest order-preserving common subsequence."""
    north = linear_route().direction("NORTH")

    match = match_score(north, ["A", "C", "D"])

    assert match.score == (3, 0)
    assert match.alignment == {0: 0, 1: 2, 2: 3}


def test_reverse_trip_scores_one_against_forward() -> None:
    """Test a reversed trip matches only one stop of the forward reference."""
    route = linear_route()

    assert match_score(route.direction("NORTH"), ["D", "C", "B", "A"]).score == (1, 0)
    assert match_score(route.direction("SOUTH"), ["D", "C", "B", "A"]).score == (4, 0)

    result = classify(route, make_trip("D", "C", "B", "A"))
    assert result.direction_label == "SOUTH"
    assert result.reported.headsign == "Downtown"
    assert result.reported.direction_id == 1


def test_missing_stop_keeps_relative_order() -> None:
    """Test A, C, D against A-B-C-D orders as A < C < D."""
    route = linear_route()

    result = classify(route, make_trip("A", "C", "D"))

    assert result.direction_label == "NORTH"
    a, c, d = result.stops
    assert [stop.position for stop in result.stops] == [0.0, 2.0, 3.0]
    north = route.direction("NORTH")
    assert compare_stop_order(north, a, c) == -1
    assert compare_stop_order(north, c, d) == -1
    assert compare_stop_order(north, d, a) == 1


@pytest.mark.parametrize(
    ("stop_ids", "expected"),
    [
        (("A", "B"), "OUT"),
        (("A", "C", "X"), "OUT"),
        (("X", "D", "F"), "BACK"),
        (("E",), "BACK"),
    ],
)
def test_exact_subsequence_classifies_to_its_direction(
    stop_ids: tuple[str, ...], expected: str
) -> None:
    """Test trips that are subsequences of only one reference pick that direction."""
    route = route_spec(
        "R2",
        ("OUT", "Terminal", ["A", "B", "C", "X"]),
        ("BACK", "Exchange", ["X", "D", "E", "F"]),
    )

    result = classify(route, make_trip(*stop_ids, route_id="R2"))

    assert result.direction_label == expected


def test_classify_is_idempotent() -> None:
    """Test classifying the same trip twice gives the same result."""
    route = linear_route()
    trip = make_trip("A", "X", "C", "D")

    assert classify(route, trip) == classify(route, trip)


def test_no_shared_stop_raises_no_match() -> None:
    """Test a trip sharing no stop with either reference is reported."""
    with pytest.raises(NoMatchError) as exc_info:
        classify(linear_route(), make_trip("Y", "Z", trip_id="LOST"))

    assert exc_info.value.trip_id == "LOST"
    assert exc_info.value.route_id == "R1"


def test_skip_only_match_raises_no_match() -> None:
    """Test a trip aligning only on skip entries is not classified."""
    route = route_spec(
        "R6",
        ("0", "Hill", ["A", skip("S"), "B"]),
        ("1", "Lake", ["B", "A"]),
    )

    assert match_score(route.direction("0"), ["S"]).score == (0, 1)

    with pytest.raises(NoMatchError):
        classify(route, make_trip("S", route_id="R6"))


def test_equal_match_raises_ambiguous() -> None:
    """Test a palindrome-like path matching both directions equally is fatal."""
    route = route_spec(
        "R3",
        ("0", "Hill", ["A", "B", "C"]),
        ("1", "Lake", ["C", "B", "A"]),
    )

    with pytest.raises(AmbiguousDirectionError) as exc_info:
        classify(route, make_trip("A", "B", "A", route_id="R3"))

    assert exc_info.value.score == (2, 0)


def test_merge_override_accepts_equal_match() -> None:
    """Test a tie on a merged route is ordered by the first direction."""
    route = route_spec(
        "R3",
        ("0", "Hill", ["A", "B", "C"]),
        ("1", "Lake", ["C", "B", "A"]),
        merge_directions=True,
    )
    rules = [HeadsignMergeRule("R3", frozenset({"Hill", "Lake"}), "Hill")]

    result = classify(route, make_trip("A", "B", "A", route_id="R3"), rules)

    assert result.direction_label == "0"
    assert result.reported.headsign == "Hill"


def test_allow_listed_merge_reports_single_headsign() -> None:
    """Test Outbound / North End merge yields North End for both directions."""
    route = linear_route(merge=True, north_headsign="Outbound", south_headsign="North End")
    rules = [HeadsignMergeRule("R1", frozenset({"Outbound", "North End"}), "North End")]
    trips = [
        make_trip("A", "B", "C", "D", trip_id="T1"),
        make_trip("D", "C", "B", "A", trip_id="T2"),
    ]

    split = split_route(route, trips, rules)

    assert [trip.reported.headsign for trip in split.trips] == ["North End", "North End"]
    assert [trip.direction_label for trip in split.trips] == ["NORTH", "SOUTH"]
    assert len(split.directions) == 1
    direction = split.directions[0]
    assert direction.headsign == "North End"
    assert direction.direction_id == 0
    assert direction.trip_count == 2
    assert direction.stop_ids == ["A", "B", "C", "D"]


def test_merge_outside_allow_list_is_fatal() -> None:
    """Test a merge override without an allow-list entry raises."""
    route = linear_route(merge=True)
    rules = [HeadsignMergeRule("OTHER", frozenset({"North End", "Downtown"}), "Downtown")]

    with pytest.raises(UnexpectedMergeError):
        classify(route, make_trip("A", "B"), rules)

    with pytest.raises(UnexpectedMergeError):
        TripDirectionSplitter([route], rules)


def test_identical_headsigns_need_allow_list() -> None:
    """Test two directions sharing a headsign are merged only when allow-listed."""
    route = linear_route(north_headsign="Loop", south_headsign="Loop")

    with pytest.raises(UnexpectedMergeError):
        classify(route, make_trip("A", "B"))

    rules = [HeadsignMergeRule("R1", frozenset({"Loop"}), "Loop")]
    result = classify(route, make_trip("D", "C"), rules)
    assert result.reported.headsign == "Loop"
    assert result.reported.direction_id == 0
    assert result.direction_label == "SOUTH"


def test_equivalent_entry_matches_alternate_stop() -> None:
    """Test an alternate boarding bay fills its anchor's position."""
    route = route_spec(
        "R4",
        ("0", "Exchange", ["A", equivalent("BAY1", "BAY2"), "C"]),
        ("1", "Hill", ["C", "Z", "A"]),
    )

    result = classify(route, make_trip("A", "BAY2", "C", route_id="R4"))

    assert result.direction_label == "0"
    assert result.score == (3, 0)
    assert result.stops[1].position == 1.0
    assert result.stops[1].matched


def test_skip_entries_break_ties_without_scoring() -> None:
    """Test skip stops only decide between equally scored directions."""
    route = route_spec(
        "R5",
        ("0", "Hill", ["A", skip("S"), "B", "C"]),
        ("1", "Lake", ["C", "B", skip("S"), "A"]),
    )

    assert match_score(route.direction("0"), ["S", "B"]).score == (1, 1)
    assert match_score(route.direction("1"), ["S", "B"]).score == (1, 0)

    result = classify(route, make_trip("S", "B", route_id="R5"))
    assert result.direction_label == "0"
    assert [stop.position for stop in result.stops] == [1.0, 2.0]


def test_unmatched_stops_are_interpolated() -> None:
    """Test stops missing from the reference sit between their matched neighbours."""
    route = linear_route()

    result = classify(route, make_trip("A", "X", "Y", "C", "Z"))

    positions = [stop.position for stop in result.stops]
    assert positions == pytest.approx([0.0, 2 / 3, 4 / 3, 2.0, 3.0])
    assert [stop.matched for stop in result.stops] == [True, False, False, True, False]


def test_leading_unmatched_stop_is_placed_before_first_match() -> None:
    """Test a stop before the first matched one gets a lower position."""
    result = classify(linear_route(), make_trip("W", "B", "C"))

    assert [stop.position for stop in result.stops] == [0.0, 1.0, 2.0]
    assert not result.stops[0].matched


def test_repeated_reference_stop_takes_earliest_position() -> None:
    """Test a stop listed twice in the reference aligns deterministically."""
    route = route_spec(
        "R7",
        ("WEST", "Lakeshore", ["X", "L", "M", "L", "Y"]),
        ("EAST", "Downtown", ["Y", "Q", "X"]),
    )

    loop = classify(route, make_trip("X", "L", "M", "L", "Y", route_id="R7"))
    short = classify(route, make_trip("X", "L", "Y", route_id="R7"))

    assert [stop.position for stop in loop.stops] == [0.0, 1.0, 2.0, 3.0, 4.0]
    assert [stop.position for stop in short.stops] == [0.0, 1.0, 4.0]


def test_compare_stop_order_breaks_ties_on_sequence() -> None:
    """Test stops with the same position are ordered by feed sequence."""
    north = linear_route().direction("NORTH")
    first = OrderedStop("X", stop_sequence=2, position=1.5, direction_label="NORTH")
    second = OrderedStop("Y", stop_sequence=5, position=1.5, direction_label="NORTH")
    same = OrderedStop("Z", stop_sequence=2, position=1.5, direction_label="NORTH")

    assert compare_stop_order(north, first, second) == -1
    assert compare_stop_order(north, second, first) == 1
    assert compare_stop_order(north, first, same) == 0

    by_comparison = functools.cmp_to_key(lambda a, b: compare_stop_order(north, a, b))
    stops = sorted([second, first], key=by_comparison)
    assert stops == sorted([second, first], key=stop_sort_key)


def test_compare_stop_order_rejects_other_direction() -> None:
    """Test comparing stops across directions is an error."""
    north = linear_route().direction("NORTH")
    a = OrderedStop("A", stop_sequence=1, position=0.0, direction_label="NORTH")
    b = OrderedStop("B", stop_sequence=2, position=1.0, direction_label="SOUTH")

    with pytest.raises(ValueError):
        compare_stop_order(north, a, b)


def test_split_route_builds_direction_stop_lists() -> None:
    """Test each direction lists the union of its trips' stops in order."""
    trips = [
        make_trip("A", "B", "D", trip_id="T1"),
        make_trip("A", "X", "C", "D", trip_id="T2"),
        make_trip("D", "B", "A", trip_id="T3"),
    ]

    split = split_route(linear_route(), trips)

    assert [d.label for d in split.directions] == ["NORTH", "SOUTH"]
    north, south = split.directions
    assert north.stop_ids == ["A", "B", "X", "C", "D"]
    assert north.trip_count == 2
    assert south.stop_ids == ["D", "B", "A"]
    assert south.trip_count == 1
    assert [trip.trip_id for trip in split.trips] == ["T1", "T2", "T3"]


def test_split_route_drops_direction_without_trips() -> None:
    """Test a direction with no trips is not reported."""
    split = split_route(linear_route(), [make_trip("A", "B")])

    assert [d.label for d in split.directions] == ["NORTH"]


def test_splitter_indexes_routes() -> None:
    """Test the bound splitter classifies by the trip's route id."""
    splitter = TripDirectionSplitter([linear_route()])

    assert "R1" in splitter
    assert "R9" not in splitter
    assert splitter.classify(make_trip("C", "D")).direction_label == "NORTH"
    assert len(splitter.split_route("R1", [make_trip("B", "A")]).trips) == 1

    with pytest.raises(ValueError):
        TripDirectionSplitter([linear_route(), linear_route()])
