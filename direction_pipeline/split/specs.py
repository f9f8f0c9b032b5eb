"""Per-route direction specifications consumed by the trip direction splitter."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ReferenceStop:
    """One entry of a direction's reference stop sequence.

    A plain entry has a single stop id. An equivalent entry lists alternate
    stop ids sharing the same logical position (e.g. exchange bays). A skip
    entry marks a stop served by some trips only: it places the stop but
    does not count toward the match score.
    """

    stop_id: str
    alternates: tuple[str, ...] = ()
    skip: bool = False

    @property
    def stop_ids(self) -> tuple[str, ...]:
        """Anchor stop id followed by its alternates."""
        return (self.stop_id, *self.alternates)

    def matches(self, stop_id: str) -> bool:
        """Check whether a visited stop id fills this entry."""
        return stop_id == self.stop_id or stop_id in self.alternates


def plain(stop_id: str) -> ReferenceStop:
    """Build a plain reference entry."""
    return ReferenceStop(stop_id)


def equivalent(stop_id: str, *alternates: str) -> ReferenceStop:
    """Build an entry reachable through several physical stop ids."""
    return ReferenceStop(stop_id, alternates=tuple(alternates))


def skip(stop_id: str) -> ReferenceStop:
    """Build an entry for a stop served by only some trips."""
    return ReferenceStop(stop_id, skip=True)


@dataclass(frozen=True)
class DirectionSpec:
    """One logical travel direction of a route."""

    label: str
    headsign: str
    reference: tuple[ReferenceStop, ...]

    def __post_init__(self) -> None:
        if not self.reference:
            raise ValueError(f"Direction {self.label} has an empty reference stop sequence")

    @property
    def stop_ids(self) -> set[str]:
        """All stop ids named by the reference, alternates included."""
        return {stop_id for entry in self.reference for stop_id in entry.stop_ids}


@dataclass(frozen=True)
class RouteDirectionSpec:
    """Both directions of a route plus its merge override."""

    route_id: str
    directions: tuple[DirectionSpec, DirectionSpec]
    merge_directions: bool = False

    def __post_init__(self) -> None:
        if len(self.directions) != 2:
            raise ValueError(
                f"Route {self.route_id} must declare exactly 2 directions, "
                f"got {len(self.directions)}"
            )
        first, second = self.directions
        if first.label == second.label:
            raise ValueError(f"Route {self.route_id} has duplicate direction label {first.label}")
        if not first.stop_ids & second.stop_ids:
            raise ValueError(
                f"Route {self.route_id} directions {first.label} and {second.label} "
                f"share no stop to anchor them"
            )

    def direction(self, label: str) -> DirectionSpec:
        """Get a direction by label."""
        for direction in self.directions:
            if direction.label == label:
                return direction
        raise KeyError(f"Route {self.route_id} has no direction {label}")


def route_spec(
    route_id: str,
    first: tuple[str, str, list[str | ReferenceStop]],
    second: tuple[str, str, list[str | ReferenceStop]],
    merge_directions: bool = False,
) -> RouteDirectionSpec:
    """Build a RouteDirectionSpec from (label, headsign, stops) tuples.

    Stops given as bare strings become plain entries.
    """
    directions = []
    for label, headsign, stops in (first, second):
        reference = tuple(plain(entry) if isinstance(entry, str) else entry for entry in stops)
        directions.append(DirectionSpec(label=label, headsign=headsign, reference=reference))
    return RouteDirectionSpec(
        route_id=route_id,
        directions=(directions[0], directions[1]),
        merge_directions=merge_directions,
    )


@dataclass(frozen=True)
class HeadsignMergeRule:
    """Allow-listed merge of a route's headsigns into one rider-facing label."""

    route_id: str
    headsigns: frozenset[str]
    merged_headsign: str

    def applies_to(self, route_id: str, headsign: str, other_headsign: str) -> bool:
        """Check whether this rule covers merging the two headsigns on a route."""
        return route_id == self.route_id and {headsign, other_headsign} == set(self.headsigns)
