"""Fatal errors raised while splitting an agency's routes into directions."""


class DirectionSplitError(Exception):
    """Base class for configuration-incompleteness errors that halt a run."""

    def __init__(self, message: str, route_id: str, trip_id: str | None = None) -> None:
        super().__init__(message)
        self.route_id = route_id
        self.trip_id = trip_id


class AmbiguousDirectionError(DirectionSplitError):
    """Trip matches both directions of a route equally well."""

    def __init__(self, route_id: str, trip_id: str, score: tuple[int, int]) -> None:
        super().__init__(
            f"Trip {trip_id} of route {route_id} matches both directions equally "
            f"(score {score[0]}, skip matches {score[1]})",
            route_id,
            trip_id,
        )
        self.score = score


class NoMatchError(DirectionSplitError):
    """Trip shares no ordered stop with either direction of its route."""

    def __init__(self, route_id: str, trip_id: str) -> None:
        super().__init__(
            f"Trip {trip_id} of route {route_id} matches no direction reference sequence",
            route_id,
            trip_id,
        )


class UnexpectedMergeError(DirectionSplitError):
    """Merge of two headsigns requested outside the allow-list."""

    def __init__(self, route_id: str, headsign: str, other_headsign: str) -> None:
        super().__init__(
            f"Unexpected headsigns to merge for route {route_id}: "
            f"'{headsign}' & '{other_headsign}'",
            route_id,
        )
        self.headsigns = (headsign, other_headsign)


class UnexpectedRouteColorError(DirectionSplitError):
    """Route has no color in the feed nor in the agency color table."""

    def __init__(self, route_id: str) -> None:
        super().__init__(f"Unexpected route color for route {route_id}", route_id)
