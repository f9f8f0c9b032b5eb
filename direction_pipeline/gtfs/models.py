"""Data models for GTFS and internal representations."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Stop:
    """GTFS stop with coordinates."""

    stop_id: str
    name: str
    lat: float
    lon: float


@dataclass(frozen=True)
class Route:
    """GTFS route."""

    route_id: str
    agency_id: str
    route_short_name: str
    route_long_name: str
    route_type: int
    route_color: str = ""


@dataclass(frozen=True)
class Trip:
    """GTFS trip."""

    trip_id: str
    route_id: str
    service_id: str
    trip_headsign: str = ""
    direction_id: int = 0


@dataclass(frozen=True)
class StopTime:
    """GTFS stop time."""

    trip_id: str
    stop_id: str
    arrival_time: int  # seconds since midnight
    departure_time: int  # seconds since midnight
    stop_sequence: int


@dataclass(frozen=True)
class Agency:
    """GTFS agency."""

    agency_id: str
    agency_name: str
    agency_timezone: str


@dataclass(frozen=True)
class StopVisit:
    """One stop visit of a raw trip, as recorded in the feed."""

    stop_id: str
    stop_sequence: int


@dataclass(frozen=True)
class RawTrip:
    """Trip not yet assigned to a direction, visits in feed order."""

    trip_id: str
    route_id: str
    visits: tuple[StopVisit, ...]
    service_id: str = ""
    trip_headsign: str = ""
    direction_id: int = 0

    @property
    def stop_ids(self) -> list[str]:
        """Visited stop ids in feed order."""
        return [visit.stop_id for visit in self.visits]


@dataclass(frozen=True)
class OrderedStop:
    """Stop visit placed on its direction's reference ordering."""

    stop_id: str
    stop_sequence: int
    position: float
    direction_label: str
    matched: bool = True


@dataclass(frozen=True)
class ReportedDirection:
    """Direction as exposed to riders, after any headsign merge."""

    direction_id: int
    label: str
    headsign: str


@dataclass(frozen=True)
class ClassifiedTrip:
    """Trip assigned to a direction with its stops ordered."""

    trip_id: str
    route_id: str
    service_id: str
    direction_label: str  # direction whose reference ordered the stops
    reported: ReportedDirection
    stops: tuple[OrderedStop, ...]
    score: tuple[int, int] = (0, 0)


@dataclass
class DirectionData:
    """Reported direction of a route with its ordered stop list."""

    direction_id: int
    label: str
    headsign: str
    stop_ids: list[str] = field(default_factory=list)
    trip_count: int = 0


@dataclass
class RouteSplit:
    """Result of splitting all trips of one route."""

    route_id: str
    directions: list[DirectionData] = field(default_factory=list)
    trips: list[ClassifiedTrip] = field(default_factory=list)


@dataclass
class StopData:
    """Internal stop representation with cleaned name and route references."""

    stop_id: str
    name: str
    lat: float
    lon: float
    route_ids: list[str] = field(default_factory=list)


@dataclass
class RouteData:
    """Internal route representation with resolved color and directions."""

    route_id: str  # agency-facing id (route short name)
    route_id_gtfs: str
    short_name: str
    long_name: str
    color: str
    directions: list[DirectionData] = field(default_factory=list)
    trips: list[ClassifiedTrip] = field(default_factory=list)


@dataclass
class Manifest:
    """Build manifest with metadata and checksums."""

    schema_version: int
    tool_version: str
    created_at_iso: str
    inputs: dict[str, Any]
    outputs: dict[str, str]  # filename -> sha256
    stats: dict[str, int]
    build: dict[str, str]


@dataclass
class ValidationReport:
    """Report from validation process."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    stats: dict[str, int] = field(default_factory=dict)


@dataclass
class ConvertConfig:
    """Configuration for conversion process."""

    input_path: str
    output_path: str
    agency: str = "vernon"
    config_path: str | None = None  # JSON agency table, overrides agency
    service_ids: frozenset[str] | None = None  # useful service ids, None keeps all
