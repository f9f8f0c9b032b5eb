"""Agency configuration: which routes to keep, colors, direction tables, text rules."""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from direction_pipeline.agencies.cleaning import TextRule, clean_text
from direction_pipeline.errors import UnexpectedRouteColorError
from direction_pipeline.gtfs.models import Route
from direction_pipeline.split.specs import (
    DirectionSpec,
    HeadsignMergeRule,
    ReferenceStop,
    RouteDirectionSpec,
)
from direction_pipeline.split.splitter import TripDirectionSplitter

logger = logging.getLogger(__name__)

AGENCY_NAMES = ("vernon",)


@dataclass(frozen=True)
class AgencyConfig:
    """Static per-agency tables plus the hooks the pipeline calls."""

    name: str
    agency_color: str
    include_agency_id: str | None = None
    route_colors: Mapping[str, str] = field(default_factory=dict)
    route_specs: tuple[RouteDirectionSpec, ...] = ()
    merge_rules: tuple[HeadsignMergeRule, ...] = ()
    trip_headsign_rules: tuple[TextRule, ...] = ()
    stop_name_rules: tuple[TextRule, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "route_colors", MappingProxyType(dict(self.route_colors)))

    def exclude_route(self, route: Route) -> bool:
        """Check whether a feed route belongs to another agency."""
        return self.include_agency_id is not None and route.agency_id != self.include_agency_id

    def route_color(self, route_id: str, feed_color: str = "") -> str:
        """Resolve a route color: feed value first, then the agency table."""
        if feed_color:
            return feed_color.upper()
        try:
            return self.route_colors[route_id]
        except KeyError:
            raise UnexpectedRouteColorError(route_id) from None

    def clean_trip_headsign(self, headsign: str) -> str:
        """Apply the agency's headsign rules."""
        return clean_text(headsign, self.trip_headsign_rules)

    def clean_stop_name(self, name: str) -> str:
        """Apply the agency's stop name rules."""
        return clean_text(name, self.stop_name_rules)

    def splitter(self) -> TripDirectionSplitter:
        """Build the direction splitter for this agency's route tables."""
        return TripDirectionSplitter(self.route_specs, self.merge_rules)


def _parse_reference_stop(entry: Any) -> ReferenceStop:
    if isinstance(entry, str):
        return ReferenceStop(entry)
    if isinstance(entry, dict) and "stop_id" in entry:
        return ReferenceStop(
            stop_id=str(entry["stop_id"]),
            alternates=tuple(str(stop_id) for stop_id in entry.get("alternates", [])),
            skip=bool(entry.get("skip", False)),
        )
    raise ValueError(f"Invalid reference stop entry: {entry!r}")


def _parse_route_spec(data: dict[str, Any]) -> RouteDirectionSpec:
    directions = tuple(
        DirectionSpec(
            label=str(direction["label"]),
            headsign=direction["headsign"],
            reference=tuple(_parse_reference_stop(entry) for entry in direction["stops"]),
        )
        for direction in data["directions"]
    )
    return RouteDirectionSpec(
        route_id=str(data["route_id"]),
        directions=directions,  # type: ignore[arg-type]
        merge_directions=bool(data.get("merge_directions", False)),
    )


def _parse_rules(data: list[Any]) -> tuple[TextRule, ...]:
    rules = []
    for rule in data:
        if isinstance(rule, str):
            rules.append(TextRule(rule))
        else:
            pattern, replacement = rule
            rules.append(TextRule(pattern, replacement))
    return tuple(rules)


def parse_agency_config(data: dict[str, Any]) -> AgencyConfig:
    """Build an AgencyConfig from its JSON representation."""
    try:
        return AgencyConfig(
            name=data["name"],
            agency_color=data["agency_color"],
            include_agency_id=data.get("include_agency_id"),
            route_colors={str(k): v for k, v in data.get("route_colors", {}).items()},
            route_specs=tuple(_parse_route_spec(route) for route in data.get("routes", [])),
            merge_rules=tuple(
                HeadsignMergeRule(
                    route_id=str(rule["route_id"]),
                    headsigns=frozenset(rule["headsigns"]),
                    merged_headsign=rule["merged_headsign"],
                )
                for rule in data.get("headsign_merges", [])
            ),
            trip_headsign_rules=_parse_rules(data.get("trip_headsign_rules", [])),
            stop_name_rules=_parse_rules(data.get("stop_name_rules", [])),
        )
    except (KeyError, TypeError) as e:
        raise ValueError(f"Invalid agency configuration: {e}") from e


def load_agency_config(path: str) -> AgencyConfig:
    """Load an agency table from a JSON file."""
    config_path = Path(path)
    if not config_path.is_file():
        raise ValueError(f"Agency config not found: {path}")

    with open(config_path, encoding="utf-8") as f:
        data = json.load(f)

    config = parse_agency_config(data)
    logger.info(
        f"Loaded agency config {config.name} from {config_path}: "
        f"{len(config.route_specs)} direction specs, {len(config.route_colors)} route colors"
    )
    return config


def get_agency_config(name: str) -> AgencyConfig:
    """Get an embedded agency table by name."""
    from direction_pipeline.agencies import vernon

    agencies = {"vernon": vernon.CONFIG}
    try:
        return agencies[name]
    except KeyError:
        raise ValueError(
            f"Unknown agency: {name} (available: {', '.join(sorted(agencies))})"
        ) from None

