"""Route selection, route id and color resolution."""

import logging

from direction_pipeline.agencies.config import AgencyConfig
from direction_pipeline.gtfs.models import RouteData
from direction_pipeline.gtfs.reader import GTFSReader

logger = logging.getLogger(__name__)


def build_routes(reader: GTFSReader, agency: AgencyConfig) -> list[RouteData]:
    """Build RouteData for the agency's routes, keyed by route short name."""
    logger.info(f"Building routes for agency {agency.name}")

    routes: list[RouteData] = []
    seen: dict[str, str] = {}
    excluded = 0

    for route in reader.routes:
        if agency.exclude_route(route):
            excluded += 1
            continue

        route_id = route.route_short_name or route.route_id
        if route_id in seen:
            raise ValueError(
                f"Routes {seen[route_id]} and {route.route_id} share route id {route_id}"
            )
        seen[route_id] = route.route_id

        routes.append(
            RouteData(
                route_id=route_id,
                route_id_gtfs=route.route_id,
                short_name=route.route_short_name,
                long_name=route.route_long_name,
                color=agency.route_color(route_id, route.route_color),
            )
        )

    routes.sort(key=lambda r: _route_sort_key(r.route_id))

    if excluded:
        logger.info(f"Excluded {excluded} routes of other agencies")
    logger.info(f"Built {len(routes)} routes")
    return routes


def _route_sort_key(route_id: str) -> tuple[int, int, str]:
    """Numeric route ids first, in numeric order, then the rest lexicographically."""
    if route_id.isdigit():
        return (0, int(route_id), route_id)
    return (1, 0, route_id)
