"""Stop transformation with cleaned names and route references."""

import logging

from direction_pipeline.agencies.config import AgencyConfig
from direction_pipeline.gtfs.models import RouteData, StopData
from direction_pipeline.gtfs.reader import GTFSReader

logger = logging.getLogger(__name__)


def build_stops(
    reader: GTFSReader, routes: list[RouteData], agency: AgencyConfig
) -> list[StopData]:
    """Build StopData for every stop served by a kept trip."""
    logger.info("Building stops with cleaned names")

    routes_by_stop: dict[str, list[str]] = {}
    for route in routes:
        for trip in route.trips:
            for stop in trip.stops:
                route_ids = routes_by_stop.setdefault(stop.stop_id, [])
                if route.route_id not in route_ids:
                    route_ids.append(route.route_id)

    stops: list[StopData] = []
    for stop in reader.stops:
        if stop.stop_id not in routes_by_stop:
            continue
        stops.append(
            StopData(
                stop_id=stop.stop_id,
                name=agency.clean_stop_name(stop.name),
                lat=stop.lat,
                lon=stop.lon,
                route_ids=routes_by_stop[stop.stop_id],
            )
        )

    logger.info(f"Built {len(stops)} stops ({len(reader.stops) - len(stops)} unused)")
    return stops
