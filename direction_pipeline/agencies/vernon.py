"""Vernon Regional Transit System (BC Transit feed, agency 17)."""

from direction_pipeline.agencies.cleaning import (
    CLEAN_AND,
    CLEAN_AT,
    CLEAN_BOUNDS,
    KEEP_TO,
    REMOVE_VIA,
    TextRule,
)
from direction_pipeline.agencies.config import AgencyConfig
from direction_pipeline.split.specs import HeadsignMergeRule, route_spec, skip

INCLUDE_AGENCY_ID = "17"

AGENCY_COLOR_GREEN = "34B233"  # corporate graphic standards
AGENCY_COLOR_BLUE = "002C77"  # corporate graphic standards
AGENCY_COLOR = AGENCY_COLOR_GREEN

ROUTE_COLORS = {
    "1": "004B8E",
    "2": "8AC641",
    "3": "F68C1F",
    "4": "8E0C3A",
    "5": "E81D89",
    "6": "01AEF0",
    "7": "00AB4F",
    "8": "B3AB7D",
    "9": "E170AA",
    "11": "FCAF18",
    "60": "A7439B",
    "61": "B3B828",
    "90": AGENCY_COLOR_BLUE,
}

DOWNTOWN = "Downtown Vernon"

ROUTE_SPECS = (
    # both directions overlap, merged into one
    route_spec(
        "1",
        ("NORTH", DOWNTOWN, [
            "144021",  # Westbound Coldstream Creek at McClounie
            "144027",
            "144275",  # Downtown Exchange Bay D
        ]),
        ("SOUTH", "Coldstream", [
            "144275",  # Downtown Exchange Bay D
            "144012",
            "144021",  # Westbound Coldstream Creek at McClounie
        ]),
        merge_directions=True,
    ),
    route_spec(
        "2",
        ("NORTH", "Pleasant Valley", [
            "144000",  # Downtown Exchange Bay A
            "144049",
            "144061",  # Northbound Pleasant Valley at Silver Star
        ]),
        ("SOUTH", DOWNTOWN, [
            "144061",  # Northbound Pleasant Valley at Silver Star
            "144068",
            "144000",  # Downtown Exchange Bay A
        ]),
    ),
    route_spec(
        "3",
        ("NORTH", "Walmart", [
            "144276",  # Downtown Exchange Bay F
            "144084",
            "144094",  # Eastbound 58 Ave at 20 St
        ]),
        ("SOUTH", DOWNTOWN, [
            "144094",  # Eastbound 58 Ave at 20 St
            "144103",
            "144276",  # Downtown Exchange Bay F
        ]),
    ),
    route_spec(
        "4",
        ("EAST", "Lakeview Pk", [
            "144275",  # Downtown Exchange Bay D
            "144116",
            "144123",  # Southbound 18 St at 30 Ave
        ]),
        ("WEST", DOWNTOWN, [
            "144123",  # Southbound 18 St at 30 Ave
            "144131",
            "144275",  # Downtown Exchange Bay D
        ]),
    ),
    route_spec(
        "5",
        ("NORTH", DOWNTOWN, [
            "144147",  # Northbound Okanagan at S Vernon
            "144158",
            "144276",  # Downtown Exchange Bay F
        ]),
        ("SOUTH", "South Vernon", [
            "144276",  # Downtown Exchange Bay F
            "144140",
            "144147",  # Northbound Okanagan at S Vernon
        ]),
    ),
    route_spec(
        "6",
        ("NORTH", DOWNTOWN, [
            "144170",  # Northbound 9330 block Hwy 97
            "144175",
            "144037",  # Downtown Exchange Bay C
        ]),
        ("SOUTH", "College", [
            "144037",  # Downtown Exchange Bay C
            "144285",
            "144170",  # Northbound 9330 block Hwy 97
        ]),
    ),
    route_spec(
        "7",
        ("EAST", DOWNTOWN, [
            "144207",  # Westbound Lakeshore at Tronson
            "144216",
            "144111",
            "144038",  # Downtown Exchange Bay B
            "144000",  # Downtown Exchange Bay A
        ]),
        ("WEST", "Lakeshore", [
            "144000",  # Downtown Exchange Bay A
            "144038",  # Downtown Exchange Bay B
            "144178",
            "144184",
            "144186",  # visited twice
            "144187",
            "144189",
            skip("144190"),
            skip("144197"),
            skip("144310"),
            skip("144311"),
            skip("144312"),
            skip("144313"),
            skip("144250"),
            skip("144310"),
            skip("144311"),
            "144186",
            "144199",
            "144207",  # Westbound Lakeshore at Tronson
        ]),
    ),
    route_spec(
        "8",
        ("EAST", DOWNTOWN, [
            "144257",  # Northbound Tronson at Bella Vista
            "144215",
            "144038",  # Downtown Exchange Bay B
        ]),
        ("WEST", "Bella Vista", [
            "144038",  # Downtown Exchange Bay B
            "144251",
            "144257",  # Northbound Tronson at Bella Vista
        ]),
    ),
    route_spec(
        "60",
        ("0", "Enderby", [
            "144274",  # Downtown Exchange Bay E
            "144045",
            skip("106017"),
            "144084",
            "544004",
            "144229",  # Northbound 3200 block Smith
            "144294",  # Eastbound Mill at George
        ]),
        ("1", "Vernon", [
            "144294",  # Eastbound Mill at George
            "144292",  # Southbound Smith at Pleasant Valley
            "144274",  # Downtown Exchange Bay E
        ]),
    ),
    route_spec(
        "61",
        ("0", "Lumby", [
            "144000",  # Downtown Exchange Bay A
            "544010",  # Eastbound Hwy 6 at Freeman
            skip("544008"),
            "144246",
            "144266",  # Southbound Norris at Glencaird
        ]),
        ("1", "Vernon", [
            "144266",  # Southbound Norris at Glencaird
            "144281",
            skip("544007"),
            "544006",  # Westbound Hwy 6 at Freeman
            "144000",  # Downtown Exchange Bay A
        ]),
    ),
    route_spec(
        "90",
        ("0", "Vernon", [
            "140104",  # Northbound Alumni Ave at Transit Way Bay E
            "103654",
            "144274",  # Downtown Exchange Bay E
        ]),
        ("1", "UBCO", [
            "144274",  # Downtown Exchange Bay E
            "144265",
            "140104",  # Northbound Alumni Ave at Transit Way Bay E
        ]),
    ),
)

MERGE_RULES = (
    HeadsignMergeRule(
        route_id="1",
        headsigns=frozenset({DOWNTOWN, "Coldstream"}),
        merged_headsign="Coldstream",
    ),
)

TRIP_HEADSIGN_RULES = (
    KEEP_TO,
    REMOVE_VIA,
    TextRule(r"^.+- "),  # "<route long name> - " prefix
    TextRule(r"-$"),
    CLEAN_AT,
    CLEAN_AND,
)

STOP_NAME_RULES = (
    CLEAN_AT,
    CLEAN_AND,
    CLEAN_BOUNDS,
)

CONFIG = AgencyConfig(
    name="vernon",
    agency_color=AGENCY_COLOR,
    include_agency_id=INCLUDE_AGENCY_ID,
    route_colors=ROUTE_COLORS,
    route_specs=ROUTE_SPECS,
    merge_rules=MERGE_RULES,
    trip_headsign_rules=TRIP_HEADSIGN_RULES,
    stop_name_rules=STOP_NAME_RULES,
)
