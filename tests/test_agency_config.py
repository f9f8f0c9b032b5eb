"""Tests for agency configuration tables and text rules."""

import json
from pathlib import Path

import pytest

from direction_pipeline.agencies.cleaning import CLEAN_AND, CLEAN_AT, TextRule, clean_text
from direction_pipeline.agencies.config import (
    AgencyConfig,
    get_agency_config,
    load_agency_config,
    parse_agency_config,
)
from direction_pipeline.agencies.vernon import CONFIG as VERNON
from direction_pipeline.errors import UnexpectedRouteColorError
from direction_pipeline.gtfs.models import Route


def make_route(agency_id: str, short_name: str = "2") -> Route:
    return Route(
        route_id=f"{short_name}-X",
        agency_id=agency_id,
        route_short_name=short_name,
        route_long_name="",
        route_type=3,
    )


def test_clean_text_collapses_whitespace() -> None:
    """Test rules run in order and whitespace is normalized."""
    assert clean_text("  Coldstream   Creek at  McClounie ", [CLEAN_AT]) == (
        "Coldstream Creek / McClounie"
    )
    assert clean_text("25 Ave and 27 St", [CLEAN_AND]) == "25 Ave & 27 St"
    assert clean_text("Waterfront", [CLEAN_AT]) == "Waterfront"


def test_text_rule_is_case_insensitive() -> None:
    """Test patterns ignore case."""
    assert TextRule(r"^north").apply("NORTHBOUND") == "BOUND"


def test_vernon_trip_headsigns() -> None:
    """Test Vernon headsign rules."""
    assert VERNON.clean_trip_headsign("To College via 27 St") == "College"
    assert VERNON.clean_trip_headsign("9 Okanagan College - Downtown") == "Downtown"
    assert VERNON.clean_trip_headsign("Lakeshore-") == "Lakeshore"
    assert VERNON.clean_trip_headsign("Polson Park and Mall") == "Polson Park & Mall"


def test_vernon_stop_names() -> None:
    """Test Vernon stop name rules."""
    assert VERNON.clean_stop_name("Westbound Coldstream Creek at McClounie") == (
        "Coldstream Creek / McClounie"
    )
    assert VERNON.clean_stop_name("Downtown Exchange Bay A") == "Downtown Exchange Bay A"
    assert VERNON.clean_stop_name("Westbound 25 Ave and 27 St") == "25 Ave & 27 St"


def test_vernon_excludes_other_agencies() -> None:
    """Test only agency 17 routes are kept."""
    assert not VERNON.exclude_route(make_route("17"))
    assert VERNON.exclude_route(make_route("8"))


def test_vernon_route_colors() -> None:
    """Test feed colors win over the table, and a missing color is fatal."""
    assert VERNON.route_color("9") == "E170AA"
    assert VERNON.route_color("90") == "002C77"
    assert VERNON.route_color("2", "abcdef") == "ABCDEF"

    with pytest.raises(UnexpectedRouteColorError):
        VERNON.route_color("12")


def test_vernon_splitter_tables() -> None:
    """Test Vernon direction specs load and route 1 is merged."""
    splitter = VERNON.splitter()

    for route_id in ("1", "2", "3", "4", "5", "6", "7", "8", "60", "61", "90"):
        assert route_id in splitter
    assert "9" not in splitter
    assert "11" not in splitter

    route_1 = splitter.routes["1"]
    assert route_1.merge_directions
    assert not splitter.routes["7"].merge_directions


def test_vernon_tables_are_read_only() -> None:
    """Test configuration mappings cannot be mutated."""
    with pytest.raises(TypeError):
        VERNON.route_colors["1"] = "000000"  # type: ignore[index]

    with pytest.raises(TypeError):
        VERNON.splitter().routes["1"] = None  # type: ignore[index]


def test_get_agency_config() -> None:
    """Test embedded agency lookup."""
    assert get_agency_config("vernon") is VERNON

    with pytest.raises(ValueError):
        get_agency_config("kelowna")


def test_parse_agency_config() -> None:
    """Test building a config from its JSON shape."""
    config = parse_agency_config(
        {
            "name": "harbour",
            "agency_color": "123456",
            "include_agency_id": "5",
            "route_colors": {"10": "FF0000"},
            "routes": [
                {
                    "route_id": 10,
                    "merge_directions": True,
                    "directions": [
                        {
                            "label": "0",
                            "headsign": "Outbound",
                            "stops": ["A", {"stop_id": "B", "alternates": ["B2"]}, "C"],
                        },
                        {
                            "label": "1",
                            "headsign": "North End",
                            "stops": ["C", {"stop_id": "S", "skip": True}, "A"],
                        },
                    ],
                }
            ],
            "headsign_merges": [
                {
                    "route_id": "10",
                    "headsigns": ["Outbound", "North End"],
                    "merged_headsign": "North End",
                }
            ],
            "trip_headsign_rules": [[r"^\d+ ", ""]],
            "stop_name_rules": [r"\s*\(.*\)$"],
        }
    )

    assert isinstance(config, AgencyConfig)
    assert config.route_colors["10"] == "FF0000"
    route = config.route_specs[0]
    assert route.route_id == "10"
    assert route.merge_directions
    assert route.directions[0].reference[1].alternates == ("B2",)
    assert route.directions[1].reference[1].skip
    assert config.clean_trip_headsign("10 Outbound") == "Outbound"
    assert config.clean_stop_name("Main St (Bay 2)") == "Main St"
    assert "10" in config.splitter()


def test_parse_agency_config_missing_field() -> None:
    """Test a table without its required keys is rejected."""
    with pytest.raises(ValueError):
        parse_agency_config({"name": "harbour"})

    with pytest.raises(ValueError):
        parse_agency_config(
            {
                "name": "harbour",
                "agency_color": "123456",
                "routes": [{"route_id": "1", "directions": [{"label": "0"}]}],
            }
        )


def test_load_agency_config(tmp_path: Path) -> None:
    """Test loading an agency table from a JSON file."""
    path = tmp_path / "agency.json"
    path.write_text(
        json.dumps({"name": "harbour", "agency_color": "123456", "route_colors": {"1": "00FF00"}}),
        encoding="utf-8",
    )

    config = load_agency_config(str(path))

    assert config.name == "harbour"
    assert config.route_color("1") == "00FF00"
    assert config.include_agency_id is None
    assert not config.exclude_route(make_route("anything"))

    with pytest.raises(ValueError):
        load_agency_config(str(tmp_path / "missing.json"))
