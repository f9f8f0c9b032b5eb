"""Direction pipeline - Split an agency's GTFS trips into rider-facing directions."""

from direction_pipeline.api import convert, validate
from direction_pipeline.version import SCHEMA_VERSION, VERSION

__version__ = VERSION
__all__ = ["SCHEMA_VERSION", "VERSION", "convert", "validate"]
