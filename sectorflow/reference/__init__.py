"""Reference data import and snapshot loading."""

from sectorflow.reference.loader import (
    import_reference_data,
    load_airports_json,
    load_reference_snapshot,
    load_routes_json,
)

__all__ = [
    'import_reference_data',
    'load_airports_json',
    'load_reference_snapshot',
    'load_routes_json',
]
