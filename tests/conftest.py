"""
Shared fixtures for SectorFlow tests.

Configuration is read at import time, so the database and data
directory are pointed at a temporary location before anything from
sectorflow is imported.
"""

import os
import tempfile
from datetime import datetime, timezone

_TMP_DIR = tempfile.mkdtemp(prefix='sectorflow-tests-')
os.environ['DATABASE_URL'] = f'sqlite:///{os.path.join(_TMP_DIR, "test.db")}'
os.environ['SECTORFLOW_DATA_DIR'] = _TMP_DIR

import pytest

from sectorflow.engine.reference import ReferenceSnapshot
from sectorflow.engine.types import AircraftState, FlightPlan
from sectorflow.models import init_db

init_db()


def square(lon_min, lat_min, lon_max, lat_max):
    """GeoJSON polygon geometry for a lon/lat box."""
    return {
        'type': 'Polygon',
        'coordinates': [[
            [lon_min, lat_min],
            [lon_max, lat_min],
            [lon_max, lat_max],
            [lon_min, lat_max],
            [lon_min, lat_min],
        ]],
    }


ROUTES = {
    'R500': [
        {'order': 1, 'waypoint': 'FIXA', 'lat': 18.0, 'lon': -64.0},
        {'order': 2, 'waypoint': 'MIDDL', 'lat': 18.0, 'lon': -63.5},
        {'order': 3, 'waypoint': 'FIXB', 'lat': 18.0, 'lon': -63.0},
        {'order': 4, 'waypoint': 'FIXC', 'lat': 18.0, 'lon': -62.0},
    ],
    'B520': [
        {'order': 1, 'waypoint': 'BEHND', 'lat': 18.0, 'lon': -66.0},
        {'order': 2, 'waypoint': 'DUPE', 'lat': 18.0, 'lon': -64.5},
    ],
    'G633': [
        {'order': 1, 'waypoint': 'DUPE', 'lat': 25.0, 'lon': -40.0},
        {'order': 2, 'waypoint': 'FARFX', 'lat': 26.0, 'lon': -41.0},
    ],
}

AIRPORTS = {
    'KJFK': {'icao': 'KJFK', 'name': 'John F Kennedy International', 'lat': 40.6398, 'lon': -73.7789},
    'TNCA': {'icao': 'TNCA', 'name': 'Queen Beatrix International', 'lat': 12.5014, 'lon': -70.0152},
}

SECTORS = {
    'type': 'FeatureCollection',
    'features': [
        # Approach sector around TJSJ
        {'type': 'Feature', 'properties': {'sector': 'Sector 1'},
         'geometry': square(-66.5, 18.0, -65.5, 19.0)},
        # Center sector stacked over it
        {'type': 'Feature', 'properties': {'sector': 'Sector 4'},
         'geometry': square(-68.0, 16.0, -62.0, 22.0)},
        # Center sector to the east with a low ceiling
        {'type': 'Feature', 'properties': {'sector': 'Sector 2', 'max_alt': 24000},
         'geometry': square(-62.0, 16.0, -58.0, 22.0)},
        # Not monitored
        {'type': 'Feature', 'properties': {'sector': 'Oceanic'},
         'geometry': square(-58.0, 16.0, -50.0, 22.0)},
    ],
}


@pytest.fixture
def reference():
    return ReferenceSnapshot.from_tables(ROUTES, airports=AIRPORTS, sector_geojson=SECTORS)


@pytest.fixture
def now():
    return datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_aircraft(
    callsign='TEST1',
    lat=18.0,
    lon=-65.0,
    altitude=30000,
    heading=90,
    groundspeed=400,
    route='FIXA FIXB',
    arrival='TJSJ',
    departure='KJFK',
    with_plan=True,
):
    plan = FlightPlan(departure=departure, arrival=arrival, route=route) if with_plan else None
    return AircraftState(
        callsign=callsign,
        latitude=lat,
        longitude=lon,
        altitude=altitude,
        heading=heading,
        groundspeed=groundspeed,
        flight_plan=plan,
    )


@pytest.fixture
def aircraft_factory():
    return make_aircraft
