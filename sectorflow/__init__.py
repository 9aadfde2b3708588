"""
SectorFlow Backend Package.

Airspace traffic prediction service built with Flask, SQLAlchemy, NumPy
and Shapely. Predicts how many aircraft will occupy each sector and
arrival gate in every 15-minute slot of a rolling horizon.

Modules:
    engine/      Prediction engine (fix resolution, route projection,
                 position estimation, time grid, occupancy aggregation)
    reference/   Static waypoint, airport and sector reference data
    ingestion/   VATSIM telemetry client and background prediction pipeline
    models/      SQLAlchemy ORM models (Waypoint, Airport, RegionLimit)
    api/         REST endpoints for matrices, routes, limits and status
    cache.py     Thread-safe holder for the latest prediction snapshot
    limits.py    Shared capacity limits with realtime broadcast
    airspace.py  Sector groups, gates and regional airport tables
    config.py    Centralized configuration from environment variables
"""

__version__ = '1.0.0'
