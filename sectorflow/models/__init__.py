"""
Database models for SectorFlow.

Only two kinds of data are persisted:
1. Static reference tables imported once (waypoints, airports)
2. Operator capacity limits, shared across clients
"""

from sectorflow.models.base import Base, engine, SessionLocal, init_db, get_session
from sectorflow.models.waypoint import Waypoint
from sectorflow.models.airport import Airport
from sectorflow.models.region_limit import RegionLimit

__all__ = [
    'Base',
    'engine',
    'SessionLocal',
    'init_db',
    'get_session',
    'Waypoint',
    'Airport',
    'RegionLimit',
]
