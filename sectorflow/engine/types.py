"""
Core data types shared across the prediction engine.

Telemetry records are immutable per snapshot: every poll produces fresh
AircraftState objects and everything derived from them is recomputed,
never diffed against a previous pass.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Tuple

Coordinate = Tuple[float, float]  # (lat, lon)


@dataclass(frozen=True)
class FlightPlan:
    """Filed flight plan fields used for prediction."""
    departure: str = ''
    arrival: str = ''
    route: str = ''


@dataclass(frozen=True)
class AircraftState:
    """
    Position report for a single aircraft.

    Units follow the feed: altitude in feet, groundspeed in knots,
    heading in degrees true. Groundspeed may be None if unreported.
    """
    callsign: str
    latitude: float
    longitude: float
    altitude: float
    heading: float
    groundspeed: Optional[float]
    flight_plan: Optional[FlightPlan] = None
    cid: Optional[int] = None

    @property
    def position(self) -> Coordinate:
        return (self.latitude, self.longitude)

    @property
    def route_text(self) -> str:
        if self.flight_plan is None:
            return ''
        return self.flight_plan.route or ''

    @property
    def arrival(self) -> str:
        if self.flight_plan is None:
            return ''
        return (self.flight_plan.arrival or '').strip().upper()


@dataclass(frozen=True)
class Fix:
    """A published waypoint on a named airway."""
    ident: str
    latitude: float
    longitude: float
    airway: Optional[str] = None
    order: Optional[int] = None

    @property
    def coordinate(self) -> Coordinate:
        return (self.latitude, self.longitude)


@dataclass(frozen=True)
class ResolvedFix:
    """
    A fix on an aircraft's remaining route.

    source is 'route' for filed tokens, 'airway' for fixes spliced in
    from an airway, and 'destination' for the arrival airport leg.
    distance_nm and eta are filled in by the position estimator.
    """
    ident: str
    latitude: float
    longitude: float
    source: str = 'route'
    distance_nm: Optional[float] = None
    eta: Optional[datetime] = None

    @property
    def coordinate(self) -> Coordinate:
        return (self.latitude, self.longitude)

    def with_eta(self, distance_nm: float, eta: datetime) -> 'ResolvedFix':
        return replace(self, distance_nm=distance_nm, eta=eta)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        return {
            'ident': self.ident,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'source': self.source,
            'distance_nm': round(self.distance_nm, 1) if self.distance_nm is not None else None,
            'eta': self.eta.isoformat() if self.eta else None,
        }
