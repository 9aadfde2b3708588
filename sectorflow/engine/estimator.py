"""
Position estimation - where an aircraft will be, and when.

Two strategies:
- Route-following: walk the remaining route leg by leg at the current
  groundspeed, recording an ETA per fix. For an arbitrary instant the
  route is indexed proportionally to elapsed fraction of the horizon.
- Dead-reckoning: constant heading and groundspeed along a great circle.
  Turns are ignored.

Both assume constant groundspeed. A groundspeed of zero or less (or
unreported) yields no projected positions.
"""

import math
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional, Sequence

from sectorflow.engine.geo import destination_point, haversine_nm
from sectorflow.engine.types import AircraftState, Coordinate, ResolvedFix


class ProjectionStrategy(str, Enum):
    """How sector positions are projected."""
    ROUTE = 'route'                    # Route-following, dead-reckoning fallback
    DEAD_RECKONING = 'dead_reckoning'  # Heading/speed only


def _is_moving(groundspeed: Optional[float]) -> bool:
    return groundspeed is not None and groundspeed > 0


def compute_etas(
    start: Coordinate,
    fixes: Sequence[ResolvedFix],
    groundspeed: Optional[float],
    now: Optional[datetime] = None,
) -> List[ResolvedFix]:
    """
    Attach leg distance and ETA to each fix along the route.

    The clock starts at now and advances by leg distance / groundspeed.
    Returns an empty list if the route is empty or the aircraft is not moving.
    """
    if not fixes or not _is_moving(groundspeed):
        return []

    now = now or datetime.now(timezone.utc)
    clock = now
    prev = start
    result = []

    for fix in fixes:
        distance = haversine_nm(prev[0], prev[1], fix.latitude, fix.longitude)
        clock = clock + timedelta(minutes=distance / groundspeed * 60)
        result.append(fix.with_eta(distance, clock))
        prev = fix.coordinate

    return result


def route_length_nm(start: Coordinate, fixes: Sequence[ResolvedFix]) -> float:
    """Total along-route distance from start through every fix."""
    total = 0.0
    prev = start
    for fix in fixes:
        total += haversine_nm(prev[0], prev[1], fix.latitude, fix.longitude)
        prev = fix.coordinate
    return total


def position_at(
    fixes: Sequence[ResolvedFix],
    minutes_ahead: float,
    horizon_minutes: float,
) -> Optional[Coordinate]:
    """
    Approximate route position at minutes_ahead.

    Indexes the fix list by elapsed fraction of the horizon rather than
    interpolating by time: index = floor(minutes_ahead / horizon * n),
    clamped to the last fix. Uneven fix spacing makes this coarse.
    """
    if not fixes or minutes_ahead < 0 or horizon_minutes <= 0:
        return None

    index = math.floor(minutes_ahead / horizon_minutes * len(fixes))
    index = min(index, len(fixes) - 1)
    return fixes[index].coordinate


def dead_reckon(
    latitude: float,
    longitude: float,
    heading: float,
    groundspeed: Optional[float],
    minutes: float,
) -> Optional[Coordinate]:
    """Project a position along heading at constant groundspeed for the given minutes."""
    if not _is_moving(groundspeed) or minutes < 0:
        return None
    distance = groundspeed * minutes / 60
    return destination_point(latitude, longitude, heading, distance)


def project_aircraft(
    aircraft: AircraftState,
    remaining: Sequence[ResolvedFix],
    minutes_ahead: float,
    horizon_minutes: float,
    strategy: ProjectionStrategy = ProjectionStrategy.ROUTE,
) -> Optional[Coordinate]:
    """
    Projected position for one aircraft at one offset.

    Route-following is used when the strategy allows it and a remaining
    route exists; otherwise dead-reckoning.
    """
    if not _is_moving(aircraft.groundspeed):
        return None

    if strategy == ProjectionStrategy.ROUTE and remaining:
        return position_at(remaining, minutes_ahead, horizon_minutes)

    return dead_reckon(
        aircraft.latitude,
        aircraft.longitude,
        aircraft.heading,
        aircraft.groundspeed,
        minutes_ahead,
    )
