"""
Region abstraction for occupancy counting.

A region is either a sector (a polygon with an altitude ceiling, in the
center or approach group) or a gate (a named route token). Both expose
matches(aircraft, point) so the aggregator can count them uniformly.

Geometry is handled with Shapely. Coordinates passed around the engine
are (lat, lon); Shapely and GeoJSON use (lon, lat), so the swap happens
only inside this module.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Sequence

import shapely
from shapely.geometry import Point, Polygon, shape
from shapely.ops import unary_union

from sectorflow.airspace import (
    ALTITUDE_EXEMPT_ARRIVALS,
    APPROACH_SECTORS,
    CENTER_SECTORS,
    PREDICTION_BOUNDARY,
)
from sectorflow.engine.types import AircraftState, Coordinate

logger = logging.getLogger(__name__)

CENTER = 'center'
APPROACH = 'approach'


def _to_point(coord: Coordinate) -> Point:
    lat, lon = coord
    return Point(lon, lat)


@dataclass(frozen=True, eq=False)
class SectorRegion:
    """
    A named sector polygon.

    max_alt is the sector ceiling in feet. Aircraft filed to an exempt
    arrival airport are counted regardless of the ceiling.
    """
    name: str
    group: str
    geometry: shapely.Geometry
    max_alt: float = 60000
    exempt_arrivals: FrozenSet[str] = field(default_factory=lambda: frozenset(ALTITUDE_EXEMPT_ARRIVALS))

    def __post_init__(self):
        shapely.prepare(self.geometry)

    @property
    def is_center(self) -> bool:
        return self.group == CENTER

    @property
    def is_approach(self) -> bool:
        return self.group == APPROACH

    def covers(self, coord: Coordinate) -> bool:
        """Polygon containment only, boundary inclusive."""
        return self.geometry.covers(_to_point(coord))

    def altitude_allowed(self, aircraft: AircraftState) -> bool:
        if aircraft.arrival in self.exempt_arrivals:
            return True
        return aircraft.altitude <= self.max_alt

    def matches(self, aircraft: AircraftState, point: Optional[Coordinate]) -> bool:
        if point is None:
            return False
        return self.altitude_allowed(aircraft) and self.covers(point)


@dataclass(frozen=True)
class GateRegion:
    """An arrival gate identified by a token in the filed route."""
    name: str
    match_token: str

    def matches(self, aircraft: AircraftState, point: Optional[Coordinate] = None) -> bool:
        return self.match_token.upper() in aircraft.route_text.upper()


def sector_group(name: str) -> Optional[str]:
    """Return the group a sector belongs to, or None if it is not monitored."""
    if name in CENTER_SECTORS:
        return CENTER
    if name in APPROACH_SECTORS:
        return APPROACH
    return None


def build_sector_regions(
    features: Iterable[dict],
    default_max_alt: float = 60000,
) -> List[SectorRegion]:
    """
    Build sector regions from GeoJSON features.

    Features whose 'sector' property is not a monitored sector are ignored.
    Several features with the same sector name are unioned into a single
    geometry; the highest declared max_alt wins.
    """
    grouped: 'OrderedDict[str, dict]' = OrderedDict()
    skipped = 0

    for feature in features:
        props = feature.get('properties') or {}
        name = props.get('sector')
        group = sector_group(name)
        geometry = feature.get('geometry')
        if group is None or not geometry:
            skipped += 1
            continue

        entry = grouped.setdefault(name, {'group': group, 'shapes': [], 'max_alt': None})
        entry['shapes'].append(shape(geometry))

        max_alt = props.get('max_alt')
        if max_alt is not None:
            max_alt = float(max_alt)
            if entry['max_alt'] is None or max_alt > entry['max_alt']:
                entry['max_alt'] = max_alt

    if skipped:
        logger.debug(f'Ignored {skipped} sector features (unmonitored or without geometry)')

    regions = []
    for name, entry in grouped.items():
        geometry = entry['shapes'][0] if len(entry['shapes']) == 1 else unary_union(entry['shapes'])
        regions.append(SectorRegion(
            name=name,
            group=entry['group'],
            geometry=geometry,
            max_alt=entry['max_alt'] if entry['max_alt'] is not None else default_max_alt,
        ))

    return regions


def build_gate_regions(gates: Sequence[str]) -> List[GateRegion]:
    return [GateRegion(name=g, match_token=g) for g in gates]


class PredictionBoundary:
    """Coarse containment pre-check bounding the prediction working set."""

    def __init__(self, ring: Sequence[tuple] = PREDICTION_BOUNDARY):
        self.polygon = Polygon(ring)
        shapely.prepare(self.polygon)

    def contains(self, coord: Coordinate) -> bool:
        return self.polygon.covers(_to_point(coord))
