"""
Route projection - the part of a filed route still ahead of the aircraft.

Aircraft are usually well past the start of their filed route. The
projector walks the route tokens in order and cuts over to "remaining"
the first time a resolved fix lies within the heading tolerance of the
aircraft's current heading. From that fix on, everything is kept.

Two optional extras are used when drawing routes:
- Airway gap filling: intermediate fixes between two consecutive kept
  fixes on the same airway are spliced in.
- Destination augmentation: the arrival airport is appended as the
  final leg so distances and ETAs cover the approach.
"""

import logging
from typing import List, Optional

from sectorflow.engine.fixes import FixResolver, clean_token, is_procedure, is_valid_fix
from sectorflow.engine.geo import heading_difference, initial_bearing
from sectorflow.engine.types import AircraftState, Fix, ResolvedFix
from sectorflow.engine.reference import ReferenceSnapshot

logger = logging.getLogger(__name__)


def tokenize_route(route_text: str) -> List[str]:
    """Split route text into normalized tokens that look like fixes."""
    if not route_text:
        return []

    tokens = []
    for raw in route_text.split():
        token = clean_token(raw)
        if is_valid_fix(token):
            tokens.append(token)
        elif is_procedure(token):
            # SID/STAR idents carry no position of their own
            logger.debug(f'Skipping procedure token {token}')
    return tokens


class RouteProjector:
    """
    Turns an aircraft's filed route into its remaining sequence of fixes.

    Args:
        reference: Immutable reference snapshot
        heading_tolerance: Max bearing/heading difference for the heading match
    """

    def __init__(self, reference: ReferenceSnapshot, heading_tolerance: float = 30.0):
        self.reference = reference
        self.resolver = FixResolver(reference)
        self.heading_tolerance = heading_tolerance

    def project_remaining_route(
        self,
        aircraft: AircraftState,
        interpolate_airways: bool = False,
        include_destination: bool = False,
    ) -> List[ResolvedFix]:
        """
        Compute the ordered remaining route for an aircraft.

        Returns an empty list if there is no route text or no resolved fix
        ever matches the aircraft heading.
        """
        tokens = tokenize_route(aircraft.route_text)
        if not tokens:
            return []

        remaining: List[ResolvedFix] = []
        anchor = aircraft.position
        last_kept: Optional[Fix] = None
        matched = False

        for token in tokens:
            fix = self.resolver.lookup(token, anchor)
            if fix is None:
                continue

            if not matched:
                bearing = initial_bearing(anchor[0], anchor[1], fix.latitude, fix.longitude)
                if heading_difference(aircraft.heading, bearing) <= self.heading_tolerance:
                    matched = True

            if matched:
                if interpolate_airways and last_kept is not None:
                    remaining.extend(self._airway_gap(last_kept, fix))
                remaining.append(ResolvedFix(
                    ident=fix.ident,
                    latitude=fix.latitude,
                    longitude=fix.longitude,
                ))
                last_kept = fix

            anchor = fix.coordinate

        if include_destination and remaining:
            destination = self._destination_fix(aircraft)
            if destination is not None:
                remaining.append(destination)

        return remaining

    def _airway_gap(self, start: Fix, end: Fix) -> List[ResolvedFix]:
        """
        Published fixes strictly between two fixes sharing an airway.

        Only airways published at the resolved coordinates of both fixes are
        considered, first shared one in table order. Returns an empty list
        when the fixes share no airway or are already adjacent.
        """
        end_airways = set(self.reference.airways_for(end.ident, end.coordinate))
        shared = next(
            (
                name for name in self.reference.airways_for(start.ident, start.coordinate)
                if name in end_airways
            ),
            None,
        )
        if shared is None:
            return []

        chain = self.reference.airways[shared]
        points = [(f.ident, f.coordinate) for f in chain]
        i = points.index((start.ident, start.coordinate))
        j = points.index((end.ident, end.coordinate))
        if abs(j - i) <= 1:
            return []

        between = chain[i + 1:j] if i < j else list(reversed(chain[j + 1:i]))
        return [
            ResolvedFix(ident=f.ident, latitude=f.latitude, longitude=f.longitude, source='airway')
            for f in between
        ]

    def _destination_fix(self, aircraft: AircraftState) -> Optional[ResolvedFix]:
        coord = self.reference.airport_coordinate(aircraft.arrival)
        if coord is None:
            return None
        return ResolvedFix(
            ident=aircraft.arrival,
            latitude=coord[0],
            longitude=coord[1],
            source='destination',
        )
