"""
Fix resolution - maps route tokens to coordinates.

Route tokens come in three shapes:
- Named fixes (3-6 letters), looked up in the waypoint table
- Coordinate literals, decoded directly: 46N040W or 205705N0655304W
- Anything else (airways, procedures, speed/level groups) - not a fix

A named fix may appear several times in the waypoint table (same name on
different airways or in different regions). The candidate closest to the
previous resolved point wins.
"""

import re
from typing import Optional

from sectorflow.engine.geo import planar_distance
from sectorflow.engine.types import Coordinate, Fix
from sectorflow.engine.reference import ReferenceSnapshot

NAMED_FIX_RE = re.compile(r'^[A-Z]{3,6}$')
COORD_SHORT_RE = re.compile(r'^(\d{2})([NS])(\d{3})([EW])$')
COORD_LONG_RE = re.compile(r'^(\d{2})(\d{2})(\d{2})([NS])(\d{3})(\d{2})(\d{2})([EW])$')
PROCEDURE_RE = re.compile(r'^[A-Z]+\d+[A-Z]$')


def clean_token(token: str) -> str:
    """Strip any /speed-altitude suffix and upper-case."""
    return token.split('/')[0].strip().upper()


def parse_coordinate_literal(token: str) -> Optional[Coordinate]:
    """
    Decode a coordinate-literal ident.

    Examples:
        46N040W          -> (46.0, -40.0)
        205705N0655304W  -> (20.9514, -65.8844)
    """
    token = clean_token(token)

    match = COORD_SHORT_RE.match(token)
    if match:
        lat = float(match.group(1))
        lon = float(match.group(3))
        if match.group(2) == 'S':
            lat = -lat
        if match.group(4) == 'W':
            lon = -lon
        return (lat, lon)

    match = COORD_LONG_RE.match(token)
    if match:
        lat_deg, lat_min, lat_sec, lat_hem = match.group(1, 2, 3, 4)
        lon_deg, lon_min, lon_sec, lon_hem = match.group(5, 6, 7, 8)
        lat = int(lat_deg) + int(lat_min) / 60 + int(lat_sec) / 3600
        lon = int(lon_deg) + int(lon_min) / 60 + int(lon_sec) / 3600
        if lat_hem == 'S':
            lat = -lat
        if lon_hem == 'W':
            lon = -lon
        return (lat, lon)

    return None


def is_coordinate_literal(token: str) -> bool:
    token = clean_token(token)
    return bool(COORD_SHORT_RE.match(token) or COORD_LONG_RE.match(token))


def is_valid_fix(token: str) -> bool:
    """Named fix or coordinate literal. Airways and procedures fail this test."""
    token = clean_token(token)
    return bool(NAMED_FIX_RE.match(token)) or is_coordinate_literal(token)


def is_procedure(token: str) -> bool:
    """SID/STAR ident such as CLT2A."""
    return bool(PROCEDURE_RE.match(clean_token(token)))


class FixResolver:
    """
    Resolves route tokens against a reference snapshot.

    Pure: holds no state beyond the snapshot it was built with.
    """

    def __init__(self, reference: ReferenceSnapshot):
        self.reference = reference

    def lookup(self, token: str, previous: Optional[Coordinate] = None) -> Optional[Fix]:
        """
        Resolve a token to a Fix record.

        Coordinate literals produce a Fix with no airway context.
        Returns None if the token is unknown.
        """
        ident = clean_token(token)

        coord = parse_coordinate_literal(ident)
        if coord is not None:
            return Fix(ident=ident, latitude=coord[0], longitude=coord[1])

        matches = self.reference.candidates(ident)
        if not matches:
            return None
        if len(matches) == 1 or previous is None:
            return matches[0]

        # min() keeps the first of equal candidates, so ties go to table order
        return min(
            matches,
            key=lambda fix: planar_distance(previous[0], previous[1], fix.latitude, fix.longitude),
        )

    def resolve(self, token: str, previous: Optional[Coordinate] = None) -> Optional[Coordinate]:
        """Resolve a token to (lat, lon), or None if not found."""
        fix = self.lookup(token, previous)
        return fix.coordinate if fix else None
