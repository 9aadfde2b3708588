"""
Immutable reference data snapshot.

Built once at startup from the waypoint/airway table, the airport table
and the sector polygon collection, then passed explicitly into every
engine entry point. Nothing in the engine reaches for global lookups.

Duplicate waypoint identifiers are kept in table order; they are
disambiguated at use time by the fix resolver.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from sectorflow.airspace import REGIONAL_AIRPORTS
from sectorflow.engine.regions import SectorRegion, build_sector_regions
from sectorflow.engine.types import Coordinate, Fix


@dataclass(frozen=True)
class ReferenceSnapshot:
    """
    Read-only lookup tables for the prediction engine.

    fixes:    identifier -> every Fix with that identifier, in table order
    airways:  airway name -> its fixes sorted by order index
    airports: ICAO code -> (lat, lon)
    sectors:  monitored sector regions
    """
    fixes: Mapping[str, Tuple[Fix, ...]]
    airways: Mapping[str, Tuple[Fix, ...]]
    airports: Mapping[str, Coordinate]
    sectors: Tuple[SectorRegion, ...]

    @classmethod
    def from_tables(
        cls,
        routes: Mapping[str, List[dict]],
        airports: Optional[Mapping[str, dict]] = None,
        sector_geojson: Optional[dict] = None,
        default_max_alt: float = 60000,
    ) -> 'ReferenceSnapshot':
        """
        Build a snapshot from raw reference tables.

        Args:
            routes: airway -> [{order, waypoint, lat, lon}, ...]
            airports: ICAO -> {lat, lon, ...}
            sector_geojson: FeatureCollection with {sector, max_alt?} properties
        """
        fixes: Dict[str, List[Fix]] = {}
        airways: Dict[str, Tuple[Fix, ...]] = {}

        for airway, waypoints in routes.items():
            chain = []
            for i, wp in enumerate(waypoints):
                fix = Fix(
                    ident=str(wp['waypoint']).strip().upper(),
                    latitude=float(wp['lat']),
                    longitude=float(wp['lon']),
                    airway=airway,
                    order=int(wp.get('order', i + 1)),
                )
                chain.append(fix)
                fixes.setdefault(fix.ident, []).append(fix)
            airways[airway] = tuple(sorted(chain, key=lambda f: f.order))

        airport_coords: Dict[str, Coordinate] = {}
        for icao, entry in (airports or {}).items():
            lat, lon = entry.get('lat'), entry.get('lon')
            if isinstance(lat, (int, float)) and isinstance(lon, (int, float)):
                airport_coords[icao.upper()] = (float(lat), float(lon))

        features = (sector_geojson or {}).get('features') or []
        sectors = build_sector_regions(features, default_max_alt=default_max_alt)

        return cls(
            fixes=MappingProxyType({k: tuple(v) for k, v in fixes.items()}),
            airways=MappingProxyType(airways),
            airports=MappingProxyType(airport_coords),
            sectors=tuple(sectors),
        )

    @classmethod
    def empty(cls) -> 'ReferenceSnapshot':
        return cls.from_tables({})

    def candidates(self, ident: str) -> Tuple[Fix, ...]:
        return self.fixes.get(ident, ())

    def airways_for(self, ident: str, at: Optional[Coordinate] = None) -> List[str]:
        """
        Names of airways containing the identifier, in table order, without repeats.

        If at is given, only records published at that coordinate count, so a
        same-named fix elsewhere never contributes its airways.
        """
        seen = []
        for fix in self.candidates(ident):
            if at is not None and fix.coordinate != at:
                continue
            if fix.airway is not None and fix.airway not in seen:
                seen.append(fix.airway)
        return seen

    def airport_coordinate(self, icao: str) -> Optional[Coordinate]:
        """Regional table first, then the general airport database."""
        if not icao:
            return None
        icao = icao.strip().upper()
        if icao in REGIONAL_AIRPORTS:
            return REGIONAL_AIRPORTS[icao]
        return self.airports.get(icao)

    @property
    def stats(self) -> dict:
        return {
            'fix_idents': len(self.fixes),
            'airways': len(self.airways),
            'airports': len(self.airports),
            'sectors': len(self.sectors),
        }
