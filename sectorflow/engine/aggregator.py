"""
Occupancy aggregation - builds capacity matrices from projected positions.

Sector mode:
1. Pre-filter: drop aircraft below 100 ft, without a filed route, or
   outside the prediction boundary
2. Present-now: count current positions inside each sector polygon
3. Per slot: project the aircraft to the slot start and count every
   sector whose polygon and altitude gate accept the point, except that
   a low center-sector hit yields to an approach sector at the same point

Gate mode:
Arrivals to the monitored airport are bucketed by a straight-line ETA
(distance / groundspeed) and assigned to the first gate token found in
their route text.

Matrices are rebuilt from scratch on every pass; rows exist for every
declared region even when nothing is predicted there.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np

from sectorflow.airspace import ALL_SECTORS, FALLBACK_LIMIT, GATE_ARRIVAL_AIRPORT, UNKNOWN_GATE
from sectorflow.config import PredictionConfig, config
from sectorflow.engine.estimator import ProjectionStrategy, project_aircraft
from sectorflow.engine.geo import haversine_nm
from sectorflow.engine.regions import GateRegion, PredictionBoundary, SectorRegion
from sectorflow.engine.routes import RouteProjector
from sectorflow.engine.timegrid import SLOT_MINUTES, TimeSlot, bucket_index
from sectorflow.engine.types import AircraftState
from sectorflow.engine.reference import ReferenceSnapshot

logger = logging.getLogger(__name__)


class ThresholdStatus(str, Enum):
    """Capacity band for a single matrix cell."""
    OK = 'ok'
    NEAR_LIMIT = 'near_limit'
    EXCEEDED = 'exceeded'


def classify(count: int, limit: float, near_ratio: float = 0.75) -> ThresholdStatus:
    """
    Classify a count against a limit.

    count > limit             -> EXCEEDED
    count >= near_ratio*limit -> NEAR_LIMIT
    otherwise                 -> OK

    An empty cell is always OK, even against a zero limit.
    """
    if count > limit:
        return ThresholdStatus.EXCEEDED
    if count > 0 and count >= near_ratio * limit:
        return ThresholdStatus.NEAR_LIMIT
    return ThresholdStatus.OK


@dataclass
class CapacityMatrix:
    """
    Region x slot grid of aircraft counts.

    present holds the current (time-independent) count per region in
    sector mode and is None in gate mode.
    """
    regions: List[str]
    slots: List[TimeSlot]
    counts: np.ndarray
    present: Optional[Dict[str, int]] = None
    _index: Dict[str, int] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        self._index = {name: i for i, name in enumerate(self.regions)}

    @classmethod
    def zeros(
        cls,
        regions: Iterable[str],
        slots: Sequence[TimeSlot],
        with_present: bool = False,
    ) -> 'CapacityMatrix':
        regions = list(regions)
        return cls(
            regions=regions,
            slots=list(slots),
            counts=np.zeros((len(regions), len(slots)), dtype=np.int64),
            present={name: 0 for name in regions} if with_present else None,
        )

    def add_region(self, name: str) -> None:
        """Append a zero row for a region not declared up front."""
        if name in self._index:
            return
        self._index[name] = len(self.regions)
        self.regions.append(name)
        self.counts = np.vstack([self.counts, np.zeros((1, len(self.slots)), dtype=np.int64)])
        if self.present is not None:
            self.present[name] = 0

    def increment(self, region: str, slot_index: int) -> None:
        self.counts[self._index[region], slot_index] += 1

    def increment_present(self, region: str) -> None:
        self.present[region] += 1

    def row(self, region: str) -> List[int]:
        return [int(v) for v in self.counts[self._index[region]]]

    @property
    def total(self) -> int:
        return int(self.counts.sum())

    def to_dict(
        self,
        limits: Mapping[str, int],
        near_ratio: float = 0.75,
        fallback_limit: int = FALLBACK_LIMIT,
    ) -> dict:
        """Convert to JSON-serializable dict with a status band per cell."""
        rows = []
        for region in self.regions:
            limit = limits.get(region, fallback_limit)
            counts = self.row(region)
            row = {
                'region': region,
                'limit': limit,
                'counts': counts,
                'status': [classify(c, limit, near_ratio).value for c in counts],
            }
            if self.present is not None:
                row['present'] = self.present.get(region, 0)
            rows.append(row)

        return {
            'slots': [s.start.isoformat() for s in self.slots],
            'labels': [s.label for s in self.slots],
            'rows': rows,
        }


class OccupancyAggregator:
    """
    Builds sector and gate capacity matrices for one telemetry snapshot.

    Args:
        reference: Immutable reference snapshot (fixes, airports, sectors)
        settings: Prediction settings (defaults to application config)
        boundary: Working-set boundary (defaults to the regional polygon)
    """

    def __init__(
        self,
        reference: ReferenceSnapshot,
        settings: Optional[PredictionConfig] = None,
        boundary: Optional[PredictionBoundary] = None,
    ):
        self.reference = reference
        self.settings = settings or config.prediction
        self.boundary = boundary or PredictionBoundary()
        self.projector = RouteProjector(reference, self.settings.heading_tolerance_deg)

    def is_eligible(self, aircraft: AircraftState) -> bool:
        """Sector-mode pre-filter."""
        if aircraft.altitude < self.settings.min_altitude_ft:
            return False
        if aircraft.flight_plan is None or not aircraft.route_text.strip():
            return False
        return self.boundary.contains(aircraft.position)

    def aggregate_sectors(
        self,
        aircraft_list: Iterable[AircraftState],
        slots: Sequence[TimeSlot],
        now: Optional[datetime] = None,
        strategy: Optional[ProjectionStrategy] = None,
        sectors: Optional[Sequence[SectorRegion]] = None,
        declared: Sequence[str] = ALL_SECTORS,
    ) -> CapacityMatrix:
        """Predicted sector occupancy per slot, plus present-now counts."""
        now = now or datetime.now(timezone.utc)
        strategy = ProjectionStrategy(strategy or self.settings.sector_projection)
        sectors = list(self.reference.sectors if sectors is None else sectors)
        approach = [s for s in sectors if s.is_approach]
        horizon_minutes = len(slots) * SLOT_MINUTES

        matrix = CapacityMatrix.zeros(declared, slots, with_present=True)
        for sector in sectors:
            matrix.add_region(sector.name)

        retained = 0
        for aircraft in aircraft_list:
            if not self.is_eligible(aircraft):
                continue
            retained += 1

            for sector in sectors:
                if sector.covers(aircraft.position):
                    matrix.increment_present(sector.name)

            remaining = []
            if strategy == ProjectionStrategy.ROUTE:
                remaining = self.projector.project_remaining_route(aircraft)

            for idx, slot in enumerate(slots):
                minutes_ahead = (slot.start - now).total_seconds() / 60
                point = project_aircraft(aircraft, remaining, minutes_ahead, horizon_minutes, strategy)
                if point is None:
                    continue

                for sector in sectors:
                    if not sector.matches(aircraft, point):
                        continue
                    if (
                        sector.is_center
                        and aircraft.altitude <= self.settings.low_altitude_ft
                        and any(a.covers(point) for a in approach)
                    ):
                        continue
                    matrix.increment(sector.name, idx)

        logger.debug(f'Sector aggregation: {retained} aircraft retained, {matrix.total} slot counts')
        return matrix

    def aggregate_gates(
        self,
        aircraft_list: Iterable[AircraftState],
        slots: Sequence[TimeSlot],
        gates: Sequence[GateRegion],
        arrival_airport: str = GATE_ARRIVAL_AIRPORT,
        now: Optional[datetime] = None,
    ) -> CapacityMatrix:
        """Predicted gate crossings per slot for arrivals to arrival_airport."""
        now = now or datetime.now(timezone.utc)
        matrix = CapacityMatrix.zeros([g.name for g in gates], slots)

        destination = self.reference.airport_coordinate(arrival_airport)
        if destination is None:
            logger.warning(f'No coordinate for gate airport {arrival_airport}, gate matrix empty')
            return matrix

        for aircraft in aircraft_list:
            if aircraft.arrival != arrival_airport:
                continue
            if aircraft.altitude < self.settings.min_altitude_ft:
                continue

            distance = haversine_nm(aircraft.latitude, aircraft.longitude, destination[0], destination[1])
            speed = aircraft.groundspeed
            if speed is None or speed <= 0:
                speed = self.settings.default_gate_speed_kts
            eta = now + timedelta(hours=distance / speed)

            idx = bucket_index(eta, slots)
            if idx is None:
                continue

            gate = next((g.name for g in gates if g.matches(aircraft)), UNKNOWN_GATE)
            matrix.add_region(gate)
            matrix.increment(gate, idx)

        return matrix
