"""
In-memory cache for the latest prediction pass.

Each pipeline pass builds a complete PredictionSnapshot (sector matrix,
gate matrix, remaining routes) from one telemetry snapshot, then swaps
it in as a single reference. Readers never see a half-built pass, and a
failed pass leaves the previous snapshot in place.

Nothing here is persisted; a restart starts empty until the first pass.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from sectorflow.engine.aggregator import CapacityMatrix
from sectorflow.engine.timegrid import TimeSlot
from sectorflow.engine.types import ResolvedFix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AircraftRoute:
    """Remaining route for one aircraft, with per-fix leg distance and ETA."""
    callsign: str
    departure: str
    arrival: str
    latitude: float
    longitude: float
    altitude: float
    heading: float
    groundspeed: Optional[float]
    fixes: List[ResolvedFix]
    total_distance_nm: float

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict for API responses."""
        return {
            'callsign': self.callsign,
            'departure': self.departure,
            'arrival': self.arrival,
            'position': {
                'latitude': self.latitude,
                'longitude': self.longitude,
            },
            'altitude_ft': int(self.altitude),
            'heading': self.heading,
            'groundspeed_kts': self.groundspeed,
            'total_distance_nm': round(self.total_distance_nm, 1),
            'fixes': [f.to_dict() for f in self.fixes],
        }


@dataclass(frozen=True)
class PredictionSnapshot:
    """Everything one pipeline pass produces."""
    generated_at: datetime
    feed_time: datetime
    horizon_hours: int
    slots: List[TimeSlot]
    sector_matrix: CapacityMatrix
    gate_matrix: CapacityMatrix
    routes: Dict[str, AircraftRoute]
    aircraft_count: int
    duration_ms: float = 0.0
    cached_at: float = field(default_factory=time.time)

    def to_summary(self) -> dict:
        return {
            'generated_at': self.generated_at.isoformat(),
            'feed_time': self.feed_time.isoformat(),
            'horizon_hours': self.horizon_hours,
            'slots': len(self.slots),
            'aircraft': self.aircraft_count,
            'routes': len(self.routes),
            'duration_ms': round(self.duration_ms, 1),
        }


class PredictionCache:
    """
    Thread-safe holder for the latest PredictionSnapshot.

    The pipeline thread writes; request handlers read. Replacement is a
    single reference swap under the lock.
    """

    def __init__(self):
        self._snapshot: Optional[PredictionSnapshot] = None
        self._lock = threading.RLock()
        self._last_refresh: float = 0

        # Statistics
        self._replacements = 0
        self._hits = 0
        self._misses = 0

    def replace(self, snapshot: PredictionSnapshot) -> None:
        """Atomically install a new snapshot."""
        with self._lock:
            self._snapshot = snapshot
            self._last_refresh = time.time()
            self._replacements += 1

        logger.debug(f'Prediction cache replaced ({snapshot.aircraft_count} aircraft)')

    def get(self) -> Optional[PredictionSnapshot]:
        """Latest snapshot, or None before the first successful pass."""
        with self._lock:
            snapshot = self._snapshot
            if snapshot is None:
                self._misses += 1
            else:
                self._hits += 1
            return snapshot

    def get_route(self, callsign: str) -> Optional[AircraftRoute]:
        snapshot = self.get()
        if snapshot is None:
            return None
        return snapshot.routes.get(callsign.strip().upper())

    def clear(self) -> None:
        """Drop the current snapshot."""
        with self._lock:
            self._snapshot = None

    @property
    def stats(self) -> dict:
        """Get cache statistics."""
        with self._lock:
            return {
                'has_snapshot': self._snapshot is not None,
                'replacements': self._replacements,
                'hits': self._hits,
                'misses': self._misses,
                'last_refresh': self._last_refresh,
                'age_seconds': round(time.time() - self._last_refresh, 1) if self._last_refresh else None,
            }


# Singleton instance
prediction_cache = PredictionCache()
