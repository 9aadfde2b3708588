"""
Prediction pipeline - orchestrates data flow from VATSIM to the cache.

Every pass is a full rebuild from one telemetry snapshot:
1. Fetch: pull the pilot list from the VATSIM feed
2. Grid: generate the 15-minute slots for the current horizon
3. Sectors: project eligible aircraft and count sector occupancy
4. Gates: bucket arrivals to the monitored airport by gate and ETA
5. Routes: remaining routes with per-fix ETAs for display
6. Publish: swap the new snapshot into the prediction cache

Passes never overlap. A pass that starts while the previous one is still
running is skipped, and a failed fetch keeps the previous snapshot.
"""

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from sectorflow.airspace import GATE_ARRIVAL_AIRPORT, GATES
from sectorflow.cache import AircraftRoute, PredictionCache, PredictionSnapshot, prediction_cache
from sectorflow.config import PredictionConfig, config
from sectorflow.engine.aggregator import OccupancyAggregator
from sectorflow.engine.estimator import compute_etas, route_length_nm
from sectorflow.engine.reference import ReferenceSnapshot
from sectorflow.engine.regions import build_gate_regions
from sectorflow.engine.timegrid import generate_slots
from sectorflow.engine.types import AircraftState
from sectorflow.ingestion.vatsim_client import VatsimClient

logger = logging.getLogger(__name__)


class PredictionPipeline:
    """
    Manages the prediction lifecycle.

    Coordinates fetching from VATSIM, the prediction engine and the cache.
    Can run as a background thread for continuous polling.
    """

    def __init__(
        self,
        client: Optional[VatsimClient] = None,
        reference: Optional[ReferenceSnapshot] = None,
        cache: Optional[PredictionCache] = None,
        settings: Optional[PredictionConfig] = None,
        horizon_hours: Optional[int] = None,
    ):
        """
        Initialize the prediction pipeline.

        Args:
            client: VATSIM feed client (created from config if None)
            reference: Reference snapshot (empty if None)
            cache: Cache receiving each finished pass (module singleton if None)
            settings: Prediction settings (application config if None)
            horizon_hours: Initial horizon (settings default if None)
        """
        self.client = client or VatsimClient.from_config()
        self.reference = reference or ReferenceSnapshot.empty()
        self.cache = cache if cache is not None else prediction_cache
        self.settings = settings or config.prediction
        self.horizon_hours = horizon_hours or self.settings.horizon_hours

        self.gates = build_gate_regions(GATES)
        self.aggregator = OccupancyAggregator(self.reference, self.settings)

        # State tracking
        self._stop_event = threading.Event()
        self._pass_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._last_fetch_time: float = 0
        self._fetch_count: int = 0
        self._error_count: int = 0
        self._skipped_count: int = 0

        # Callbacks for external integration
        self._on_update_callbacks: List[Callable[[PredictionSnapshot], None]] = []

    def set_horizon(self, hours: int) -> None:
        """
        Change the prediction horizon used from the next pass on.

        Raises:
            ValueError if hours is not an integer between 1 and the configured maximum
        """
        if isinstance(hours, bool) or not isinstance(hours, int):
            raise ValueError(f'Horizon must be an integer number of hours, got {hours!r}')
        if not 1 <= hours <= self.settings.max_horizon_hours:
            raise ValueError(f'Horizon must be between 1 and {self.settings.max_horizon_hours} hours')

        self.horizon_hours = hours
        logger.info(f'Prediction horizon set to {hours}h')

    def add_update_callback(self, callback: Callable[[PredictionSnapshot], None]) -> None:
        """
        Register callback to be invoked after each successful pass.

        Callback receives the new PredictionSnapshot.
        """
        self._on_update_callbacks.append(callback)

    def _build_routes(
        self,
        aircraft_list: Iterable[AircraftState],
        now: datetime,
    ) -> Dict[str, AircraftRoute]:
        """Remaining routes with airway gaps, destination leg and ETAs."""
        projector = self.aggregator.projector
        routes = {}

        for aircraft in aircraft_list:
            if not self.aggregator.is_eligible(aircraft):
                continue

            fixes = projector.project_remaining_route(
                aircraft,
                interpolate_airways=True,
                include_destination=True,
            )
            if not fixes:
                continue

            # Not moving: keep the fixes, no ETAs
            fixes = compute_etas(aircraft.position, fixes, aircraft.groundspeed, now) or fixes

            plan = aircraft.flight_plan
            routes[aircraft.callsign] = AircraftRoute(
                callsign=aircraft.callsign,
                departure=plan.departure if plan else '',
                arrival=aircraft.arrival,
                latitude=aircraft.latitude,
                longitude=aircraft.longitude,
                altitude=aircraft.altitude,
                heading=aircraft.heading,
                groundspeed=aircraft.groundspeed,
                fixes=fixes,
                total_distance_nm=route_length_nm(aircraft.position, fixes),
            )

        return routes

    def build_snapshot(
        self,
        feed_time: datetime,
        aircraft_list: List[AircraftState],
        now: Optional[datetime] = None,
    ) -> PredictionSnapshot:
        """Run the prediction engine over one telemetry snapshot."""
        started = time.perf_counter()
        now = now or datetime.now(timezone.utc)
        horizon = self.horizon_hours

        slots = generate_slots(now, horizon)
        sector_matrix = self.aggregator.aggregate_sectors(aircraft_list, slots, now=now)
        gate_matrix = self.aggregator.aggregate_gates(
            aircraft_list,
            slots,
            self.gates,
            arrival_airport=GATE_ARRIVAL_AIRPORT,
            now=now,
        )
        routes = self._build_routes(aircraft_list, now)

        return PredictionSnapshot(
            generated_at=now,
            feed_time=feed_time,
            horizon_hours=horizon,
            slots=slots,
            sector_matrix=sector_matrix,
            gate_matrix=gate_matrix,
            routes=routes,
            aircraft_count=len(aircraft_list),
            duration_ms=(time.perf_counter() - started) * 1000,
        )

    def fetch_and_process(self) -> int:
        """
        Execute one prediction pass.

        Returns count of aircraft processed, or -1 on error or when the
        previous pass is still running.
        """
        if not self._pass_lock.acquire(blocking=False):
            self._skipped_count += 1
            logger.warning('Previous prediction pass still running, skipping')
            return -1

        try:
            # Stage 1: Fetch from VATSIM
            feed_time, aircraft_list = self.client.get_pilots()

            self._last_fetch_time = time.time()
            self._fetch_count += 1

            # Stages 2-5: Predict
            snapshot = self.build_snapshot(feed_time, aircraft_list)

            # Stage 6: Publish
            self.cache.replace(snapshot)

            logger.info(
                f'Processed {snapshot.aircraft_count} aircraft: '
                f'{snapshot.sector_matrix.total} sector counts, '
                f'{snapshot.gate_matrix.total} gate counts, '
                f'{len(snapshot.routes)} routes in {snapshot.duration_ms:.0f}ms'
            )

        except Exception as e:
            self._error_count += 1
            logger.error(f'Prediction pass error: {e}')
            return -1

        finally:
            self._pass_lock.release()

        # Notify callbacks
        for callback in self._on_update_callbacks:
            try:
                callback(snapshot)
            except Exception as e:
                logger.error(f'Update callback error: {e}')

        return snapshot.aircraft_count

    def run_continuous(self, interval: Optional[float] = None) -> None:
        """
        Run the prediction loop until stop() is called.

        This method blocks - use start_background() for non-blocking.
        """
        interval = interval or config.feed.poll_interval
        self._stop_event.clear()

        logger.info(f'Starting continuous prediction (interval={interval}s)')

        while not self._stop_event.is_set():
            self.fetch_and_process()
            self._stop_event.wait(interval)

        logger.info('Prediction loop exited')

    def start_background(self, interval: Optional[float] = None) -> None:
        """Start the prediction loop in a background thread."""
        if self._thread and self._thread.is_alive():
            logger.warning('Prediction pipeline already running')
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run_continuous,
            args=(interval,),
            daemon=True,
            name='prediction-pipeline',
        )
        self._thread.start()
        logger.info('Background prediction started')

    def stop(self) -> None:
        """Stop the background loop, waking it if it is waiting."""
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=5)
        logger.info('Prediction pipeline stopped')

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop_event.is_set()

    @property
    def stats(self) -> dict:
        """Get pipeline statistics."""
        return {
            'fetch_count': self._fetch_count,
            'error_count': self._error_count,
            'skipped_count': self._skipped_count,
            'last_fetch_time': self._last_fetch_time,
            'horizon_hours': self.horizon_hours,
            'running': self.running,
        }
