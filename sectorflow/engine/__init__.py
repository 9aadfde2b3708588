"""
Traffic prediction engine.

Pure computation over an immutable reference snapshot and one telemetry
snapshot. No I/O, no shared state:

    route text -> FixResolver -> RouteProjector -> position estimator
               -> time grid -> OccupancyAggregator -> CapacityMatrix
"""

from sectorflow.engine.types import AircraftState, FlightPlan, Fix, ResolvedFix
from sectorflow.engine.timegrid import TimeSlot, generate_slots, round_up_to_slot, bucket_index
from sectorflow.engine.regions import SectorRegion, GateRegion, PredictionBoundary
from sectorflow.engine.reference import ReferenceSnapshot
from sectorflow.engine.fixes import FixResolver
from sectorflow.engine.routes import RouteProjector
from sectorflow.engine.estimator import ProjectionStrategy, compute_etas, dead_reckon, position_at
from sectorflow.engine.aggregator import (
    CapacityMatrix,
    OccupancyAggregator,
    ThresholdStatus,
    classify,
)

__all__ = [
    'AircraftState',
    'FlightPlan',
    'Fix',
    'ResolvedFix',
    'TimeSlot',
    'generate_slots',
    'round_up_to_slot',
    'bucket_index',
    'SectorRegion',
    'GateRegion',
    'PredictionBoundary',
    'ReferenceSnapshot',
    'FixResolver',
    'RouteProjector',
    'ProjectionStrategy',
    'compute_etas',
    'dead_reckon',
    'position_at',
    'CapacityMatrix',
    'OccupancyAggregator',
    'ThresholdStatus',
    'classify',
]
