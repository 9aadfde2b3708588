"""
Tests for sector and gate occupancy aggregation.

Run with: python -m pytest tests/test_aggregator.py
"""

import math

from sectorflow.airspace import ALL_SECTORS, GATES, UNKNOWN_GATE
from sectorflow.engine.aggregator import CapacityMatrix, OccupancyAggregator, ThresholdStatus, classify
from sectorflow.engine.estimator import ProjectionStrategy
from sectorflow.engine.regions import build_gate_regions
from sectorflow.engine.timegrid import generate_slots

DR = ProjectionStrategy.DEAD_RECKONING


class TestClassify:
    """Threshold bands"""

    def test_bands_for_limit(self):
        for limit in (4, 8, 10):
            assert classify(limit + 1, limit) == ThresholdStatus.EXCEEDED
            assert classify(math.ceil(0.75 * limit), limit) == ThresholdStatus.NEAR_LIMIT
            assert classify(limit, limit) == ThresholdStatus.NEAR_LIMIT
            assert classify(0, limit) == ThresholdStatus.OK

    def test_just_below_near(self):
        assert classify(5, 8) == ThresholdStatus.OK
        assert classify(6, 8) == ThresholdStatus.NEAR_LIMIT

    def test_zero_limit(self):
        assert classify(0, 0) == ThresholdStatus.OK
        assert classify(1, 0) == ThresholdStatus.EXCEEDED


class TestCapacityMatrix:

    def test_to_dict_uses_limits_and_fallback(self, now):
        slots = generate_slots(now, 1)
        matrix = CapacityMatrix.zeros(['Sector 1', 'Sector 4'], slots, with_present=True)
        for _ in range(3):
            matrix.increment('Sector 1', 0)

        result = matrix.to_dict({'Sector 1': 2}, fallback_limit=10)
        rows = {r['region']: r for r in result['rows']}

        assert len(result['slots']) == 4
        assert result['labels'][0] == '12:00'
        assert rows['Sector 1']['limit'] == 2
        assert rows['Sector 1']['status'][0] == 'exceeded'
        assert rows['Sector 4']['limit'] == 10
        assert rows['Sector 4']['present'] == 0

    def test_add_region_is_idempotent(self, now):
        matrix = CapacityMatrix.zeros(['A'], generate_slots(now, 1))
        matrix.add_region('B')
        matrix.add_region('B')
        assert matrix.regions == ['A', 'B']
        assert matrix.counts.shape == (2, 4)


class TestSectorAggregation:

    def test_empty_input_has_zero_rows_for_every_sector(self, reference, now):
        slots = generate_slots(now, 1)
        matrix = OccupancyAggregator(reference).aggregate_sectors([], slots, now=now)

        assert matrix.regions[:len(ALL_SECTORS)] == ALL_SECTORS
        for sector in ALL_SECTORS:
            assert matrix.row(sector) == [0, 0, 0, 0]
            assert matrix.present[sector] == 0

    def test_low_center_yields_to_approach(self, reference, aircraft_factory, now):
        slots = generate_slots(now, 1)
        aircraft = aircraft_factory(lat=18.5, lon=-66.0, altitude=8000, groundspeed=1, route='DCT')
        matrix = OccupancyAggregator(reference).aggregate_sectors([aircraft], slots, now=now, strategy=DR)

        assert matrix.row('Sector 1') == [1, 1, 1, 1]
        assert matrix.row('Sector 4') == [0, 0, 0, 0]

    def test_high_aircraft_counts_in_both(self, reference, aircraft_factory, now):
        slots = generate_slots(now, 1)
        aircraft = aircraft_factory(lat=18.5, lon=-66.0, altitude=15000, groundspeed=1, route='DCT')
        matrix = OccupancyAggregator(reference).aggregate_sectors([aircraft], slots, now=now, strategy=DR)

        assert matrix.row('Sector 1') == [1, 1, 1, 1]
        assert matrix.row('Sector 4') == [1, 1, 1, 1]

    def test_altitude_ceiling(self, reference, aircraft_factory, now):
        slots = generate_slots(now, 1)
        aircraft = aircraft_factory(lat=18.0, lon=-60.0, altitude=30000, groundspeed=1, route='DCT', arrival='KJFK')
        matrix = OccupancyAggregator(reference).aggregate_sectors([aircraft], slots, now=now, strategy=DR)

        assert matrix.row('Sector 2') == [0, 0, 0, 0]
        # Present-now has no altitude gate
        assert matrix.present['Sector 2'] == 1

    def test_exempt_arrival_ignores_ceiling(self, reference, aircraft_factory, now):
        slots = generate_slots(now, 1)
        aircraft = aircraft_factory(lat=18.0, lon=-60.0, altitude=30000, groundspeed=1, route='DCT', arrival='TIST')
        matrix = OccupancyAggregator(reference).aggregate_sectors([aircraft], slots, now=now, strategy=DR)

        assert matrix.row('Sector 2') == [1, 1, 1, 1]

    def test_no_flight_plan_excluded(self, reference, aircraft_factory, now):
        slots = generate_slots(now, 1)
        aircraft = aircraft_factory(lat=18.5, lon=-66.0, with_plan=False, groundspeed=1)
        matrix = OccupancyAggregator(reference).aggregate_sectors([aircraft], slots, now=now, strategy=DR)

        assert matrix.total == 0
        assert matrix.present['Sector 1'] == 0

    def test_on_ground_excluded(self, reference, aircraft_factory, now):
        slots = generate_slots(now, 1)
        aircraft = aircraft_factory(lat=18.5, lon=-66.0, altitude=50, groundspeed=1, route='DCT')
        matrix = OccupancyAggregator(reference).aggregate_sectors([aircraft], slots, now=now, strategy=DR)
        assert matrix.total == 0

    def test_outside_boundary_excluded(self, reference, aircraft_factory, now):
        slots = generate_slots(now, 1)
        aircraft = aircraft_factory(lat=50.0, lon=0.0, groundspeed=1, route='DCT')
        matrix = OccupancyAggregator(reference).aggregate_sectors([aircraft], slots, now=now, strategy=DR)
        assert matrix.total == 0

    def test_route_following(self, reference, aircraft_factory, now):
        slots = generate_slots(now, 1)
        aircraft = aircraft_factory(lat=18.5, lon=-66.0, altitude=30000, heading=90, route='FIXA FIXB')
        matrix = OccupancyAggregator(reference).aggregate_sectors(
            [aircraft], slots, now=now, strategy=ProjectionStrategy.ROUTE,
        )

        # Both remaining fixes lie in Sector 4, outside Sector 1
        assert matrix.row('Sector 4') == [1, 1, 1, 1]
        assert matrix.row('Sector 1') == [0, 0, 0, 0]
        assert matrix.present['Sector 1'] == 1

    def test_stationary_aircraft_only_present(self, reference, aircraft_factory, now):
        slots = generate_slots(now, 1)
        aircraft = aircraft_factory(lat=18.5, lon=-66.0, groundspeed=0, route='DCT')
        matrix = OccupancyAggregator(reference).aggregate_sectors([aircraft], slots, now=now, strategy=DR)

        assert matrix.total == 0
        assert matrix.present['Sector 1'] == 1


class TestGateAggregation:

    gates = build_gate_regions(GATES)

    def test_gate_from_route_token(self, reference, aircraft_factory, now):
        slots = generate_slots(now, 1)
        # ~114 NM east of TJSJ at 240 kt -> about 28 minutes
        aircraft = aircraft_factory(lat=18.4394, lon=-64.0, groundspeed=240, route='FIXA SAALR SAALR3')
        matrix = OccupancyAggregator(reference).aggregate_gates([aircraft], slots, self.gates, now=now)

        assert matrix.row('SAALR') == [0, 1, 0, 0]
        assert UNKNOWN_GATE not in matrix.regions
        assert matrix.present is None

    def test_zero_rows_for_every_gate(self, reference, now):
        slots = generate_slots(now, 1)
        matrix = OccupancyAggregator(reference).aggregate_gates([], slots, self.gates, now=now)

        assert matrix.regions == GATES
        assert matrix.total == 0

    def test_unknown_gate_row_created(self, reference, aircraft_factory, now):
        slots = generate_slots(now, 1)
        aircraft = aircraft_factory(lat=18.4394, lon=-64.0, groundspeed=240, route='FIXA FIXB')
        matrix = OccupancyAggregator(reference).aggregate_gates([aircraft], slots, self.gates, now=now)

        assert matrix.row(UNKNOWN_GATE) == [0, 1, 0, 0]

    def test_default_speed_when_not_moving(self, reference, aircraft_factory, now):
        slots = generate_slots(now, 1)
        # ~171 NM at the 450 kt default -> about 23 minutes
        aircraft = aircraft_factory(lat=18.4394, lon=-63.0, groundspeed=0, route='BEANO')
        matrix = OccupancyAggregator(reference).aggregate_gates([aircraft], slots, self.gates, now=now)

        assert matrix.row('BEANO') == [0, 1, 0, 0]

    def test_beyond_horizon_dropped(self, reference, aircraft_factory, now):
        slots = generate_slots(now, 1)
        aircraft = aircraft_factory(lat=18.4394, lon=-40.0, groundspeed=240, route='SAALR')
        matrix = OccupancyAggregator(reference).aggregate_gates([aircraft], slots, self.gates, now=now)
        assert matrix.total == 0

    def test_other_arrivals_and_ground_ignored(self, reference, aircraft_factory, now):
        slots = generate_slots(now, 1)
        elsewhere = aircraft_factory(lat=18.4394, lon=-64.0, groundspeed=240, route='SAALR', arrival='TNCM')
        on_ground = aircraft_factory(lat=18.4394, lon=-64.0, altitude=0, groundspeed=240, route='SAALR')
        matrix = OccupancyAggregator(reference).aggregate_gates([elsewhere, on_ground], slots, self.gates, now=now)
        assert matrix.total == 0
