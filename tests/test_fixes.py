"""
Tests for route token handling and fix resolution.

Run with: python -m pytest tests/test_fixes.py
"""

import pytest

from sectorflow.engine.fixes import (
    FixResolver,
    clean_token,
    is_procedure,
    is_valid_fix,
    parse_coordinate_literal,
)
from sectorflow.engine.reference import ReferenceSnapshot


class TestTokens:
    """Token normalization and classification"""

    def test_clean_token_strips_speed_level_suffix(self):
        assert clean_token('saalr/N0450F350') == 'SAALR'
        assert clean_token('  fixa ') == 'FIXA'

    def test_valid_fix_shapes(self):
        assert is_valid_fix('SAALR')
        assert is_valid_fix('STT')
        assert is_valid_fix('46N040W')
        assert is_valid_fix('205705N0655304W')

        assert not is_valid_fix('A300')      # airway
        assert not is_valid_fix('CLT2A')     # procedure
        assert not is_valid_fix('DCT1')
        assert not is_valid_fix('TOOLONGX')

    def test_procedure_recognized(self):
        assert is_procedure('CLT2A')
        assert not is_procedure('SAALR')


class TestCoordinateLiterals:
    """Coordinate-literal decoding"""

    def test_short_form(self):
        assert parse_coordinate_literal('46N040W') == (46.0, -40.0)
        assert parse_coordinate_literal('10S020E') == (-10.0, 20.0)

    def test_long_form(self):
        lat, lon = parse_coordinate_literal('205705N0655304W')
        assert lat == pytest.approx(20 + 57 / 60 + 5 / 3600)
        assert lon == pytest.approx(-(65 + 53 / 60 + 4 / 3600))

    def test_not_a_literal(self):
        assert parse_coordinate_literal('SAALR') is None

    def test_literal_never_consults_table(self):
        resolver = FixResolver(ReferenceSnapshot.empty())
        assert resolver.resolve('18N064W') == (18.0, -64.0)


class TestFixResolver:
    """Lookup against the waypoint table"""

    def test_unique_fix(self, reference):
        resolver = FixResolver(reference)
        assert resolver.resolve('FIXA') == (18.0, -64.0)

    def test_unknown_fix(self, reference):
        resolver = FixResolver(reference)
        assert resolver.resolve('NOPE') is None

    def test_duplicate_without_previous_uses_table_order(self, reference):
        resolver = FixResolver(reference)
        assert resolver.resolve('DUPE') == (18.0, -64.5)

    def test_duplicate_nearest_to_previous(self, reference):
        resolver = FixResolver(reference)
        assert resolver.resolve('DUPE', previous=(18.0, -65.0)) == (18.0, -64.5)
        assert resolver.resolve('DUPE', previous=(26.0, -41.0)) == (25.0, -40.0)

    def test_duplicate_tie_goes_to_table_order(self):
        routes = {
            'W1': [{'order': 1, 'waypoint': 'TWIN', 'lat': 10.0, 'lon': 1.0}],
            'W2': [{'order': 1, 'waypoint': 'TWIN', 'lat': 10.0, 'lon': -1.0}],
        }
        resolver = FixResolver(ReferenceSnapshot.from_tables(routes))
        assert resolver.resolve('TWIN', previous=(10.0, 0.0)) == (10.0, 1.0)

    def test_lookup_keeps_airway_context(self, reference):
        fix = FixResolver(reference).lookup('MIDDL')
        assert fix.airway == 'R500'
        assert fix.order == 2
