"""
Airspace definitions for the San Juan (ZSU) area.

Static tables describing which sectors and gates are monitored, which
arrivals ignore sector ceilings, and where the regional airports sit.
These are operator-facing definitions rather than environment settings,
so they live here instead of in config.py.
"""

from typing import Dict, List, Tuple

# Sector groups - center sectors yield to approach sectors at low altitude
CENTER_SECTORS: List[str] = ['Sector 2', 'Sector 4', 'Sector 6', 'Sector 8']
APPROACH_SECTORS: List[str] = ['Sector 1', 'Sector 3', 'Sector 5', 'Sector 7', 'Sector 9']
ALL_SECTORS: List[str] = CENTER_SECTORS + APPROACH_SECTORS

# Local arrivals descend through every stacked sector regardless of ceiling
ALTITUDE_EXEMPT_ARRIVALS: List[str] = ['TJSJ', 'TIST', 'TISX', 'TUPJ', 'TJIG', 'TJRV', 'TJVQ']

# Arrival gates into the monitored airport, matched as route substrings
GATES: List[str] = ['SAALR', 'BEANO', 'JOSHE', 'VEDAS', 'STT']
GATE_ARRIVAL_AIRPORT = 'TJSJ'
UNKNOWN_GATE = 'UNKNOWN'

# Coarse working-set boundary, (lon, lat) ring
PREDICTION_BOUNDARY: List[Tuple[float, float]] = [
    (-87.39818771887983, 29.806332530592016),
    (-83.59259067095657, 15.552926693016502),
    (-75.2515825549939, 5.85893352210762),
    (-53.222848031340064, 2.2559725164533546),
    (-43.988508380523, 26.208418813890106),
    (-68.47848274584, 37.196788205233716),
    (-87.39818771887983, 29.806332530592016),
]

# Regional airports checked before the general airport database
REGIONAL_AIRPORTS: Dict[str, Tuple[float, float]] = {
    'TJSJ': (18.4394, -66.0018),
    'TNCM': (18.041, -63.109),
    'TIST': (18.3373, -64.9734),
    'TISX': (17.7019, -64.7983),
    'TUPJ': (18.4458, -64.543),
    'MDPC': (18.5674, -68.3634),
    'MDSD': (18.4297, -69.6689),
    'MBPV': (21.7736, -72.2659),
    'MTPP': (18.579, -72.2925),
}

# Limit boards and their defaults (aircraft per 15-minute slot)
SECTOR_BOARD = 'sectors'
GATE_BOARD = 'gates'

DEFAULT_LIMITS: Dict[str, Dict[str, int]] = {
    SECTOR_BOARD: {sector: 8 for sector in ALL_SECTORS},
    GATE_BOARD: {gate: 4 for gate in GATES},
}

# Used when a region has no configured limit
FALLBACK_LIMIT = 10
