"""
Capacity matrix and route API endpoints.

Provides endpoints for:
- GET /api/matrix/sectors - Sector occupancy per slot, with present-now counts
- GET /api/matrix/gates - Gate crossings per slot for TJSJ arrivals
- GET/POST /api/matrix/window - Read or set the prediction horizon
- GET /api/routes - Remaining routes with per-fix ETAs
- GET /api/routes/<callsign> - Remaining route for one aircraft

Matrices are classified against the current limits at request time, so
a limits change shows up immediately without waiting for the next pass.
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request

from sectorflow.airspace import FALLBACK_LIMIT, GATE_BOARD, SECTOR_BOARD
from sectorflow.cache import prediction_cache
from sectorflow.config import config
from sectorflow.engine.timegrid import SLOT_MINUTES

logger = logging.getLogger(__name__)

matrix_bp = Blueprint('matrix', __name__, url_prefix='/api/matrix')
routes_bp = Blueprint('routes', __name__, url_prefix='/api/routes')


def _no_prediction():
    return jsonify({'error': 'No prediction available yet'}), 503


def _matrix_response(board: str):
    start_time = time.perf_counter()

    snapshot = prediction_cache.get()
    if snapshot is None:
        return _no_prediction()

    matrix = snapshot.sector_matrix if board == SECTOR_BOARD else snapshot.gate_matrix
    limits = current_app.config['LIMITS_STORE'].get(board)
    result = matrix.to_dict(
        limits,
        near_ratio=config.prediction.near_limit_ratio,
        fallback_limit=FALLBACK_LIMIT,
    )

    query_time_ms = (time.perf_counter() - start_time) * 1000

    result.update({
        'board': board,
        'generated_at': snapshot.generated_at.isoformat(),
        'horizon_hours': snapshot.horizon_hours,
        'aircraft_count': snapshot.aircraft_count,
        'query_time_ms': round(query_time_ms, 2),
    })
    return jsonify(result)


@matrix_bp.route('/sectors', methods=['GET'])
def get_sector_matrix():
    """
    Sector capacity matrix.

    Each row carries the region name, its limit, the count per slot,
    a status band per slot (ok | near_limit | exceeded) and the number
    of aircraft inside the sector right now.
    """
    return _matrix_response(SECTOR_BOARD)


@matrix_bp.route('/gates', methods=['GET'])
def get_gate_matrix():
    """Gate capacity matrix. Same shape as sectors, without present-now counts."""
    return _matrix_response(GATE_BOARD)


@matrix_bp.route('/window', methods=['GET', 'POST'])
def prediction_window():
    """
    Get or set the prediction horizon.

    GET: Returns current horizon in hours
    POST: Set a new horizon, applied from the next pass
        Body: {"hours": int}  (1-24)
    """
    pipeline = current_app.config.get('PREDICTION_PIPELINE')
    if pipeline is None:
        return jsonify({'error': 'Prediction pipeline not configured'}), 503

    if request.method == 'GET':
        return jsonify({
            'hours': pipeline.horizon_hours,
            'max_hours': config.prediction.max_horizon_hours,
            'slot_minutes': SLOT_MINUTES,
        })

    data = request.get_json(silent=True)
    if not data or 'hours' not in data:
        return jsonify({'error': 'hours required'}), 400

    try:
        pipeline.set_horizon(data['hours'])
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    return jsonify({'hours': pipeline.horizon_hours})


@routes_bp.route('', methods=['GET'])
def list_routes():
    """
    List remaining routes for every aircraft with a resolvable route.

    Query parameters:
    - arrival: ICAO code, only routes to this airport
    """
    snapshot = prediction_cache.get()
    if snapshot is None:
        return _no_prediction()

    arrival = request.args.get('arrival', '').strip().upper()
    routes = [
        r for r in snapshot.routes.values()
        if not arrival or r.arrival == arrival
    ]
    routes.sort(key=lambda r: r.callsign)

    return jsonify({
        'routes': [r.to_dict() for r in routes],
        'count': len(routes),
        'generated_at': snapshot.generated_at.isoformat(),
        'timestamp': datetime.now(timezone.utc).isoformat(),
    })


@routes_bp.route('/<callsign>', methods=['GET'])
def get_route(callsign: str):
    """Remaining route for a single aircraft."""
    if prediction_cache.get() is None:
        return _no_prediction()

    route = prediction_cache.get_route(callsign)
    if route is None:
        return jsonify({'error': 'Route not found'}), 404

    return jsonify(route.to_dict())
