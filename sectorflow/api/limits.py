"""
Limits API endpoints.

- GET /api/limits - All boards
- GET /api/limits/<board> - Limits for one board ('sectors' or 'gates')
- PUT /api/limits/<board> - Replace a board wholesale
    Body: {"Sector 4": 10, "Sector 6": 8, ...}

A successful PUT is broadcast to every connected SocketIO client.
"""

import logging

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

limits_bp = Blueprint('limits', __name__, url_prefix='/api/limits')


@limits_bp.route('', methods=['GET'])
def list_limits():
    store = current_app.config['LIMITS_STORE']
    return jsonify({'limits': store.get_all()})


@limits_bp.route('/<board>', methods=['GET', 'PUT'])
def board_limits(board: str):
    store = current_app.config['LIMITS_STORE']

    if request.method == 'GET':
        try:
            return jsonify({'board': board, 'limits': store.get(board)})
        except ValueError as e:
            return jsonify({'error': str(e)}), 404

    data = request.get_json(silent=True)
    if data is None:
        return jsonify({'error': 'JSON body required'}), 400

    try:
        limits = store.replace(board, data)
    except ValueError as e:
        logger.warning(f'Rejected limits update for {board}: {e}')
        return jsonify({'error': str(e)}), 400
    except SQLAlchemyError as e:
        logger.error(f'Could not save limits for {board}: {e}')
        return jsonify({'error': 'Limits could not be saved'}), 503

    return jsonify({'board': board, 'limits': limits})
