"""
SocketIO limits channel.

Events:
- connect           server emits 'limits' once per board
- updateLimits      client sends {"board": "gates", "limits": {...}};
                    a bare {region: limit} mapping is taken as the gates board
- limits (out)      {"board": ..., "limits": {...}} broadcast after every change
- error (out)       {"error": ...} to the sender when an update is rejected
                    or cannot be saved
"""

import logging
from typing import Dict

from flask import current_app
from flask_socketio import SocketIO, emit
from sqlalchemy.exc import SQLAlchemyError

from sectorflow.airspace import GATE_BOARD

logger = logging.getLogger(__name__)

socketio = SocketIO(cors_allowed_origins='*', async_mode='threading')


def broadcast_limits(board: str, limits: Dict[str, int]) -> None:
    """Limits store listener: push a replaced board to every client."""
    socketio.emit('limits', {'board': board, 'limits': limits})


def parse_update(data) -> tuple:
    """Split an updateLimits payload into (board, limits)."""
    if isinstance(data, dict) and 'limits' in data:
        return data.get('board') or GATE_BOARD, data['limits']
    return GATE_BOARD, data


@socketio.on('connect')
def handle_connect(auth=None):
    store = current_app.config['LIMITS_STORE']
    logger.debug('Limits client connected')
    for board in store.boards:
        emit('limits', {'board': board, 'limits': store.get(board)})


@socketio.on('disconnect')
def handle_disconnect(reason=None):
    logger.debug('Limits client disconnected')


@socketio.on('updateLimits')
def handle_update_limits(data):
    store = current_app.config['LIMITS_STORE']
    board, limits = parse_update(data)

    try:
        # The store notifies broadcast_limits on success
        store.replace(board, limits)
    except ValueError as e:
        logger.warning(f'Rejected limits update over socket: {e}')
        emit('error', {'error': str(e)})
    except SQLAlchemyError as e:
        logger.error(f'Could not save limits update for {board}: {e}')
        emit('error', {'error': 'Limits could not be saved'})
