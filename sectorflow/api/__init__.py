"""
API module for SectorFlow.

Provides REST endpoints for:
- Capacity matrices (sectors, gates) and the prediction window
- Remaining routes with ETAs
- Capacity limits
- System status

and the SocketIO limits channel.
"""

from sectorflow.api.matrix import matrix_bp, routes_bp
from sectorflow.api.limits import limits_bp
from sectorflow.api.status import status_bp
from sectorflow.api.sockets import socketio, broadcast_limits

__all__ = ['matrix_bp', 'routes_bp', 'limits_bp', 'status_bp', 'socketio', 'broadcast_limits']
