"""
SectorFlow Flask Application.

Main entry point for the web application. Initializes:
- Database schema and reference data import
- Reference snapshot for the prediction engine
- Limits store and SocketIO limits channel
- Prediction pipeline
- API routes

Usage:
    python -m sectorflow.app
"""

import logging
import os
from typing import Optional

from flask import Flask
from flask_cors import CORS

from sectorflow.config import config
from sectorflow.models import init_db
from sectorflow.api import broadcast_limits, limits_bp, matrix_bp, routes_bp, socketio, status_bp
from sectorflow.engine.reference import ReferenceSnapshot
from sectorflow.ingestion import PredictionPipeline
from sectorflow.limits import LimitsStore, limits_store
from sectorflow.reference import import_reference_data, load_reference_snapshot

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def create_app(
    start_pipeline: bool = True,
    reference: Optional[ReferenceSnapshot] = None,
    limits: Optional[LimitsStore] = None,
    pipeline: Optional[PredictionPipeline] = None,
) -> Flask:
    """
    Application factory for Flask.

    Args:
        start_pipeline: Whether to start the background prediction loop.
                        Set to False for testing.
        reference: Reference snapshot (imported and loaded from disk if None)
        limits: Limits store (module singleton if None)
        pipeline: Prediction pipeline (built from config if None)

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = config.secret_key

    # Enable CORS for API endpoints
    CORS(app, resources={r'/api/*': {'origins': '*'}})

    # Initialize database
    logger.info('Initializing database...')
    init_db()

    if reference is None:
        imported = import_reference_data()
        if any(imported.values()):
            logger.info(f'Imported reference data: {imported}')
        reference = load_reference_snapshot()
    app.config['REFERENCE_SNAPSHOT'] = reference

    # Limits shared by HTTP and SocketIO clients
    store = limits if limits is not None else limits_store
    store.load()
    store.subscribe(broadcast_limits)
    app.config['LIMITS_STORE'] = store

    # Register API blueprints
    app.register_blueprint(matrix_bp)
    app.register_blueprint(routes_bp)
    app.register_blueprint(limits_bp)
    app.register_blueprint(status_bp)

    socketio.init_app(app)

    if pipeline is None:
        pipeline = PredictionPipeline(reference=reference)
    app.config['PREDICTION_PIPELINE'] = pipeline

    if start_pipeline:
        pipeline.start_background()
        logger.info(f'Prediction started: horizon {pipeline.horizon_hours}h, poll every {config.feed.poll_interval}s')

    @app.route('/health')
    def health():
        """Simple health check endpoint."""
        return {'status': 'ok'}

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.errorhandler(404)
    def not_found(e):
        return {'error': 'Not found'}, 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {'error': 'Method not allowed'}, 405

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {e}')
        return {'error': 'Internal server error'}, 500

    return app


def run_development_server():
    """Run the development server."""
    app = create_app()

    port = int(os.environ.get('PORT', 5000))

    logger.info(f'Starting SectorFlow on http://localhost:{port}')

    socketio.run(
        app,
        host='0.0.0.0',
        port=port,
        debug=config.debug,
        use_reloader=False,  # Reloader would start a second pipeline thread
        allow_unsafe_werkzeug=True,
    )


if __name__ == '__main__':
    run_development_server()
