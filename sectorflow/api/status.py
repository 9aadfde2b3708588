"""
System status endpoint.

- GET /api/status - Pipeline, cache, limits and reference data health
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text

from sectorflow.cache import prediction_cache
from sectorflow.config import config
from sectorflow.models.base import SessionLocal

logger = logging.getLogger(__name__)

status_bp = Blueprint('status', __name__, url_prefix='/api')


@status_bp.route('/status', methods=['GET'])
def get_system_status():
    """
    Get system health and status information.

    Returns:
    - Prediction pipeline status
    - Database connectivity
    - Cache statistics and last pass summary
    - Reference data counts
    - Configuration info
    """
    start_time = time.perf_counter()

    pipeline = current_app.config.get('PREDICTION_PIPELINE')
    pipeline_stats = pipeline.stats if pipeline else {'running': False}
    reference = current_app.config.get('REFERENCE_SNAPSHOT')

    # Check database connectivity
    db_ok = True
    try:
        with SessionLocal() as session:
            session.execute(text('SELECT 1'))
    except Exception as e:
        db_ok = False
        logger.error(f'Database health check failed: {e}')

    snapshot = prediction_cache.get()

    query_time_ms = (time.perf_counter() - start_time) * 1000

    return jsonify({
        'status': 'healthy' if (db_ok and pipeline_stats.get('running')) else 'degraded',
        'database': {
            'connected': db_ok,
            'type': 'sqlite' if config.database.is_sqlite else 'other',
        },
        'pipeline': pipeline_stats,
        'cache': prediction_cache.stats,
        'last_pass': snapshot.to_summary() if snapshot else None,
        'limits': current_app.config['LIMITS_STORE'].stats,
        'reference': reference.stats if reference else None,
        'config': {
            'feed_url': config.feed.url,
            'poll_interval': config.feed.poll_interval,
            'sector_projection': config.prediction.sector_projection,
        },
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'query_time_ms': round(query_time_ms, 2),
    })
