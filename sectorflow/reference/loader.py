"""
Reference data import and snapshot loading.

Two stages:
1. Import: routes.json and airports.json are copied into the waypoints
   and airports tables the first time the service starts (tables empty).
2. Load: the tables plus the sector GeoJSON are read once into an
   immutable ReferenceSnapshot handed to the prediction engine.

Expected file formats:
    routes.json   {"A300": [{"order": 1, "waypoint": "SAALR", "lat": .., "lon": ..}, ...], ...}
    airports.json {"TJSJ": {"icao": "TJSJ", "name": .., "lat": .., "lon": .., ...}, ...}
    sectors       GeoJSON FeatureCollection, properties {"sector": "Sector 4", "max_alt": 24000}
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from sqlalchemy import func, select

from sectorflow.config import ReferenceConfig, config
from sectorflow.engine.reference import ReferenceSnapshot
from sectorflow.models import Airport, Waypoint, get_session
from sectorflow.models.base import SessionLocal

logger = logging.getLogger(__name__)


def _read_json(path: Path) -> Optional[dict]:
    """Read a JSON document, or None if the file is missing."""
    if not path.exists():
        logger.warning(f'Reference file not found: {path}')
        return None

    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def _table_count(model) -> int:
    with get_session() as session:
        return session.scalar(select(func.count()).select_from(model)) or 0


def load_routes_json(routes_path: Path, batch_size: int = 5000) -> int:
    """
    Import airway waypoints into the waypoints table.

    Rows are inserted in file order so the surrogate id keeps table order.
    Returns count of rows loaded.
    """
    data = _read_json(routes_path)
    if not data:
        return 0

    logger.info(f'Loading airway waypoints from {routes_path}')
    loaded = 0
    batch = []

    for airway, waypoints in data.items():
        for i, wp in enumerate(waypoints or []):
            ident = str(wp.get('waypoint') or '').strip().upper()
            lat, lon = wp.get('lat'), wp.get('lon')
            if not ident or not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
                continue

            batch.append({
                'airway': airway,
                'order': int(wp.get('order', i + 1)),
                'ident': ident,
                'latitude': float(lat),
                'longitude': float(lon),
            })

            if len(batch) >= batch_size:
                _insert_batch(Waypoint, batch)
                loaded += len(batch)
                logger.info(f'Loaded {loaded} waypoint records...')
                batch = []

    if batch:
        _insert_batch(Waypoint, batch)
        loaded += len(batch)

    logger.info(f'Loaded {loaded} total waypoint records')
    return loaded


def load_airports_json(airports_path: Path, batch_size: int = 5000) -> int:
    """
    Import airports into the airports table.

    Entries without numeric lat/lon are skipped. Returns count loaded.
    """
    data = _read_json(airports_path)
    if not data:
        return 0

    logger.info(f'Loading airports from {airports_path}')
    loaded = 0
    batch = []
    seen = set()

    for key, entry in data.items():
        icao = str(entry.get('icao') or key).strip().upper()
        lat, lon = entry.get('lat'), entry.get('lon')
        if not icao or icao in seen:
            continue
        if not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
            continue
        seen.add(icao)

        elevation = entry.get('elevation')
        batch.append({
            'icao': icao,
            'iata': entry.get('iata') or None,
            'name': entry.get('name') or None,
            'city': entry.get('city') or None,
            'country': entry.get('country') or None,
            'elevation': int(elevation) if isinstance(elevation, (int, float)) else None,
            'latitude': float(lat),
            'longitude': float(lon),
        })

        if len(batch) >= batch_size:
            _insert_batch(Airport, batch)
            loaded += len(batch)
            batch = []

    if batch:
        _insert_batch(Airport, batch)
        loaded += len(batch)

    logger.info(f'Loaded {loaded} total airport records')
    return loaded


def _insert_batch(model, records: List[dict]) -> None:
    """Bulk insert one batch of reference rows."""
    with SessionLocal() as session:
        session.execute(model.__table__.insert(), records)
        session.commit()


def import_reference_data(settings: Optional[ReferenceConfig] = None) -> Dict[str, int]:
    """
    Populate empty reference tables from the JSON files.

    Tables that already hold rows are left untouched, so this is safe to
    call on every start.
    """
    settings = settings or config.reference
    result = {'waypoints': 0, 'airports': 0}

    if _table_count(Waypoint) == 0:
        result['waypoints'] = load_routes_json(settings.routes_path, settings.batch_size)
    if _table_count(Airport) == 0:
        result['airports'] = load_airports_json(settings.airports_path, settings.batch_size)

    return result


def load_reference_snapshot(
    settings: Optional[ReferenceConfig] = None,
    default_max_alt: Optional[float] = None,
) -> ReferenceSnapshot:
    """
    Build the immutable reference snapshot from the database and GeoJSON.

    Missing data degrades rather than fails: an empty waypoint table means
    no route resolution, a missing GeoJSON means no sector rows beyond the
    declared ones.
    """
    settings = settings or config.reference
    if default_max_alt is None:
        default_max_alt = config.prediction.default_max_alt_ft

    routes: Dict[str, List[dict]] = {}
    airports: Dict[str, dict] = {}

    with get_session() as session:
        # id order is import order
        for wp in session.scalars(select(Waypoint).order_by(Waypoint.id)):
            routes.setdefault(wp.airway, []).append(wp.to_route_entry())

        for ap in session.scalars(select(Airport)):
            airports[ap.icao] = {'lat': ap.latitude, 'lon': ap.longitude}

    sector_geojson = _read_json(settings.sectors_path)

    snapshot = ReferenceSnapshot.from_tables(
        routes,
        airports=airports,
        sector_geojson=sector_geojson,
        default_max_alt=default_max_alt,
    )
    logger.info(f'Reference snapshot loaded: {snapshot.stats}')
    return snapshot
