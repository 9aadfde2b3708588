"""
VATSIM data feed client.

Pulls the public v3 network snapshot and normalizes the pilots array
into immutable AircraftState records.

Pilot record fields used (v3 format):
    cid          - Network member ID
    callsign     - Callsign as connected
    latitude     - WGS84 latitude
    longitude    - WGS84 longitude
    altitude     - Altitude in feet
    groundspeed  - Ground speed in knots
    heading      - Heading in degrees (0=north)
    flight_plan  - null, or {departure, arrival, route, ...}

The feed refreshes roughly every 15 seconds; there is no auth and no
server-side filtering, so the whole network comes back every time.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple

import requests

from sectorflow.config import config
from sectorflow.engine.types import AircraftState, FlightPlan

logger = logging.getLogger(__name__)


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def parse_flight_plan(raw: Any) -> Optional[FlightPlan]:
    """Parse the nested flight_plan object. Returns None if absent."""
    if not isinstance(raw, dict):
        return None
    return FlightPlan(
        departure=(raw.get('departure') or '').strip().upper(),
        arrival=(raw.get('arrival') or '').strip().upper(),
        route=raw.get('route') or '',
    )


def parse_pilot(raw: Any) -> Optional[AircraftState]:
    """
    Parse one pilot record into an AircraftState.

    Returns None if the record is malformed or missing position data.
    Groundspeed is kept as None when unreported rather than defaulted.
    """
    if not isinstance(raw, dict):
        return None

    callsign = raw.get('callsign')
    if not callsign or not isinstance(callsign, str):
        return None

    latitude = _as_float(raw.get('latitude'))
    longitude = _as_float(raw.get('longitude'))
    if latitude is None or longitude is None:
        return None

    cid = raw.get('cid')
    return AircraftState(
        callsign=callsign.strip().upper(),
        latitude=latitude,
        longitude=longitude,
        altitude=_as_float(raw.get('altitude')) or 0.0,
        heading=(_as_float(raw.get('heading')) or 0.0) % 360,
        groundspeed=_as_float(raw.get('groundspeed')),
        flight_plan=parse_flight_plan(raw.get('flight_plan')),
        cid=cid if isinstance(cid, int) else None,
    )


def _parse_timestamp(value: Optional[str]) -> datetime:
    """Parse the feed's ISO update timestamp, falling back to now."""
    if value:
        try:
            # Feed uses 7 fractional digits; fromisoformat accepts at most 6
            value = re.sub(r'(\.\d{6})\d+', r'\1', value.replace('Z', '+00:00'))
            parsed = datetime.fromisoformat(value)
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed
        except ValueError:
            logger.debug(f'Unparseable feed timestamp: {value}')
    return datetime.now(timezone.utc)


class VatsimClient:
    """
    Client for the VATSIM v3 data feed.

    Handles:
    - GET of the full network snapshot
    - Parsing pilots[] into AircraftState records
    - Logging of network/API errors (errors are re-raised to the caller)
    """

    def __init__(
        self,
        url: str = 'https://data.vatsim.net/v3/vatsim-data.json',
        timeout: float = 15,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.last_request_time: float = 0

    @classmethod
    def from_config(cls) -> 'VatsimClient':
        """Create client from application configuration."""
        return cls(
            url=config.feed.url,
            timeout=config.feed.timeout_seconds,
        )

    def get_pilots(self) -> Tuple[datetime, List[AircraftState]]:
        """
        Fetch the current pilot list.

        Returns:
            Tuple of (feed update timestamp, list of AircraftState)

        Raises:
            requests.RequestException on network/API errors
            ValueError if the body is not valid JSON
        """
        logger.debug(f'Fetching VATSIM feed: {self.url}')

        try:
            response = self.session.get(self.url, timeout=self.timeout)
            self.last_request_time = datetime.now(timezone.utc).timestamp()

            response.raise_for_status()
            data = response.json()

        except requests.exceptions.Timeout:
            logger.error('VATSIM feed timeout')
            raise
        except requests.exceptions.HTTPError as e:
            logger.error(f'VATSIM feed error: {e.response.status_code}')
            raise
        except requests.exceptions.RequestException as e:
            logger.error(f'VATSIM feed request failed: {e}')
            raise
        except ValueError as e:
            logger.error(f'VATSIM feed returned invalid JSON: {e}')
            raise

        general = data.get('general') or {}
        update_time = _parse_timestamp(general.get('update_timestamp'))
        pilots_raw = data.get('pilots') or []

        logger.info(f'Received {len(pilots_raw)} pilots from VATSIM')

        pilots = []
        for raw in pilots_raw:
            aircraft = parse_pilot(raw)
            if aircraft is not None:
                pilots.append(aircraft)

        skipped = len(pilots_raw) - len(pilots)
        if skipped:
            logger.debug(f'Skipped {skipped} malformed pilot records')

        return update_time, pilots
