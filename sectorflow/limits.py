"""
Capacity limits store.

Limits are grouped into boards ('sectors', 'gates'), each a mapping of
region name -> maximum aircraft per 15-minute slot. An update replaces
the whole board: it is validated, written to the region_limits table,
swapped in memory, and then pushed to every subscriber (the SocketIO
broadcast is one). Concurrent updates are last-writer-wins.

Boards with no stored rows start from the airspace defaults.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from sqlalchemy import delete, select

from sectorflow.airspace import DEFAULT_LIMITS
from sectorflow.models import RegionLimit, get_session

logger = logging.getLogger(__name__)

LimitsListener = Callable[[str, Dict[str, int]], None]


def validate_limits(board: str, limits: Any, boards: Mapping[str, Any] = DEFAULT_LIMITS) -> Dict[str, int]:
    """
    Check a limits payload and return a clean copy.

    Raises:
        ValueError on an unknown board, a non-mapping payload, an empty
        region name, or a value that is not a non-negative integer
    """
    if board not in boards:
        raise ValueError(f'Unknown limits board: {board!r}')
    if not isinstance(limits, Mapping):
        raise ValueError('Limits must be a mapping of region name to integer')

    clean = {}
    for region, value in limits.items():
        if not isinstance(region, str) or not region.strip():
            raise ValueError(f'Invalid region name: {region!r}')
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f'Limit for {region} must be an integer, got {value!r}')
        if value < 0:
            raise ValueError(f'Limit for {region} must be non-negative, got {value}')
        clean[region.strip()] = value
    return clean


class LimitsStore:
    """
    Thread-safe, persisted limits per board.

    Args:
        defaults: board -> default limits used when nothing is stored
        persist: write replacements to the database
    """

    def __init__(
        self,
        defaults: Optional[Mapping[str, Mapping[str, int]]] = None,
        persist: bool = True,
    ):
        self.defaults = {board: dict(v) for board, v in (defaults or DEFAULT_LIMITS).items()}
        self.persist = persist

        self._limits: Dict[str, Dict[str, int]] = {b: dict(v) for b, v in self.defaults.items()}
        self._lock = threading.Lock()
        self._listeners: List[LimitsListener] = []
        self._loaded = False
        self._updated_at: Optional[datetime] = None

    @property
    def boards(self) -> List[str]:
        return list(self.defaults)

    def load(self) -> None:
        """Load stored boards from the database, keeping defaults for empty ones."""
        if not self.persist:
            self._loaded = True
            return

        stored: Dict[str, Dict[str, int]] = {}
        with get_session() as session:
            for row in session.scalars(select(RegionLimit)):
                stored.setdefault(row.board, {})[row.region] = row.limit

        with self._lock:
            for board, limits in stored.items():
                if board in self.defaults:
                    self._limits[board] = limits
            self._loaded = True

        logger.info(f'Limits loaded for boards: {sorted(stored) or "defaults only"}')

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def get(self, board: str) -> Dict[str, int]:
        """Copy of the current limits for a board."""
        if board not in self.defaults:
            raise ValueError(f'Unknown limits board: {board!r}')
        self._ensure_loaded()
        with self._lock:
            return dict(self._limits[board])

    def get_all(self) -> Dict[str, Dict[str, int]]:
        self._ensure_loaded()
        with self._lock:
            return {board: dict(limits) for board, limits in self._limits.items()}

    def replace(self, board: str, limits: Any) -> Dict[str, int]:
        """
        Replace a board wholesale, persist it, and notify listeners.

        Returns the stored mapping.
        """
        clean = validate_limits(board, limits, self.defaults)
        self._ensure_loaded()

        with self._lock:
            if self.persist:
                self._write(board, clean)
            self._limits[board] = clean
            self._updated_at = datetime.now(timezone.utc)

        logger.info(f'Limits replaced for {board}: {len(clean)} regions')
        self._notify(board, dict(clean))
        return dict(clean)

    def _write(self, board: str, limits: Dict[str, int]) -> None:
        now = datetime.now(timezone.utc)
        with get_session() as session:
            session.execute(delete(RegionLimit).where(RegionLimit.board == board))
            session.add_all([
                RegionLimit(board=board, region=region, limit=value, updated_at=now)
                for region, value in limits.items()
            ])

    def subscribe(self, listener: LimitsListener) -> None:
        """Register a callback invoked with (board, limits) after each replacement."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def _notify(self, board: str, limits: Dict[str, int]) -> None:
        for listener in self._listeners:
            try:
                listener(board, limits)
            except Exception as e:
                logger.error(f'Limits listener error: {e}')

    @property
    def stats(self) -> dict:
        with self._lock:
            return {
                'boards': {board: len(limits) for board, limits in self._limits.items()},
                'listeners': len(self._listeners),
                'updated_at': self._updated_at.isoformat() if self._updated_at else None,
            }


# Singleton instance
limits_store = LimitsStore()
