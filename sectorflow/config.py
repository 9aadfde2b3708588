"""
Configuration management for SectorFlow.

Loads settings from environment variables with sensible defaults.
All configuration is centralized here to avoid magic strings scattered
throughout the codebase.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DATA_DIR = Path(os.getenv('SECTORFLOW_DATA_DIR', Path(__file__).resolve().parent.parent / 'data'))


@dataclass(frozen=True)
class FeedConfig:
    """VATSIM data feed configuration."""
    url: str = os.getenv('VATSIM_DATA_URL', 'https://data.vatsim.net/v3/vatsim-data.json')
    timeout_seconds: int = int(os.getenv('FEED_TIMEOUT_SECONDS', '15'))
    poll_interval: int = int(os.getenv('POLL_INTERVAL_SECONDS', '15'))


@dataclass(frozen=True)
class DatabaseConfig:
    """Database configuration."""
    url: str = os.getenv('DATABASE_URL', 'sqlite:///sectorflow.db')

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith('sqlite')


@dataclass(frozen=True)
class PredictionConfig:
    """Prediction engine settings."""
    horizon_hours: int = int(os.getenv('HORIZON_HOURS', '5'))
    # 'route' follows the filed route, 'dead_reckoning' projects on heading only
    sector_projection: str = os.getenv('SECTOR_PROJECTION', 'route')

    min_altitude_ft: int = 100
    heading_tolerance_deg: float = 30.0
    low_altitude_ft: int = 10000  # Center yields to approach at or below this
    default_max_alt_ft: int = 60000
    default_gate_speed_kts: float = 450.0
    near_limit_ratio: float = 0.75
    max_horizon_hours: int = 24


@dataclass(frozen=True)
class ReferenceConfig:
    """Static reference dataset locations."""
    routes_path: Path = Path(os.getenv('ROUTES_PATH', DATA_DIR / 'routes.json'))
    airports_path: Path = Path(os.getenv('AIRPORTS_PATH', DATA_DIR / 'airports.json'))
    sectors_path: Path = Path(os.getenv('SECTORS_PATH', DATA_DIR / 'zsu_sector_boundaries.geojson'))

    # Batch size for reference table imports
    batch_size: int = 5000


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    feed: FeedConfig
    database: DatabaseConfig
    prediction: PredictionConfig
    reference: ReferenceConfig

    # Flask settings
    secret_key: str
    debug: bool


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    return AppConfig(
        feed=FeedConfig(),
        database=DatabaseConfig(),
        prediction=PredictionConfig(),
        reference=ReferenceConfig(),
        secret_key=os.getenv('SECRET_KEY', 'dev-key-change-in-prod'),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
    )


# Singleton instance
config = load_config()
