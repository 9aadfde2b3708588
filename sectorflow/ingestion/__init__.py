"""
Telemetry ingestion and prediction pipeline.

Pulls the VATSIM network snapshot and feeds it through the prediction
engine on a fixed interval.
"""

from sectorflow.ingestion.vatsim_client import VatsimClient, parse_pilot
from sectorflow.ingestion.pipeline import PredictionPipeline

__all__ = ['VatsimClient', 'parse_pilot', 'PredictionPipeline']
