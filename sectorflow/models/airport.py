"""
Airport model - static reference data for destination lookups.
"""

from typing import Optional

from sqlalchemy import String, Float, Integer
from sqlalchemy.orm import Mapped, mapped_column

from sectorflow.models.base import Base


class Airport(Base):
    """Airport keyed by ICAO code."""

    __tablename__ = 'airports'

    icao: Mapped[str] = mapped_column(
        String(8),
        primary_key=True,
        comment='ICAO location indicator (e.g., TJSJ)'
    )

    iata: Mapped[Optional[str]] = mapped_column(String(4), nullable=True)
    name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
    elevation: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, comment='Elevation in feet')

    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    def __repr__(self) -> str:
        return f'<Airport {self.icao} {self.name or "?"}>'
