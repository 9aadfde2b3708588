"""
Waypoint model - airway fixes from the static route database.

One row per (airway, fix) occurrence. The same identifier appears on
several airways and sometimes in unrelated regions; rows are never
deduplicated. The surrogate id preserves import order, which is the
"table order" used to break ties when resolving duplicates.
"""

from sqlalchemy import String, Float, Integer, Index
from sqlalchemy.orm import Mapped, mapped_column

from sectorflow.models.base import Base


class Waypoint(Base):
    """A fix at a given position along a named airway."""

    __tablename__ = 'waypoints'

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment='Surrogate key, preserves import order'
    )

    airway: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment='Airway designator (e.g., A300)'
    )

    order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment='Position of the fix along its airway'
    )

    ident: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        index=True,
        comment='Fix identifier (e.g., SAALR)'
    )

    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    __table_args__ = (
        Index('ix_waypoints_airway_order', 'airway', 'order'),
    )

    def __repr__(self) -> str:
        return f'<Waypoint {self.ident} {self.airway}#{self.order}>'

    def to_route_entry(self) -> dict:
        """Same shape as an entry in routes.json."""
        return {
            'order': self.order,
            'waypoint': self.ident,
            'lat': self.latitude,
            'lon': self.longitude,
        }
