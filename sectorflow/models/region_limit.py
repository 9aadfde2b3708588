"""
RegionLimit model - operator-set capacity limits.

Limits are grouped into boards ('sectors', 'gates'). A board is always
replaced as a whole: the store deletes every row for the board and
inserts the new mapping in one transaction, so the last writer wins.
"""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from sectorflow.models.base import Base


class RegionLimit(Base):
    """Maximum aircraft per 15-minute slot for one region."""

    __tablename__ = 'region_limits'

    board: Mapped[str] = mapped_column(
        String(16),
        primary_key=True,
        comment="Limit board: 'sectors' or 'gates'"
    )

    region: Mapped[str] = mapped_column(
        String(32),
        primary_key=True,
        comment='Sector or gate name'
    )

    limit: Mapped[int] = mapped_column(Integer, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        comment='When this board was last replaced'
    )

    def __repr__(self) -> str:
        return f'<RegionLimit {self.board}/{self.region}={self.limit}>'
