"""
Aircraft model - static reference data keyed by ICAO type designator.

Supplies the wingspan used by the aircraft size compatibility stage.
This data is relatively static and maintained outside the resolver.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, Float, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from standfinder.geo import get_aircraft_size_code
from standfinder.models.base import Base


class Aircraft(Base):
    """
    Dimensions and classification for one aircraft type.

    Fields:
        icao_type: ICAO type designator (e.g., 'A320', 'B77W')
        iata_type: IATA equipment code (e.g., '320', '77W')
        wingspan_m: Wingspan in meters
        size_code: ICAO Aerodrome Reference Code letter (A-F)
        category: Free-form category (narrowbody, widebody, regional)
    """

    __tablename__ = 'aircraft'

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    icao_type: Mapped[str] = mapped_column(
        String(4),
        nullable=False,
        unique=True,
        index=True,
        comment='ICAO type designator (e.g., A320)'
    )

    iata_type: Mapped[Optional[str]] = mapped_column(
        String(3),
        nullable=True,
        comment='IATA equipment code'
    )

    manufacturer: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    model: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Dimensions (meters)
    wingspan_m: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    length_m: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    height_m: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    size_code: Mapped[Optional[str]] = mapped_column(
        String(1),
        nullable=True,
        comment='ICAO Aerodrome Reference Code letter'
    )

    category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Metadata
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        comment='Record creation timestamp'
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        comment='Last update timestamp'
    )

    def __repr__(self) -> str:
        return f'<Aircraft {self.icao_type} {self.wingspan_m or "?"}m>'

    @property
    def effective_size_code(self) -> Optional[str]:
        """Stored size code, or one derived from wingspan."""
        if self.size_code:
            return self.size_code
        if self.wingspan_m:
            return get_aircraft_size_code(self.wingspan_m)
        return None
