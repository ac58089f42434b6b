"""
Airport and Stand models - the physical reference data stages search.

Airports are keyed by ICAO code. Stands belong to one airport and are
unique by name within it.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import String, Float, Integer, DateTime, Boolean, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from standfinder.models.base import Base


class Airport(Base):
    """
    An airport, keyed by its 4-letter ICAO code (e.g., 'EGLL').
    """

    __tablename__ = 'airports'

    id: Mapped[str] = mapped_column(
        String(4),
        primary_key=True,
        comment='ICAO airport code'
    )

    iata: Mapped[Optional[str]] = mapped_column(
        String(3),
        nullable=True,
        index=True,
        comment='IATA airport code (e.g., LHR)'
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    country: Mapped[str] = mapped_column(String(100), nullable=False, default='')

    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    altitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    time_zone: Mapped[Optional[str]] = mapped_column('timezone', String(50), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
    )

    stands: Mapped[List['Stand']] = relationship(back_populates='airport')

    def __repr__(self) -> str:
        return f'<Airport {self.id} {self.iata or "?"} {self.name}>'

    def to_dict(self) -> dict:
        return {
            'icao': self.id,
            'iata': self.iata,
            'name': self.name,
            'city': self.city,
            'country': self.country,
        }


class Stand(Base):
    """
    A parking stand.

    Coordinates are optional; only stands with coordinates take part in
    position matching. max_wingspan_m of None means no size restriction.
    airline_preference holds the ICAO code of an airline that usually
    parks here, if any.
    """

    __tablename__ = 'stands'

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    airport_id: Mapped[str] = mapped_column(
        String(4),
        ForeignKey('airports.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )

    stand_name: Mapped[str] = mapped_column(String(20), nullable=False)
    terminal: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    gate: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    pier: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Size restrictions
    max_wingspan_m: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    max_length_m: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    aircraft_size_code: Mapped[Optional[str]] = mapped_column(String(1), nullable=True)

    jet_bridge_available: Mapped[bool] = mapped_column(Boolean, default=False)
    contact_stand: Mapped[bool] = mapped_column(Boolean, default=False)

    # Position (WGS84)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    airline_preference: Mapped[Optional[str]] = mapped_column(
        String(3),
        nullable=True,
        comment='ICAO code of preferred airline'
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
    )

    airport: Mapped['Airport'] = relationship(back_populates='stands')

    __table_args__ = (
        UniqueConstraint('airport_id', 'stand_name', name='uq_stand_airport_name'),
        Index('ix_stand_airport_terminal', 'airport_id', 'terminal'),
    )

    def __repr__(self) -> str:
        return f'<Stand {self.airport_id}/{self.stand_name}>'

    @property
    def has_position(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def to_dict(self) -> dict:
        return {
            'name': self.stand_name,
            'terminal': self.terminal,
            'max_wingspan_m': self.max_wingspan_m,
            'max_length_m': self.max_length_m,
            'aircraft_size_code': self.aircraft_size_code,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'airline_preference': self.airline_preference,
        }
