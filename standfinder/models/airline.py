"""
Airline behaviour at airports.

Two kinds of learned/curated data feed the middle stages:
- AirlineTerminalAssignment: which terminal an airline uses (curated)
- AirlineStandPattern: which stands an airline has historically used,
  with a probability score (learned)
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, Float, Integer, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from standfinder.models.base import Base


class AirlineTerminalAssignment(Base):
    """
    Airline to terminal mapping at one airport.

    An airline may have several rows (e.g., by pier); the highest
    priority wins.
    """

    __tablename__ = 'airline_terminal_assignments'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    airport_id: Mapped[str] = mapped_column(
        String(4),
        ForeignKey('airports.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )

    airline_icao: Mapped[str] = mapped_column(String(3), nullable=False)
    airline_iata: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)
    terminal: Mapped[str] = mapped_column(String(20), nullable=False)
    pier: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    priority: Mapped[int] = mapped_column(Integer, default=0)

    __table_args__ = (
        Index('ix_assignment_airport_airline', 'airport_id', 'airline_icao'),
    )

    def __repr__(self) -> str:
        return f'<AirlineTerminalAssignment {self.airline_icao}@{self.airport_id} T{self.terminal}>'


class AirlineStandPattern(Base):
    """
    Historical stand usage for an airline at an airport.

    probability_score is the share of observed arrivals that used this
    stand, in [0, 1].
    """

    __tablename__ = 'airline_stand_patterns'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    airport_id: Mapped[str] = mapped_column(
        String(4),
        ForeignKey('airports.id', ondelete='CASCADE'),
        nullable=False,
    )

    airline_icao: Mapped[str] = mapped_column(String(3), nullable=False)
    stand_name: Mapped[str] = mapped_column(String(20), nullable=False)
    usage_count: Mapped[int] = mapped_column(Integer, default=0)
    probability_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    last_seen: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        Index('ix_pattern_airport_airline_score', 'airport_id', 'airline_icao', 'probability_score'),
    )

    def __repr__(self) -> str:
        return f'<AirlineStandPattern {self.airline_icao}@{self.airport_id} {self.stand_name} p={self.probability_score:.2f}>'
