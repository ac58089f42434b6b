"""
Records written next to the resolver.

- FlightCache: append-only archive of every resolution served, so audit
  data always matches what callers received.
- CrowdsourcedReport: stand sightings submitted by users, held for
  moderation before they are published.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, Float, Integer, DateTime, Boolean, ForeignKey, Text, Index
from sqlalchemy.orm import Mapped, mapped_column

from standfinder.models.base import Base


class FlightCache(Base):
    """One served stand resolution."""

    __tablename__ = 'flight_cache'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    flight_identifier: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    airport_id: Mapped[str] = mapped_column(String(4), nullable=False)
    arrival_timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    resolved_stand: Mapped[str] = mapped_column(String(20), nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    fallback_level: Mapped[int] = mapped_column(Integer, nullable=False)

    # JSON-encoded list of source names and stage metadata
    data_sources: Mapped[str] = mapped_column(Text, nullable=False, default='[]')
    raw_data_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        Index('ix_flight_cache_lookup', 'flight_identifier', 'airport_id', 'arrival_timestamp'),
    )

    def __repr__(self) -> str:
        return f'<FlightCache {self.flight_identifier}@{self.airport_id} -> {self.resolved_stand}>'


class CrowdsourcedReport(Base):
    """A user-submitted stand sighting."""

    __tablename__ = 'crowdsourced_reports'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    airport_id: Mapped[str] = mapped_column(
        String(4),
        ForeignKey('airports.id', ondelete='RESTRICT'),
        nullable=False,
        index=True,
    )

    stand_name: Mapped[str] = mapped_column(String(20), nullable=False)
    flight_identifier: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    reporter_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    confidence_score: Mapped[float] = mapped_column(Float, default=0.5)
    verified: Mapped[bool] = mapped_column(Boolean, default=False)
    # pending -> approved | rejected
    moderation_status: Mapped[str] = mapped_column(String(20), default='pending', index=True)
    upvotes: Mapped[int] = mapped_column(Integer, default=0)
    downvotes: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f'<CrowdsourcedReport {self.airport_id}/{self.stand_name} {self.moderation_status}>'

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'stand_name': self.stand_name,
            'flight_identifier': self.flight_identifier,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'confidence_score': self.confidence_score,
            'verified': self.verified,
        }
