"""
Webhook Delivery Model - append-only log of GitHub deliveries.

The primary key on ``delivery_id`` is the dedup gate: a redelivered
``X-GitHub-Delivery`` fails the insert and is answered as a duplicate.
"""
from sqlalchemy import Column, Text, DateTime, Index

from hydianflow.core.clock import utcnow
from hydianflow.db.database import Base


class WebhookDelivery(Base):
    """One received GitHub delivery"""

    __tablename__ = "github_event_log"

    # Both are header values sent by GitHub; no length is assumed
    delivery_id = Column(Text, primary_key=True)
    event_type = Column(Text, nullable=False)
    raw_payload = Column(Text, nullable=False)
    received_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_github_event_log_event_received", "event_type", "received_at"),
    )
