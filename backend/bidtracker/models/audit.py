from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from bidtracker.models.base import Base
from bidtracker.models.bid import new_id
from bidtracker.models.enums import AuditAction


class AuditEvent(Base):
    """One update or delete of a bid. Never edited after it is written."""
    __tablename__ = "audit_events"

    id = Column(String(32), primary_key=True, default=new_id)
    # Nulled when the bid is deleted; bid_id_snapshot keeps the reference.
    bid_id = Column(String(32), ForeignKey("bids.id", ondelete="SET NULL"), nullable=True, index=True)
    bid_id_snapshot = Column(String(32), nullable=False, index=True)
    bid_label = Column(String(512), nullable=True)  # "<client> · <bid>" at time of mutation
    action = Column(String(20), default=AuditAction.update.value, nullable=False)
    actor = Column(String(255), default="admin", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    bid = relationship("Bid", back_populates="audit_events")
    changes = relationship(
        "AuditChange",
        back_populates="event",
        cascade="all, delete-orphan",
        order_by="AuditChange.position",
    )


class AuditChange(Base):
    __tablename__ = "audit_changes"

    id = Column(String(32), primary_key=True, default=new_id)
    event_id = Column(String(32), ForeignKey("audit_events.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)  # order within the event
    field = Column(String(64), nullable=False)  # camelCase bid field key, e.g. "clientName"
    from_value = Column(Text, nullable=False, default="")
    to_value = Column(Text, nullable=False, default="")

    event = relationship("AuditEvent", back_populates="changes")
