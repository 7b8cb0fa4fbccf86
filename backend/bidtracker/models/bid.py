import uuid

from sqlalchemy import Column, Integer, String, Text, Date, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from bidtracker.models.base import Base
from bidtracker.models.enums import BidStatus, OpportunityType


def new_id() -> str:
    return uuid.uuid4().hex


class Bid(Base):
    __tablename__ = "bids"

    id = Column(String(32), primary_key=True, default=new_id)
    client_name = Column(String(255), nullable=False, index=True)
    bid_name = Column(String(255), nullable=False)
    status = Column(String(50), default=BidStatus.pending.value, nullable=False, index=True)
    opportunity_type = Column(String(50), default=OpportunityType.single_tender.value, nullable=False)

    # Stage tracking, only populated for two stage PSQ/ITT opportunities
    current_stage = Column(String(10), nullable=True)
    next_stage_date = Column(Date, nullable=True)

    psq_received_at = Column(Date, nullable=True)
    psq_clarification_deadline_at = Column(Date, nullable=True)
    psq_submission_deadline_at = Column(Date, nullable=True)
    psq_submission_time = Column(String(5), nullable=True)  # "HH:MM"
    itt_received_at = Column(Date, nullable=True)
    itt_clarification_deadline_at = Column(Date, nullable=True)
    itt_submission_deadline_at = Column(Date, nullable=True)
    itt_submission_time = Column(String(5), nullable=True)  # "HH:MM"

    # Commercial terms are nullable because bulk imports may leave them blank
    tcv_gbp = Column(Integer, nullable=True)
    initial_term_months = Column(Integer, nullable=True)
    extension_term_months = Column(Integer, nullable=True)
    tcv_term_basis = Column(String(50), nullable=True)
    annual_value_gbp = Column(Integer, nullable=True)  # derived, recomputed on every mutation

    portal_url = Column(Text, nullable=True)
    folder_url = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    audit_events = relationship("AuditEvent", back_populates="bid", order_by="AuditEvent.created_at")
