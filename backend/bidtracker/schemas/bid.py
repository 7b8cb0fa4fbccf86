from datetime import date, datetime
from typing import Optional, List, Union
from pydantic import BaseModel, computed_field

from bidtracker.models.enums import audit_field_label, bid_status_label, opportunity_type_label
from bidtracker.services.bid_values import format_currency_gbp


class BidPayload(BaseModel):
    """Raw bid fields as submitted by the create/edit form. Validated by normalize_bid_payload."""
    client_name: Optional[str] = None
    bid_name: Optional[str] = None
    status: Optional[str] = None
    opportunity_type: Optional[str] = None
    current_stage: Optional[str] = None
    next_stage_date: Optional[str] = None
    psq_received_at: Optional[str] = None
    psq_clarification_deadline_at: Optional[str] = None
    psq_submission_deadline_at: Optional[str] = None
    psq_submission_time: Optional[str] = None
    itt_received_at: Optional[str] = None
    itt_clarification_deadline_at: Optional[str] = None
    itt_submission_deadline_at: Optional[str] = None
    itt_submission_time: Optional[str] = None
    tcv_gbp: Optional[Union[int, str]] = None
    initial_term_months: Optional[Union[int, str]] = None
    extension_term_months: Optional[Union[int, str]] = None
    tcv_term_basis: Optional[str] = None
    portal_url: Optional[str] = None
    folder_url: Optional[str] = None


class BidResponse(BaseModel):
    id: str
    client_name: str
    bid_name: str
    status: str
    opportunity_type: str
    current_stage: Optional[str] = None
    next_stage_date: Optional[date] = None
    psq_received_at: Optional[date] = None
    psq_clarification_deadline_at: Optional[date] = None
    psq_submission_deadline_at: Optional[date] = None
    psq_submission_time: Optional[str] = None
    itt_received_at: Optional[date] = None
    itt_clarification_deadline_at: Optional[date] = None
    itt_submission_deadline_at: Optional[date] = None
    itt_submission_time: Optional[str] = None
    tcv_gbp: Optional[int] = None
    initial_term_months: Optional[int] = None
    extension_term_months: Optional[int] = None
    tcv_term_basis: Optional[str] = None
    annual_value_gbp: Optional[int] = None
    portal_url: Optional[str] = None
    folder_url: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @computed_field
    @property
    def status_label(self) -> str:
        return bid_status_label(self.status)

    @computed_field
    @property
    def opportunity_type_label(self) -> str:
        return opportunity_type_label(self.opportunity_type)

    @computed_field
    @property
    def annual_value_display(self) -> str:
        return format_currency_gbp(self.annual_value_gbp)


class AuditChangeResponse(BaseModel):
    id: str
    field: str
    from_value: str
    to_value: str

    class Config:
        from_attributes = True

    @computed_field
    @property
    def field_label(self) -> str:
        return audit_field_label(self.field)


class AuditEventResponse(BaseModel):
    id: str
    bid_id: Optional[str] = None
    bid_id_snapshot: str
    bid_label: Optional[str] = None
    action: str
    actor: str
    created_at: Optional[datetime] = None
    changes: List[AuditChangeResponse] = []

    class Config:
        from_attributes = True


class BidDetailResponse(BidResponse):
    audit_events: List[AuditEventResponse] = []


class OptionResponse(BaseModel):
    value: str
    label: str


class BidOptionsResponse(BaseModel):
    statuses: List[OptionResponse]
    opportunity_types: List[OptionResponse]
    stages: List[OptionResponse]
    tcv_term_bases: List[OptionResponse]


class ImportResultResponse(BaseModel):
    inserted: int
    skipped: int


class ResetRequest(BaseModel):
    confirm: str = ""


class ResetResultResponse(BaseModel):
    deleted: int
    audit_deleted: int
