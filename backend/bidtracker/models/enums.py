from __future__ import annotations

from enum import Enum


class BidStatus(str, Enum):
    pending = "pending"
    pipeline = "pipeline"
    in_progress = "in_progress"
    bid = "bid"
    no_bid = "no_bid"
    submitted = "submitted"
    won = "won"
    lost = "lost"
    dropped = "dropped"
    abandoned = "abandoned"


class OpportunityType(str, Enum):
    single_tender = "single_tender"
    combined_psq_itt = "combined_psq_itt"
    two_stage_psq_itt = "two_stage_psq_itt"


class BidStage(str, Enum):
    psq = "psq"
    itt = "itt"


class TcvTermBasis(str, Enum):
    initial_only = "initial_only"
    initial_plus_extension = "initial_plus_extension"


class AuditAction(str, Enum):
    update = "update"
    delete = "delete"


class UserRole(str, Enum):
    engineer = "engineer"
    supervisor = "supervisor"
    bids = "bids"
    admin = "admin"


BID_STATUS_LABELS = {
    BidStatus.pending: "Pending",
    BidStatus.pipeline: "Pipeline",
    BidStatus.in_progress: "In progress",
    BidStatus.bid: "Bid",
    BidStatus.no_bid: "No bid",
    BidStatus.submitted: "Submitted",
    BidStatus.won: "Won",
    BidStatus.lost: "Lost",
    BidStatus.dropped: "Dropped",
    BidStatus.abandoned: "Abandoned",
}

OPPORTUNITY_TYPE_LABELS = {
    OpportunityType.single_tender: "Single Tender",
    OpportunityType.combined_psq_itt: "Combined PSQ/ITT",
    OpportunityType.two_stage_psq_itt: "Two Stage PSQ/ITT",
}

BID_STAGE_LABELS = {
    BidStage.psq: "PSQ",
    BidStage.itt: "ITT",
}

TCV_TERM_BASIS_LABELS = {
    TcvTermBasis.initial_only: "Initial term only",
    TcvTermBasis.initial_plus_extension: "Initial + extension",
}

# Keyed by the camelCase field names recorded on AuditChange rows.
AUDIT_FIELD_LABELS = {
    "clientName": "Client name",
    "bidName": "Bid name",
    "status": "Status",
    "opportunityType": "Opportunity type",
    "currentStage": "Current stage",
    "nextStageDate": "Next stage date",
    "psqReceivedAt": "PSQ received",
    "psqClarificationDeadlineAt": "PSQ clarification deadline",
    "psqSubmissionDeadlineAt": "PSQ submission deadline",
    "psqSubmissionTime": "PSQ submission time",
    "ittReceivedAt": "ITT received",
    "ittClarificationDeadlineAt": "ITT clarification deadline",
    "ittSubmissionDeadlineAt": "ITT submission deadline",
    "ittSubmissionTime": "ITT submission time",
    "tcvGbp": "Total contract value",
    "initialTermMonths": "Initial term (months)",
    "extensionTermMonths": "Extension term (months)",
    "tcvTermBasis": "TCV term basis",
    "annualValueGbp": "Annual value",
    "portalUrl": "Portal link",
    "folderUrl": "SharePoint folder URL",
}


def enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


def parse_enum(enum_cls, value: str | None):
    """Return the enum member for a raw value, or None when it is not a member."""
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _label(labels: dict, enum_cls, value: str | None) -> str:
    member = parse_enum(enum_cls, value)
    if member is not None and member in labels:
        return labels[member]
    return (value or "").replace("_", " ")


def bid_status_label(status: str | None) -> str:
    return _label(BID_STATUS_LABELS, BidStatus, status)


def opportunity_type_label(opportunity_type: str | None) -> str:
    return _label(OPPORTUNITY_TYPE_LABELS, OpportunityType, opportunity_type)


def bid_stage_label(stage: str | None) -> str:
    member = parse_enum(BidStage, stage)
    if member is not None:
        return BID_STAGE_LABELS[member]
    return (stage or "").upper()


def tcv_term_basis_label(basis: str | None) -> str:
    return _label(TCV_TERM_BASIS_LABELS, TcvTermBasis, basis)


def audit_field_label(field: str | None) -> str:
    return AUDIT_FIELD_LABELS.get(field or "", field or "")
